import datetime as dt

from sqlalchemy import TIMESTAMP, BigInteger, Column, Index, Integer, Text, text
from sqlalchemy.orm import Mapped

from wishes.db.functions import utcnow

from .base import Base


class WishDb(Base):
    __tablename__ = "wishes"

    # BIGSERIAL on PostgreSQL. SQLite only auto-increments INTEGER primary keys.
    id: Mapped[int] = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = Column(Text, nullable=False, server_default=text("''"))
    message: Mapped[str] = Column(Text, nullable=False)
    created_at: Mapped[dt.datetime] = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=utcnow()
    )

    __table_args__ = (
        Index("wishes_created_at_idx", created_at.desc()),
        # Matches the keyset pagination order.
        Index("wishes_created_at_id_idx", created_at.desc(), id.desc()),
    )
