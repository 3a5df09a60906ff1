from typing import Any, Dict, Optional, Set

from sqlalchemy import Table, func, inspect, select
from sqlalchemy.orm import declarative_base

from wishes.types.db_session import AsyncDbSession


class AugmentedBase:
    __tablename__: str
    __table__: Table

    def to_dict(self, exclude: Optional[Set[str]] = None) -> Dict[str, Any]:
        exclude_set = exclude if exclude is not None else set()
        insp = inspect(self)

        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in exclude_set and column.name not in insp.unloaded
        }

    @classmethod
    async def count(cls, session: AsyncDbSession) -> int:
        return (
            await session.execute(select(func.count()).select_from(cls.__table__))
        ).scalar_one()


Base = declarative_base(cls=AugmentedBase)
