"""create wishes table

Revision ID: 3c1f5e7a9b2d
Revises:
Create Date: 2026-10-12 10:21:43.518204

"""

import sqlalchemy as sa
from alembic import op

from wishes.db.functions import utcnow

# revision identifiers, used by Alembic.
revision = "3c1f5e7a9b2d"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "wishes",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("name", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=utcnow(),
        ),
        if_not_exists=True,
    )
    op.create_index(
        "wishes_created_at_idx",
        "wishes",
        [sa.text("created_at DESC")],
        if_not_exists=True,
    )
    op.create_index(
        "wishes_created_at_id_idx",
        "wishes",
        [sa.text("created_at DESC"), sa.text("id DESC")],
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_index("wishes_created_at_id_idx", table_name="wishes")
    op.drop_index("wishes_created_at_idx", table_name="wishes")
    op.drop_table("wishes")
