"""Create nested_set table

Revision ID: 4c2e9a7d1b30
Revises:
Create Date: 2026-10-19 12:30:04.118233

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c2e9a7d1b30"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    # Boundaries are not unique: shift statements pass through transient duplicates
    op.create_table(
        "nested_set",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lft", sa.Integer(), nullable=False),
        sa.Column("rgt", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(), nullable=True),
        sa.CheckConstraint("lft < rgt", name="ck_nested_set_bounds"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index("ix_nested_set_lft", "nested_set", ["lft"], unique=False)
    op.create_index("ix_nested_set_rgt", "nested_set", ["rgt"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_nested_set_rgt", table_name="nested_set")
    op.drop_index("ix_nested_set_lft", table_name="nested_set")
    op.drop_table("nested_set")
