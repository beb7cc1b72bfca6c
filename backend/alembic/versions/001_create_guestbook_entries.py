"""Create guestbook_entries table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `guestbook_entries` table.
Rollback: downgrade() drops the table (all entries are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "guestbook_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False, comment="Author name"),
        sa.Column("text", sa.Text(), nullable=False, comment="Message body"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            comment="When the entry was constructed (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_guestbook_entries_created_at",
        "guestbook_entries",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_guestbook_entries_created_at", table_name="guestbook_entries")
    op.drop_table("guestbook_entries")
