"""
Guestbook Backend: GuestbookEntry SQLAlchemy Model
==================================================

What:  ORM model for the `guestbook_entries` table.
Who:   Created by the seed runner and by the add-entry endpoint; read by the
       guestbook view; deleted by administrators.

Lifecycle:
    1. Constructed with a name and a text; the creation timestamp is taken
       right there, in the constructor
    2. Saved through the entry repository, which assigns the integer id
    3. Never updated; removed only through the admin delete endpoint
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from guestbook.database import Base

NAME_MAX_LENGTH = 100


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{field} must not be null or blank")
    return value


class GuestbookEntry(Base):
    """A single guestbook submission: who wrote it, what, and when."""

    __tablename__ = "guestbook_entries"

    # Assigned by the database on flush
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH),
        nullable=False,
        comment="Author name",
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Message body",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        comment="When the entry was constructed (UTC)",
    )

    __table_args__ = (
        Index("idx_guestbook_entries_created_at", "created_at"),
    )

    def __init__(self, name: str, text: str, created_at: Optional[datetime] = None):
        super().__init__()
        self.name = _require_text(name, "name")
        self.text = _require_text(text, "text")
        self.created_at = created_at or datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return f"<GuestbookEntry(id={self.id}, name='{self.name}', created_at='{self.created_at}')>"
