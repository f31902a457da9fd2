"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: One table. String UUID primary keys instead of the old
INTEGER AUTOINCREMENT ids (see migrate.py for the one-time upgrade).
created_at is epoch milliseconds, not a DATETIME, so it round-trips
to JSON clients without any parsing.
"""

import time
import uuid

from sqlalchemy import BigInteger, String, Text
from sqlalchemy import text as sa_text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def new_id() -> str:
    return str(uuid.uuid4())


# SQLite expression for "now" in epoch milliseconds
NOW_MS_SQL = "(CAST((julianday('now') - 2440587.5) * 86400000 AS INTEGER))"


class Entry(Base):
    """A single logged line of text. Append-only: never updated or deleted."""

    __tablename__ = "entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, server_default=sa_text(NOW_MS_SQL)
    )

    def __repr__(self) -> str:
        return f"Entry(id={self.id!r}, text={self.text!r}, created_at={self.created_at})"
