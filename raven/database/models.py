"""
raven.database.models — SQLAlchemy 2.0 Data Models
===================================================

Tables:
- novelty_cache — one row per ``"<source>:<entity-kind>"`` key holding the
  last fetched snapshot as a JSON array.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Raven ORM models."""


# ---------------------------------------------------------------------------
# Novelty cache — persisted key → snapshot store
# ---------------------------------------------------------------------------
class CacheEntry(Base):
    """Key-value row backing :class:`~raven.services.sql_store.SqlStore`.

    Values are opaque to the database; the novelty cache writes a JSON
    array of entity records and replaces it wholesale every cycle.
    """
    __tablename__ = "novelty_cache"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CacheEntry key={self.key!r}>"
