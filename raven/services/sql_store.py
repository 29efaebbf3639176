"""
raven.services.sql_store — SQLAlchemy-backed key-value store
=============================================================

Persists novelty-cache snapshots in the ``novelty_cache`` table.  Session
work is synchronous and runs through :func:`run_db`.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine

from raven.database.engine import get_session, run_db
from raven.database.models import CacheEntry

logger = logging.getLogger(__name__)


def read_entry(engine: Engine, key: str) -> bytes | None:
    with get_session(engine) as session:
        row = session.get(CacheEntry, key)
        return row.value_json.encode("utf-8") if row else None


def write_entry(engine: Engine, key: str, value_json: str) -> None:
    """Insert or replace the row for *key* in one transaction."""
    with get_session(engine) as session:
        row = session.get(CacheEntry, key)
        if row is None:
            session.add(CacheEntry(key=key, value_json=value_json))
        else:
            row.value_json = value_json


class SqlStore:
    """:class:`~raven.engine.cache.KeyValueStore` over a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    async def get(self, key: str) -> bytes | None:
        return await run_db(read_entry, self._engine, key)

    async def set(self, key: str, value: bytes) -> None:
        await run_db(write_entry, self._engine, key, value.decode("utf-8"))
