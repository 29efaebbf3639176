"""
raven.database.engine — Engine, sessions, and the thread bridge
=================================================================

SQLAlchemy is used synchronously.  Async callers (the novelty cache via
:class:`~raven.services.sql_store.SqlStore`) go through :func:`run_db`,
which runs the sync function on a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from raven.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def create_db_engine(url: str | None = None) -> Engine:
    """Engine for *url*, falling back to ``DATABASE_URL``.

    Raises :class:`RuntimeError` when neither is set.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and point it at the cache database."
        )

    engine = create_engine(url, pool_pre_ping=True)
    logger.info("Cache database: %s", engine.url.render_as_string(hide_password=True))
    return engine


def init_db(engine: Engine) -> None:
    """Create ``novelty_cache`` if Alembic has not already done so."""
    Base.metadata.create_all(engine)


@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    """One unit of work: commit on clean exit, roll back and re-raise otherwise."""
    with Session(engine) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    return await asyncio.to_thread(func, *args, **kwargs)
