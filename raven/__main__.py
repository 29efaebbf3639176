"""
raven.__main__ — Entry point for ``python -m raven``
=====================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (sources, handlers, timeouts).
3. Create the SQLAlchemy engine and ensure the cache table exists.
4. Build one orchestrator per source around a shared HTTP client.
5. Run one cycle for every source, or keep cycling every
   ``poll_interval`` seconds when it is set.

Run with::

    python -m raven
"""

from __future__ import annotations

import asyncio
import logging
import os

import httpx
from dotenv import load_dotenv

from raven.config import RavenConfig, load_config
from raven.database.engine import create_db_engine, init_db
from raven.engine.cache import NoveltyCache
from raven.engine.cycle import run_sources
from raven.services.registry import build_orchestrators
from raven.services.sql_store import SqlStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("raven")


async def run(cfg: RavenConfig, cache: NoveltyCache) -> None:
    """Run cycles until done (single shot) or interrupted (interval mode)."""
    async with httpx.AsyncClient(timeout=cfg.request_timeout) as client:
        orchestrators = build_orchestrators(cfg, cache, client)
        while True:
            reports = await run_sources(orchestrators)
            for report in reports:
                logger.info("%s", report.summary())

            if cfg.poll_interval <= 0:
                break
            await asyncio.sleep(cfg.poll_interval)


def main() -> None:
    """Bootstrap and run Raven."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Configuration.
    cfg = load_config(os.getenv("RAVEN_CONFIG", "config.yaml"))
    logger.info("Config loaded — %d source(s)", len(cfg.sources))

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)
    cache = NoveltyCache(SqlStore(engine))

    # 4–5. Cycle(s).
    try:
        asyncio.run(run(cfg, cache))
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
