"""
raven.engine.cycle — One fetch → diff → dispatch → persist pass per source
===========================================================================

How a cycle works, per entity kind of a source:

    1. Fetch the current collection (all kinds concurrently).  An error or
       "no data" ends this kind's cycle: no dispatch, no cache write.
    2. Read the baseline snapshot.  A read error ends the cycle too; it
       must never be mistaken for "first run".
    3. No baseline → store the fetch as the baseline and notify nothing.
    4. Otherwise diff by id, attach votes/comments to their parent from the
       *same-cycle* fetch (skipping orphans), and fan out to the handlers.
    5. Replace the snapshot with the fetch, whatever the dispatch outcome.

A child kind whose parent kind could not be fetched this cycle is deferred
entirely, so its new entities are picked up on the next cycle instead of
being silently absorbed into the baseline.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from raven.constants import SourceProfile
from raven.engine.cache import NoveltyCache
from raven.engine.entities import Entity, EntityKind
from raven.engine.novelty import find_new_entities, resolve_references
from raven.errors import CacheReadError, CacheWriteError, FetchError
from raven.services.dispatcher import DEFAULT_DISPATCH_TIMEOUT, fanout
from raven.services.handler import NotificationHandler

logger = logging.getLogger(__name__)


class EntitySource(Protocol):
    """What the orchestrator needs from a source adapter."""

    profile: SourceProfile

    @property
    def name(self) -> str: ...

    @property
    def kinds(self) -> tuple[EntityKind, ...]: ...

    async def fetch(self, kind: EntityKind) -> list[Entity] | None: ...


@dataclass(slots=True)
class CycleReport:
    """What happened to one (source, kind) during one cycle."""

    source: str
    kind: EntityKind
    fetched: int = 0
    new: int = 0
    skipped: int = 0
    dispatched: int = 0
    failed: int = 0
    cold_start: bool = False
    cache_written: bool = False
    aborted: str | None = None

    def summary(self) -> str:
        if self.aborted:
            return f"{self.source}:{self.kind.value} aborted ({self.aborted})"
        if self.cold_start:
            return f"{self.source}:{self.kind.value} baseline of {self.fetched} stored"
        return (
            f"{self.source}:{self.kind.value} fetched={self.fetched} new={self.new} "
            f"skipped={self.skipped} dispatched={self.dispatched} failed={self.failed} "
            f"cached={self.cache_written}"
        )


# (entities or None, reason when None)
_FetchOutcome = tuple[list[Entity] | None, str | None]


class Orchestrator:
    """Drives cycles for one source against one cache and a list of handlers."""

    def __init__(
        self,
        source: EntitySource,
        cache: NoveltyCache,
        handlers: Sequence[NotificationHandler],
        *,
        dispatch_timeout: float = DEFAULT_DISPATCH_TIMEOUT,
    ) -> None:
        self.source = source
        self.cache = cache
        self.handlers = list(handlers)
        self.dispatch_timeout = dispatch_timeout

    @property
    def name(self) -> str:
        return self.source.name

    async def run_cycle(self) -> list[CycleReport]:
        """Run one full cycle for every kind the source exposes."""
        kinds = self.source.kinds
        logger.info("Cycle start: %s (%s)", self.name, ", ".join(k.value for k in kinds))

        fetched = await asyncio.gather(*(self._fetch(k) for k in kinds))
        outcomes: dict[EntityKind, _FetchOutcome] = dict(zip(kinds, fetched))

        reports = await asyncio.gather(*(self._run_kind(k, outcomes) for k in kinds))
        return list(reports)

    async def _fetch(self, kind: EntityKind) -> _FetchOutcome:
        try:
            entities = await self.source.fetch(kind)
        except FetchError as exc:
            logger.error("Failed to fetch %s from %s: %s", kind.value, self.name, exc)
            return None, "fetch failed"
        except Exception:
            logger.exception("Unexpected error fetching %s from %s", kind.value, self.name)
            return None, "fetch failed"

        if entities is None:
            logger.info("%s reported no %s data; skipping this cycle", self.name, kind.value)
            return None, "no data"
        return entities, None

    async def _run_kind(
        self, kind: EntityKind, outcomes: dict[EntityKind, _FetchOutcome]
    ) -> CycleReport:
        report = CycleReport(source=self.name, kind=kind)

        entities, reason = outcomes[kind]
        if entities is None:
            report.aborted = reason
            return report
        report.fetched = len(entities)

        parent_kind = self.source.profile.parent_kind(kind)
        parents: list[Entity] = []
        if parent_kind is not None:
            parent_entities, _ = outcomes.get(parent_kind, (None, None))
            if parent_entities is None:
                logger.warning(
                    "Deferring %s for %s: %s unavailable this cycle",
                    kind.value, self.name, parent_kind.value,
                )
                report.aborted = f"{parent_kind.value} unavailable"
                return report
            parents = parent_entities

        try:
            baseline = await self.cache.get(self.name, kind)
        except CacheReadError as exc:
            logger.error("Aborting %s for %s: %s", kind.value, self.name, exc)
            report.aborted = "cache read failed"
            return report

        if baseline is None:
            logger.info(
                "No baseline for %s:%s; storing %d entities without notifying",
                self.name, kind.value, len(entities),
            )
            report.cold_start = True
            await self._persist(kind, entities, report)
            return report

        new_entities = find_new_entities(entities, baseline)
        report.new = len(new_entities)

        novelties, gaps = resolve_references(kind, new_entities, parent_kind, parents)
        for gap in gaps:
            logger.warning("Skipping %s for %s: %s", kind.value, self.name, gap)
        report.skipped = len(gaps)

        if novelties:
            logger.info("Dispatching %d new %s for %s", len(novelties), kind.value, self.name)
            result = await fanout(novelties, self.handlers, timeout=self.dispatch_timeout)
            report.dispatched = result.attempted
            report.failed = result.failed

        await self._persist(kind, entities, report)
        return report

    async def _persist(self, kind: EntityKind, entities: list[Entity], report: CycleReport) -> None:
        try:
            await self.cache.set(self.name, kind, entities)
        except CacheWriteError as exc:
            logger.warning(
                "Cache write failed for %s:%s; next cycle may re-notify: %s",
                self.name, kind.value, exc,
            )
            return
        report.cache_written = True


async def run_sources(orchestrators: Sequence[Orchestrator]) -> list[CycleReport]:
    """Run one cycle for every source concurrently and collect the reports."""
    results = await asyncio.gather(
        *(o.run_cycle() for o in orchestrators), return_exceptions=True
    )
    reports: list[CycleReport] = []
    for orchestrator, result in zip(orchestrators, results):
        if isinstance(result, BaseException):
            logger.error(
                "Cycle for %s crashed", orchestrator.name, exc_info=result,
            )
            continue
        reports.extend(result)
    return reports
