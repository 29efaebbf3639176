"""
raven.engine.cache — Novelty Snapshot Cache
============================================

Holds the baseline each cycle diffs against: one entry per
``(source, entity kind)`` containing the full collection fetched by the
last successful cycle.

The physical store is injected (anything satisfying :class:`KeyValueStore`),
so production uses :class:`~raven.services.sql_store.SqlStore` and tests use
:class:`MemoryStore`.  Values are JSON arrays of entity records.

Usage::

    cache = NoveltyCache(MemoryStore())
    snapshot = await cache.get("lil_nouns", EntityKind.PROPOSAL)   # None on first run
    await cache.set("lil_nouns", EntityKind.PROPOSAL, proposals)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from raven.engine.entities import Entity, EntityId, EntityKind, dump_entities, parse_entities
from raven.errors import CacheReadError, CacheWriteError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal persisted key-value store the novelty cache sits on."""

    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes) -> None: ...


class MemoryStore:
    """Dict-backed :class:`KeyValueStore` for tests and dry runs."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    async def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self._data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._data


def cache_key(source: str, kind: EntityKind) -> str:
    """Build the ``"<source>:<entity-kind>"`` store key."""
    return f"{source}:{kind.value}"


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Ordered collection of one kind's records as of the previous cycle."""

    kind: EntityKind
    entities: tuple[Entity, ...]

    @property
    def ids(self) -> frozenset[EntityId]:
        return frozenset(e.id for e in self.entities)


class NoveltyCache:
    """Reads and replaces per-(source, kind) snapshots on a :class:`KeyValueStore`."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def get(self, source: str, kind: EntityKind) -> Snapshot | None:
        """Return the stored snapshot, or ``None`` when there is no baseline yet.

        Raises :class:`CacheReadError` when the store fails or holds something
        that is not a JSON array of valid records; callers must not mistake
        that for a cache miss.
        """
        key = cache_key(source, kind)
        try:
            raw = await self._store.get(key)
        except Exception as exc:
            raise CacheReadError(f"Failed to read cache key {key}: {exc}") from exc

        if raw is None:
            return None

        try:
            rows = json.loads(raw)
            if not isinstance(rows, list):
                raise ValueError("snapshot is not a JSON array")
            entities = parse_entities(kind, rows)
        except ValueError as exc:  # JSONDecodeError and pydantic ValidationError
            raise CacheReadError(f"Corrupt snapshot under {key}: {exc}") from exc

        return Snapshot(kind=kind, entities=tuple(entities))

    async def set(self, source: str, kind: EntityKind, entities: Sequence[Entity]) -> None:
        """Replace the snapshot for ``(source, kind)`` with *entities*."""
        key = cache_key(source, kind)
        payload = json.dumps(dump_entities(list(entities))).encode("utf-8")
        try:
            await self._store.set(key, payload)
        except Exception as exc:
            raise CacheWriteError(f"Failed to write cache key {key}: {exc}") from exc
        logger.debug("Cached %d %s under %s", len(entities), kind.value, key)
