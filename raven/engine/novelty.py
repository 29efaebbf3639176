"""
raven.engine.novelty — Diffing and reference resolution
=========================================================

Pure functions, no I/O:

- :func:`find_new_entities` — which fetched entities are absent from the
  baseline (by id only; content changes are never re-notified).
- :func:`resolve_references` — attach each vote/comment to its parent from
  the *same-cycle* fetch, and report the ones whose parent is missing.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from raven.engine.cache import Snapshot
from raven.engine.entities import Comment, Entity, EntityId, EntityKind, Vote
from raven.errors import ReferentialGap


@dataclass(frozen=True, slots=True)
class Novelty:
    """One entity to notify about, with its resolved parent where it has one."""

    kind: EntityKind
    entity: Entity
    parent: Entity | None = None


def find_new_entities(current: Sequence[Entity], baseline: Snapshot) -> list[Entity]:
    """Return entities of *current* whose id is not in *baseline*, in fetch order."""
    seen = baseline.ids
    return [e for e in current if e.id not in seen]


def parent_id_of(entity: Entity, parent_kind: EntityKind) -> EntityId | None:
    if isinstance(entity, Vote):
        return entity.parent_id(parent_kind)
    if isinstance(entity, Comment):
        return entity.idea_id
    return None


def resolve_references(
    kind: EntityKind,
    entities: Iterable[Entity],
    parent_kind: EntityKind | None,
    parents: Sequence[Entity] = (),
) -> tuple[list[Novelty], list[ReferentialGap]]:
    """Pair each entity with its parent from *parents*.

    Kinds without a parent pass straight through.  An entity whose parent id
    is absent from *parents* is left out and reported as a
    :class:`ReferentialGap` instead.
    """
    if parent_kind is None:
        return [Novelty(kind, e) for e in entities], []

    by_id = {p.id: p for p in parents}
    resolved: list[Novelty] = []
    gaps: list[ReferentialGap] = []
    for entity in entities:
        pid = parent_id_of(entity, parent_kind)
        parent = by_id.get(pid) if pid is not None else None
        if parent is None:
            gaps.append(ReferentialGap(kind.value, entity.id, parent_kind.value, pid))
            continue
        resolved.append(Novelty(kind, entity, parent))
    return resolved, gaps
