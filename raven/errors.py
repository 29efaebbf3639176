"""
raven.errors — Error taxonomy for the notification cycle
=========================================================

Every error here is contained to one entity, one entity kind, or one
handler invocation.  None of them is allowed to escape a cycle.
"""

from __future__ import annotations


class RavenError(Exception):
    """Base class for all Raven errors."""


class FetchError(RavenError):
    """Upstream fetch failed (transport, timeout, or schema mismatch)."""

    def __init__(self, message: str, *, source: str = "", kind: str = "") -> None:
        super().__init__(message)
        self.source = source
        self.kind = kind


class CacheReadError(RavenError):
    """The novelty cache could not be read or decoded.

    Distinct from a cache miss: a miss means "no baseline yet", a read
    error means the baseline is unknown and the cycle must not proceed.
    """


class CacheWriteError(RavenError):
    """The novelty cache could not be written."""


class ReferentialGap(RavenError):
    """A vote or comment points at a parent missing from the current fetch."""

    def __init__(
        self, kind: str, entity_id: int | str, parent_kind: str, parent_id: int | str | None,
    ) -> None:
        super().__init__(
            f"{kind} {entity_id} references unknown {parent_kind} {parent_id}"
        )
        self.kind = kind
        self.entity_id = entity_id
        self.parent_kind = parent_kind
        self.parent_id = parent_id


class DispatchError(RavenError):
    """A handler failed to deliver a notification (transport error or non-2xx)."""

    def __init__(self, message: str, *, handler: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.handler = handler
        self.status = status
