"""
raven.services.dispatcher — Concurrent notification fan-out
=============================================================

Every ``(novelty, handler)`` pair becomes its own task.  Each task catches
and logs its own failure (transport error, formatting bug, timeout), so one
bad webhook never cancels or delays its siblings beyond its own timeout.
:func:`fanout` returns once every task has finished.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from raven.engine.entities import EntityKind
from raven.engine.novelty import Novelty
from raven.errors import DispatchError
from raven.services.handler import NotificationHandler

logger = logging.getLogger(__name__)

DEFAULT_DISPATCH_TIMEOUT = 30.0

HANDLER_METHODS: dict[EntityKind, str] = {
    EntityKind.PROPOSAL: "handle_new_proposal",
    EntityKind.VOTE: "handle_new_vote",
    EntityKind.AUCTION: "handle_new_auction",
    EntityKind.IDEA: "handle_new_idea",
    EntityKind.COMMENT: "handle_new_comment",
}


@dataclass(frozen=True, slots=True)
class DispatchResult:
    attempted: int = 0
    delivered: int = 0

    @property
    def failed(self) -> int:
        return self.attempted - self.delivered


async def deliver(
    handler: NotificationHandler,
    novelty: Novelty,
    timeout: float = DEFAULT_DISPATCH_TIMEOUT,
) -> bool:
    """Invoke the handler method for *novelty*'s kind.  Returns ``True`` on success."""
    method = getattr(handler, HANDLER_METHODS[novelty.kind])
    args = (novelty.entity,) if novelty.parent is None else (novelty.entity, novelty.parent)
    try:
        await asyncio.wait_for(method(*args), timeout=timeout)
    except TimeoutError:
        logger.error(
            "Timed out after %.0fs delivering %s %s via %s",
            timeout, novelty.kind.value, novelty.entity.id, handler,
        )
        return False
    except DispatchError as exc:
        logger.error(
            "Failed to deliver %s %s via %s: %s",
            novelty.kind.value, novelty.entity.id, handler, exc,
        )
        return False
    except Exception:
        logger.exception(
            "Failed to deliver %s %s via %s",
            novelty.kind.value, novelty.entity.id, handler,
        )
        return False
    return True


async def fanout(
    novelties: Sequence[Novelty],
    handlers: Sequence[NotificationHandler],
    *,
    timeout: float = DEFAULT_DISPATCH_TIMEOUT,
) -> DispatchResult:
    """Deliver every novelty to every handler that supports its kind, concurrently."""
    pairs = [(n, h) for n in novelties for h in handlers if h.supports(n.kind)]
    if not pairs:
        return DispatchResult()

    outcomes = await asyncio.gather(*(deliver(h, n, timeout) for n, h in pairs))
    result = DispatchResult(attempted=len(pairs), delivered=sum(outcomes))
    if result.failed:
        logger.warning(
            "%d of %d notifications failed this cycle", result.failed, result.attempted
        )
    return result
