"""
raven.services.handler — Notification handler interface
==========================================================

A handler is one configured sink (a Discord webhook, a Farcaster account)
for one source.  It exposes one coroutine per entity kind; ``kinds``
declares which of them it actually implements, and the dispatcher only
pairs an entity with handlers that support its kind.

Handlers raise on delivery failure.  Catching, logging, and isolating
those failures is the dispatcher's job.
"""

from __future__ import annotations

import abc

from raven.constants import SourceProfile
from raven.engine.entities import Auction, Comment, Entity, EntityId, EntityKind, Idea, Proposal, Vote
from raven.errors import DispatchError
from raven.services.wallet import AddressResolver


class NotificationHandler(abc.ABC):
    """Base class for notification sinks.

    Every sink implements all five ``handle_new_*`` methods.  A sink that
    does not publish a kind leaves it out of ``kinds`` and has that method
    raise :meth:`unsupported`.
    """

    name: str = "handler"
    kinds: frozenset[EntityKind] = frozenset()

    def __init__(
        self,
        profile: SourceProfile,
        base_url: str,
        resolver: AddressResolver | None = None,
    ) -> None:
        self.profile = profile
        self.base_url = base_url
        self.resolver = resolver or AddressResolver()

    def supports(self, kind: EntityKind) -> bool:
        return kind in self.kinds

    def link(self, kind: EntityKind, entity_id: EntityId) -> str:
        """Deep link for an entity of *kind* on this handler's source."""
        return self.profile.link(self.base_url, kind, entity_id)

    def parent_link(self, kind: EntityKind, parent: Entity) -> str:
        """Deep link to the parent a vote or comment of *kind* belongs to."""
        parent_kind = self.profile.parent_kind(kind) or EntityKind.PROPOSAL
        return self.link(parent_kind, parent.id)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} source={self.profile.name!r}>"

    def unsupported(self, kind: EntityKind) -> DispatchError:
        return DispatchError(f"{self.name} does not publish {kind.value}", handler=self.name)

    @abc.abstractmethod
    async def handle_new_proposal(self, proposal: Proposal) -> None: ...

    @abc.abstractmethod
    async def handle_new_vote(self, vote: Vote, parent: Entity) -> None: ...

    @abc.abstractmethod
    async def handle_new_auction(self, auction: Auction) -> None: ...

    @abc.abstractmethod
    async def handle_new_idea(self, idea: Idea) -> None: ...

    @abc.abstractmethod
    async def handle_new_comment(self, comment: Comment, idea: Idea) -> None: ...
