"""
raven.services.farcaster_handler — Farcaster cast notifications
=================================================================

Publishes a short cast with the deep link embedded.  Comments are not
cast; they are too chatty for a public channel.
"""

from __future__ import annotations

import logging

import httpx

from raven.constants import WARPCAST_CASTS_URL, SourceProfile
from raven.engine.entities import Auction, Comment, Entity, EntityKind, Idea, Proposal, Vote
from raven.errors import DispatchError
from raven.services import messages
from raven.services.handler import NotificationHandler
from raven.services.wallet import AddressResolver

logger = logging.getLogger(__name__)


class FarcasterHandler(NotificationHandler):
    name = "farcaster"
    kinds = frozenset({EntityKind.PROPOSAL, EntityKind.VOTE, EntityKind.AUCTION, EntityKind.IDEA})

    def __init__(
        self,
        profile: SourceProfile,
        base_url: str,
        bearer_token: str,
        client: httpx.AsyncClient,
        resolver: AddressResolver | None = None,
        *,
        channel: str | None = None,
        casts_url: str = WARPCAST_CASTS_URL,
    ) -> None:
        super().__init__(profile, base_url, resolver)
        self._bearer_token = bearer_token
        self._client = client
        self._channel = channel
        self._casts_url = casts_url

    async def make_http_request(self, text: str, url: str) -> None:
        """Publish one cast.  Raises :class:`DispatchError` on failure."""
        payload: dict[str, object] = {"text": text, "embeds": [url]}
        if self._channel:
            payload["channelKey"] = self._channel
        headers = {
            "Authorization": f"Bearer {self._bearer_token}",
            "Accept": "application/json",
        }
        try:
            response = await self._client.post(self._casts_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise DispatchError(f"Cast request failed: {exc}", handler=self.name) from exc

        logger.debug("Response status: %s", response.status_code)
        if response.is_error:
            raise DispatchError(
                f"Warpcast returned {response.status_code}: {response.text[:200]}",
                handler=self.name, status=response.status_code,
            )

    async def handle_new_proposal(self, proposal: Proposal) -> None:
        logger.info("Handling new proposal: %s", proposal.title)
        await self.make_http_request(
            messages.proposal_created(self.profile, proposal.title),
            self.link(EntityKind.PROPOSAL, proposal.id),
        )

    async def handle_new_vote(self, vote: Vote, parent: Entity) -> None:
        logger.info("Handling new vote from address: %s", vote.voter)
        wallet = await self.resolver.resolve(vote.voter)
        await self.make_http_request(
            messages.vote_cast(self.profile, wallet, vote, getattr(parent, "title", "")),
            self.parent_link(EntityKind.VOTE, parent),
        )

    async def handle_new_auction(self, auction: Auction) -> None:
        logger.info("Handling new auction: %s", auction.title)
        await self.make_http_request(
            messages.round_created(self.profile, auction.title),
            self.link(EntityKind.AUCTION, auction.id),
        )

    async def handle_new_idea(self, idea: Idea) -> None:
        logger.info("Handling new idea: %s", idea.title)
        await self.make_http_request(
            messages.proposal_created(self.profile, idea.title),
            self.link(EntityKind.IDEA, idea.id),
        )

    async def handle_new_comment(self, comment: Comment, idea: Idea) -> None:
        raise self.unsupported(EntityKind.COMMENT)
