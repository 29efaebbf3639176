"""
raven.services.discord_handler — Discord webhook notifications
================================================================

Posts one rich embed per new entity to a Discord webhook.  Embed layout
lives in :mod:`raven.services.embeds`.
"""

from __future__ import annotations

import logging

import discord
import httpx

from raven.constants import DEFAULT_WEBHOOK_AVATAR_URL, DEFAULT_WEBHOOK_USERNAME, SourceProfile
from raven.engine.entities import Auction, Comment, Entity, EntityKind, Idea, Proposal, Vote
from raven.errors import DispatchError
from raven.services.embeds import (
    build_auction_embed,
    build_comment_embed,
    build_idea_embed,
    build_proposal_embed,
    build_vote_embed,
)
from raven.services.handler import NotificationHandler
from raven.services.wallet import AddressResolver

logger = logging.getLogger(__name__)


class DiscordHandler(NotificationHandler):
    """Webhook sink supporting every entity kind."""

    name = "discord"
    kinds = frozenset(EntityKind)

    def __init__(
        self,
        profile: SourceProfile,
        base_url: str,
        webhook_url: str,
        client: httpx.AsyncClient,
        resolver: AddressResolver | None = None,
        *,
        username: str = DEFAULT_WEBHOOK_USERNAME,
        avatar_url: str = DEFAULT_WEBHOOK_AVATAR_URL,
    ) -> None:
        super().__init__(profile, base_url, resolver)
        self._webhook_url = webhook_url
        self._client = client
        self._username = username
        self._avatar_url = avatar_url

    async def execute_webhook(self, embed: discord.Embed) -> None:
        """POST *embed* to the webhook.

        Raises :class:`DispatchError` on transport failure or a non-2xx reply.
        """
        payload = {
            "username": self._username,
            "avatar_url": self._avatar_url,
            "embeds": [embed.to_dict()],
        }
        try:
            response = await self._client.post(self._webhook_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DispatchError(
                f"Discord webhook returned {exc.response.status_code}",
                handler=self.name, status=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise DispatchError(f"Discord webhook request failed: {exc}", handler=self.name) from exc

    async def handle_new_proposal(self, proposal: Proposal) -> None:
        logger.info("Handling new proposal: %s", proposal.title)
        wallet = await self.resolver.resolve(proposal.proposer)
        url = self.link(EntityKind.PROPOSAL, proposal.id)
        await self.execute_webhook(build_proposal_embed(self.profile, proposal, url, wallet))

    async def handle_new_vote(self, vote: Vote, parent: Entity) -> None:
        logger.info("Handling new vote from address: %s", vote.voter)
        wallet = await self.resolver.resolve(vote.voter)
        url = self.parent_link(EntityKind.VOTE, parent)
        await self.execute_webhook(build_vote_embed(self.profile, vote, parent, url, wallet))

    async def handle_new_auction(self, auction: Auction) -> None:
        logger.info("Handling new auction: %s", auction.title)
        url = self.link(EntityKind.AUCTION, auction.id)
        await self.execute_webhook(build_auction_embed(self.profile, auction, url))

    async def handle_new_idea(self, idea: Idea) -> None:
        logger.info("Handling new idea: %s", idea.title)
        wallet = await self.resolver.resolve(idea.creator_id)
        url = self.link(EntityKind.IDEA, idea.id)
        await self.execute_webhook(build_idea_embed(self.profile, idea, url, wallet))

    async def handle_new_comment(self, comment: Comment, idea: Idea) -> None:
        logger.info("Handling new comment from address: %s", comment.author_id)
        wallet = await self.resolver.resolve(comment.author_id)
        url = self.parent_link(EntityKind.COMMENT, idea)
        await self.execute_webhook(build_comment_embed(self.profile, comment, idea, url, wallet))
