"""
raven.services.embeds — Discord embed builders for governance notifications
=============================================================================

All embed construction lives here so the Discord handler only needs to
supply data and never deal with layout.
"""

from __future__ import annotations

from datetime import datetime

import discord

from raven.constants import FOOTER_DATE_FORMAT, SourceProfile
from raven.engine.entities import Auction, Comment, Entity, Idea, Proposal, Vote
from raven.services import messages
from raven.services.wallet import get_explorer_address

# Discord rejects field values longer than this
FIELD_VALUE_LIMIT = 1024


def _base_embed(title: str, description: str, url: str, colour: int) -> discord.Embed:
    embed = discord.Embed(title=title, description=description, url=url, color=colour)
    embed.set_footer(text=datetime.now().strftime(FOOTER_DATE_FORMAT))
    return embed


def build_proposal_embed(
    profile: SourceProfile, proposal: Proposal, url: str, wallet: str
) -> discord.Embed:
    embed = _base_embed(
        f"New {profile.label} Proposal",
        messages.proposal_created(profile, proposal.title),
        url,
        profile.colour,
    )
    embed.set_author(name=wallet, url=get_explorer_address(proposal.proposer))
    return embed


def build_vote_embed(
    profile: SourceProfile, vote: Vote, parent: Entity, url: str, wallet: str
) -> discord.Embed:
    """Vote embed; *parent* is the proposal or idea the vote was cast on."""
    embed = _base_embed(
        f"New {profile.label} Proposal Vote",
        messages.vote_cast(profile, wallet, vote, getattr(parent, "title", "")),
        url,
        profile.colour,
    )
    if vote.reason:
        embed.add_field(name="Reason", value=vote.reason[:FIELD_VALUE_LIMIT], inline=False)
    embed.set_author(name=wallet, url=get_explorer_address(vote.voter))
    return embed


def build_auction_embed(profile: SourceProfile, auction: Auction, url: str) -> discord.Embed:
    # Rounds have no acting address, so no author block.
    return _base_embed(
        f"New {profile.label} Round",
        messages.round_created(profile, auction.title),
        url,
        profile.colour,
    )


def build_idea_embed(profile: SourceProfile, idea: Idea, url: str, wallet: str) -> discord.Embed:
    embed = _base_embed(
        f"New {profile.label} Proposal",
        messages.proposal_created(profile, idea.title),
        url,
        profile.colour,
    )
    embed.set_author(name=wallet, url=get_explorer_address(idea.creator_id))
    return embed


def build_comment_embed(
    profile: SourceProfile, comment: Comment, idea: Idea, url: str, wallet: str
) -> discord.Embed:
    embed = _base_embed(
        f"New {profile.label} Proposal Comment",
        messages.comment_posted(wallet, idea.title),
        url,
        profile.colour,
    )
    embed.set_author(name=wallet, url=get_explorer_address(comment.author_id))
    return embed
