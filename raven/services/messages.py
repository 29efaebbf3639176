"""
raven.services.messages — Notification text templates
========================================================

Plain-text sentences shared by every handler, so a vote reads the same in
a Discord embed and in a cast.  Vote wording always comes from the
source's own direction table.
"""

from __future__ import annotations

from raven.constants import SourceProfile, describe_vote
from raven.engine.entities import Vote


def proposal_created(profile: SourceProfile, title: str) -> str:
    return f"A new {profile.label} proposal has been created: “{title}”"


def vote_cast(profile: SourceProfile, wallet: str, vote: Vote, parent_title: str) -> str:
    direction = describe_vote(profile, vote.direction)
    return f"{wallet} has voted {direction} “{parent_title}” proposal."


def round_created(profile: SourceProfile, title: str) -> str:
    return f"A new {profile.label} round has been created: “{title}”"


def comment_posted(wallet: str, parent_title: str) -> str:
    return f"{wallet} has commented on “{parent_title}” proposal."
