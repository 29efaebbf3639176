"""
raven.engine.entities — Governance entity models
==================================================

Typed records for everything Raven watches.  Upstream APIs spell the same
field several ways (``creatorId`` vs ``creator_id``, nested ``{id: ...}``
references, ``supportDetailed`` vs ``choice``); the models accept all of
them and always serialise back under the canonical field name, which is
what the novelty cache stores.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator


class EntityKind(enum.StrEnum):
    """The entity kinds a source can expose.  Values double as cache key suffixes."""
    PROPOSAL = "proposals"
    VOTE = "votes"
    AUCTION = "auctions"
    IDEA = "ideas"
    COMMENT = "comments"


def _unwrap_id(value: Any) -> Any:
    """Collapse a nested ``{"id": ...}`` reference into its id."""
    if isinstance(value, dict):
        return value.get("id")
    return value


def _normalise_id(value: Any) -> Any:
    """Decimal strings become ints; anything else (hex hashes, compound keys) stays as given."""
    value = _unwrap_id(value)
    if isinstance(value, str) and value.isdecimal():
        return int(value)
    return value


# Opaque identity key.  Subgraphs send "42" or "0xabc-42", Snapshot sends
# hex hashes, Prop Lot sends integers.
EntityId = Annotated[int | str, BeforeValidator(_normalise_id)]


class Entity(BaseModel):
    """Common base: every entity has an id unique within its source and kind."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: EntityId


class Proposal(Entity):
    title: str = ""
    proposer: str = Field(
        default="",
        validation_alias=AliasChoices("proposer", "author", "proposerId"),
    )
    created_at: str | int | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt", "createdTimestamp", "created"),
    )

    @field_validator("proposer", mode="before")
    @classmethod
    def unwrap_proposer(cls, value: Any) -> Any:
        return _unwrap_id(value)


class Vote(Entity):
    voter: str = Field(validation_alias=AliasChoices("voter", "voterId", "voter_id"))
    # Raw upstream value; its meaning is defined per source (see raven.constants).
    direction: int = Field(
        validation_alias=AliasChoices("direction", "supportDetailed", "support", "choice"),
    )
    proposal_id: EntityId | None = Field(
        default=None,
        validation_alias=AliasChoices("proposal_id", "proposalId", "proposal"),
    )
    idea_id: EntityId | None = Field(
        default=None,
        validation_alias=AliasChoices("idea_id", "ideaId", "idea"),
    )
    reason: str | None = None

    @field_validator("voter", mode="before")
    @classmethod
    def unwrap_voter(cls, value: Any) -> Any:
        return _unwrap_id(value)

    def parent_id(self, parent_kind: EntityKind) -> EntityId | None:
        """Return the id this vote was cast on, for the given parent kind."""
        if parent_kind is EntityKind.IDEA:
            return self.idea_id
        return self.proposal_id


class Auction(Entity):
    title: str = ""
    description: str | None = None
    start_time: str | None = Field(
        default=None, validation_alias=AliasChoices("start_time", "startTime"),
    )
    proposal_end_time: str | None = Field(
        default=None, validation_alias=AliasChoices("proposal_end_time", "proposalEndTime"),
    )


class Idea(Entity):
    title: str = ""
    creator_id: str = Field(
        default="",
        validation_alias=AliasChoices("creator_id", "creatorId", "creator"),
    )
    created_at: str | int | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt"),
    )

    @field_validator("creator_id", mode="before")
    @classmethod
    def unwrap_creator(cls, value: Any) -> Any:
        return _unwrap_id(value)


class Comment(Entity):
    idea_id: EntityId = Field(validation_alias=AliasChoices("idea_id", "ideaId", "idea"))
    author_id: str = Field(validation_alias=AliasChoices("author_id", "authorId", "author"))
    body: str | None = None

    @field_validator("author_id", mode="before")
    @classmethod
    def unwrap_author(cls, value: Any) -> Any:
        return _unwrap_id(value)


MODELS: dict[EntityKind, type[Entity]] = {
    EntityKind.PROPOSAL: Proposal,
    EntityKind.VOTE: Vote,
    EntityKind.AUCTION: Auction,
    EntityKind.IDEA: Idea,
    EntityKind.COMMENT: Comment,
}


def parse_entities(kind: EntityKind, rows: list[dict[str, Any]]) -> list[Entity]:
    """Validate raw records into the model for *kind*, preserving order.

    Raises :class:`pydantic.ValidationError` on the first bad row.
    """
    model = MODELS[kind]
    return [model.model_validate(row) for row in rows]


def dump_entities(entities: list[Entity]) -> list[dict[str, Any]]:
    """Serialise entities to JSON-safe dicts under their canonical field names."""
    return [e.model_dump(mode="json") for e in entities]
