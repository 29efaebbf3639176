"""
raven.constants — Per-source presentation tables
==================================================

Single source of truth for how each governance source is presented:
labels, accent colours, deep-link templates, which kind a vote or comment
hangs off, and what a raw vote direction means.

Vote encodings differ between upstreams (``1`` is "for" on Lil Nouns and
"against" on Meta Gov).  Handlers never interpret the raw value themselves;
they always go through :func:`describe_vote` with the source's profile.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from raven.engine.entities import EntityId, EntityKind

EXPLORER_ADDRESS_URL = "https://etherscan.io/address/{address}"
WARPCAST_CASTS_URL = "https://api.warpcast.com/v2/casts"
FOOTER_DATE_FORMAT = "%m/%d/%Y %I:%M %p"

DEFAULT_WEBHOOK_USERNAME = "Raven"
DEFAULT_WEBHOOK_AVATAR_URL = "https://i.imgur.com/OtfcHnu.png"


@dataclass(frozen=True, slots=True)
class SourceProfile:
    """Static description of one governance source."""

    name: str
    label: str
    colour: int
    kinds: tuple[EntityKind, ...]
    vote_directions: dict[int, str] = field(default_factory=dict)
    vote_fallback: str = "unknown"
    # kind → kind it references (votes → proposals, comments → ideas)
    parents: dict[EntityKind, EntityKind] = field(default_factory=dict)
    # kind → URL template, formatted with base_url and id
    links: dict[EntityKind, str] = field(default_factory=dict)

    def link(self, base_url: str, kind: EntityKind, entity_id: EntityId) -> str:
        template = self.links.get(kind, "{base_url}/{id}")
        return template.format(base_url=base_url.rstrip("/"), id=entity_id)

    def parent_kind(self, kind: EntityKind) -> EntityKind | None:
        return self.parents.get(kind)


# ---------------------------------------------------------------------------
# Source registry
# ---------------------------------------------------------------------------
LIL_NOUNS = SourceProfile(
    name="lil_nouns",
    label="Lil Nouns",
    colour=0x7BC4F2,
    kinds=(EntityKind.PROPOSAL, EntityKind.VOTE),
    vote_directions={0: "against", 1: "for", 2: "abstain on"},
    vote_fallback="unknown",
    parents={EntityKind.VOTE: EntityKind.PROPOSAL},
    links={EntityKind.PROPOSAL: "{base_url}/{id}"},
)

META_GOV = SourceProfile(
    name="meta_gov",
    label="Meta Gov",
    colour=0x8A2CE2,
    kinds=(EntityKind.PROPOSAL, EntityKind.VOTE),
    vote_directions={0: "for", 1: "against", 2: "abstain on"},
    vote_fallback="abstain on",
    parents={EntityKind.VOTE: EntityKind.PROPOSAL},
    links={EntityKind.PROPOSAL: "{base_url}/{id}"},
)

PROP_HOUSE = SourceProfile(
    name="prop_house",
    label="Prop House",
    colour=0xFF4B6E,
    kinds=(EntityKind.AUCTION,),
    links={EntityKind.AUCTION: "{base_url}/{id}"},
)

PROP_LOT = SourceProfile(
    name="prop_lot",
    label="Prop Lot",
    colour=0xFFB911,
    kinds=(EntityKind.IDEA, EntityKind.VOTE, EntityKind.COMMENT),
    vote_directions={1: "for", -1: "against"},
    vote_fallback="against",
    parents={EntityKind.VOTE: EntityKind.IDEA, EntityKind.COMMENT: EntityKind.IDEA},
    links={EntityKind.IDEA: "{base_url}/idea/{id}"},
)

SOURCES: dict[str, SourceProfile] = {
    p.name: p for p in (LIL_NOUNS, META_GOV, PROP_HOUSE, PROP_LOT)
}


def describe_vote(profile: SourceProfile, direction: int) -> str:
    """Translate a raw vote direction through the source's own table."""
    return profile.vote_directions.get(direction, profile.vote_fallback)
