"""
tests/test_novelty.py — Entity Models & Diffing Tests
=======================================================

Entity parsing across the upstreams' field spellings, id-only diffing, and
same-cycle parent resolution.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from raven.constants import LIL_NOUNS, META_GOV, PROP_LOT, describe_vote
from raven.engine.cache import Snapshot
from raven.engine.entities import (
    Comment,
    EntityKind,
    Idea,
    Proposal,
    Vote,
    dump_entities,
    parse_entities,
)
from raven.engine.novelty import find_new_entities, resolve_references

ADDR = "0x1a2b3c4d5e6f7a8b9c0d1e2f3a4b5c6d7e8fbeef"


def _snapshot(kind, entities):
    return Snapshot(kind=kind, entities=tuple(entities))


# ===========================================================================
# Test: entity models
# ===========================================================================
class TestEntities:

    def test_upstream_spellings_are_accepted(self):
        vote = Vote.model_validate({
            "id": "17", "voterId": ADDR, "ideaId": {"id": "4"}, "direction": -1,
        })
        assert (vote.id, vote.voter, vote.idea_id, vote.direction) == (17, ADDR, 4, -1)

        idea = Idea.model_validate({"id": 4, "title": "Park", "creatorId": ADDR})
        assert idea.creator_id == ADDR

        comment = Comment.model_validate({"id": 9, "ideaId": 4, "authorId": ADDR, "body": "+1"})
        assert (comment.idea_id, comment.author_id) == (4, ADDR)

    def test_ids_are_opaque_keys(self):
        snapshot_hash = "0x3d1f5a7c9e0b2d4f6a8c0e2b4d6f8a0c2e4b6d8f0a2c4e6b8d0f2a4c6e8b0d2f"
        assert Proposal.model_validate({"id": snapshot_hash}).id == snapshot_hash
        assert Vote.model_validate(
            {"id": f"{ADDR}-42", "voter": {"id": ADDR}, "supportDetailed": 1, "proposal": {"id": "42"}}
        ).id == f"{ADDR}-42"
        # Decimal strings and ints name the same entity.
        assert Proposal.model_validate({"id": "42"}).id == Proposal(id=42).id == 42

    def test_opaque_ids_survive_a_dump(self):
        vote = Vote(id=f"{ADDR}-0xabc", voter=ADDR, direction=1, proposal_id="0xabc")

        assert parse_entities(EntityKind.VOTE, dump_entities([vote])) == [vote]

    def test_unknown_fields_are_ignored(self):
        proposal = Proposal.model_validate({"id": 1, "title": "x", "status": "ACTIVE"})
        assert not hasattr(proposal, "status")

    def test_missing_id_is_rejected(self):
        with pytest.raises(ValidationError):
            Proposal.model_validate({"title": "x"})

    def test_dump_uses_canonical_names_and_reparses(self):
        vote = Vote(id=2, voter=ADDR, direction=1, proposal_id=8, reason="yes")

        (row,) = dump_entities([vote])

        assert set(row) >= {"id", "voter", "direction", "proposal_id", "reason"}
        assert parse_entities(EntityKind.VOTE, [row]) == [vote]

    def test_vote_parent_id_follows_parent_kind(self):
        vote = Vote(id=1, voter=ADDR, direction=1, proposal_id=3, idea_id=5)
        assert vote.parent_id(EntityKind.PROPOSAL) == 3
        assert vote.parent_id(EntityKind.IDEA) == 5

    def test_entities_are_immutable(self):
        proposal = Proposal(id=1, title="x")
        with pytest.raises(ValidationError):
            proposal.title = "y"


# ===========================================================================
# Test: vote direction tables
# ===========================================================================
class TestDescribeVote:

    @pytest.mark.parametrize("direction, expected", [
        (0, "against"), (1, "for"), (2, "abstain on"), (7, "unknown"),
    ])
    def test_lil_nouns(self, direction, expected):
        assert describe_vote(LIL_NOUNS, direction) == expected

    @pytest.mark.parametrize("direction, expected", [
        (0, "for"), (1, "against"), (2, "abstain on"), (3, "abstain on"),
    ])
    def test_meta_gov(self, direction, expected):
        assert describe_vote(META_GOV, direction) == expected

    @pytest.mark.parametrize("direction, expected", [(1, "for"), (-1, "against"), (0, "against")])
    def test_prop_lot(self, direction, expected):
        assert describe_vote(PROP_LOT, direction) == expected


# ===========================================================================
# Test: diffing
# ===========================================================================
class TestFindNewEntities:

    def test_new_ids_in_fetch_order(self):
        baseline = _snapshot(EntityKind.PROPOSAL, [Proposal(id=1), Proposal(id=2)])
        current = [Proposal(id=4), Proposal(id=1), Proposal(id=3), Proposal(id=2)]

        assert [p.id for p in find_new_entities(current, baseline)] == [4, 3]

    def test_content_changes_are_not_new(self):
        baseline = _snapshot(EntityKind.PROPOSAL, [Proposal(id=1, title="Old")])
        assert find_new_entities([Proposal(id=1, title="Edited")], baseline) == []

    def test_disappeared_ids_are_ignored(self):
        baseline = _snapshot(EntityKind.PROPOSAL, [Proposal(id=1), Proposal(id=2)])
        assert find_new_entities([Proposal(id=2)], baseline) == []

    def test_empty_baseline_means_everything_is_new(self):
        baseline = _snapshot(EntityKind.PROPOSAL, [])
        assert len(find_new_entities([Proposal(id=1), Proposal(id=2)], baseline)) == 2


# ===========================================================================
# Test: reference resolution
# ===========================================================================
class TestResolveReferences:

    def test_kinds_without_parent_pass_through(self):
        novelties, gaps = resolve_references(EntityKind.PROPOSAL, [Proposal(id=1)], None)

        assert [n.entity.id for n in novelties] == [1]
        assert novelties[0].parent is None
        assert gaps == []

    def test_votes_attach_to_proposals(self):
        proposals = [Proposal(id=1, title="A"), Proposal(id=2, title="B")]
        votes = [
            Vote(id=10, voter=ADDR, direction=1, proposal_id=2),
            Vote(id=11, voter=ADDR, direction=0, proposal_id=1),
        ]

        novelties, gaps = resolve_references(EntityKind.VOTE, votes, EntityKind.PROPOSAL, proposals)

        assert [(n.entity.id, n.parent.title) for n in novelties] == [(10, "B"), (11, "A")]
        assert gaps == []

    def test_orphans_become_gaps(self):
        votes = [
            Vote(id=10, voter=ADDR, direction=1, proposal_id=1),
            Vote(id=11, voter=ADDR, direction=1, proposal_id=99),
        ]

        novelties, gaps = resolve_references(
            EntityKind.VOTE, votes, EntityKind.PROPOSAL, [Proposal(id=1)],
        )

        assert [n.entity.id for n in novelties] == [10]
        assert len(gaps) == 1
        assert (gaps[0].entity_id, gaps[0].parent_id) == (11, 99)
        assert str(gaps[0]) == "votes 11 references unknown proposals 99"

    def test_hex_references_resolve(self):
        parent = Proposal(id="0xaaa", title="LIP-1")
        votes = [
            Vote(id="0x01", voter=ADDR, direction=0, proposal_id="0xaaa"),
            Vote(id="0x02", voter=ADDR, direction=0, proposal_id="0xbbb"),
        ]

        novelties, gaps = resolve_references(EntityKind.VOTE, votes, EntityKind.PROPOSAL, [parent])

        assert [n.parent for n in novelties] == [parent]
        assert str(gaps[0]) == "votes 0x02 references unknown proposals 0xbbb"

    def test_comments_attach_to_ideas(self):
        idea = Idea(id=4, title="Park", creator_id=ADDR)
        comment = Comment(id=1, idea_id=4, author_id=ADDR)

        novelties, gaps = resolve_references(EntityKind.COMMENT, [comment], EntityKind.IDEA, [idea])

        assert novelties[0].parent == idea
        assert gaps == []

    def test_missing_reference_is_a_gap(self):
        vote = Vote(id=5, voter=ADDR, direction=1)

        novelties, gaps = resolve_references(
            EntityKind.VOTE, [vote], EntityKind.IDEA, [Idea(id=1)],
        )

        assert novelties == []
        assert gaps[0].parent_id is None
