"""
raven.services.queries — GraphQL documents per source and kind
===============================================================
"""

from __future__ import annotations

from raven.engine.entities import EntityKind
from raven.services.fetcher import KindQuery

LIL_NOUNS_QUERIES: dict[EntityKind, KindQuery] = {
    EntityKind.PROPOSAL: KindQuery(
        query="""
        query Proposals {
          proposals(first: 1000, orderBy: createdBlock, orderDirection: desc) {
            id
            title
            proposer { id }
            createdTimestamp
          }
        }
        """,
        path=("proposals",),
    ),
    EntityKind.VOTE: KindQuery(
        query="""
        query Votes {
          votes(first: 1000, orderBy: blockNumber, orderDirection: desc) {
            id
            voter { id }
            supportDetailed
            reason
            proposal { id }
          }
        }
        """,
        path=("votes",),
    ),
}

META_GOV_QUERIES: dict[EntityKind, KindQuery] = {
    EntityKind.PROPOSAL: KindQuery(
        query="""
        query Proposals($space: String!) {
          proposals(first: 1000, where: { space: $space }, orderBy: "created", orderDirection: desc) {
            id
            title
            author
            created
          }
        }
        """,
        path=("proposals",),
        variables={"space": "leagueoflils.eth"},
    ),
    EntityKind.VOTE: KindQuery(
        query="""
        query Votes($space: String!) {
          votes(first: 1000, where: { space: $space }, orderBy: "created", orderDirection: desc) {
            id
            voter
            choice
            reason
            proposal { id }
          }
        }
        """,
        path=("votes",),
        variables={"space": "leagueoflils.eth"},
    ),
}

PROP_HOUSE_QUERIES: dict[EntityKind, KindQuery] = {
    EntityKind.AUCTION: KindQuery(
        query="""
        query Auctions($id: Int!) {
          community(id: $id) {
            auctions {
              id
              title
              description
              startTime
              proposalEndTime
            }
          }
        }
        """,
        path=("community", "auctions"),
        variables={"id": 2},
    ),
}

PROP_LOT_QUERIES: dict[EntityKind, KindQuery] = {
    EntityKind.IDEA: KindQuery(
        query="""
        query Ideas {
          getIdeas(options: { sort: LATEST }) {
            id
            title
            creatorId
            createdAt
          }
        }
        """,
        path=("getIdeas",),
    ),
    EntityKind.VOTE: KindQuery(
        query="""
        query IdeaVotes {
          getIdeas(options: { sort: LATEST }) {
            votes { id voterId ideaId direction }
          }
        }
        """,
        path=("getIdeas", "votes"),
    ),
    EntityKind.COMMENT: KindQuery(
        query="""
        query IdeaComments {
          getIdeas(options: { sort: LATEST }) {
            comments { id ideaId authorId body }
          }
        }
        """,
        path=("getIdeas", "comments"),
    ),
}

QUERIES: dict[str, dict[EntityKind, KindQuery]] = {
    "lil_nouns": LIL_NOUNS_QUERIES,
    "meta_gov": META_GOV_QUERIES,
    "prop_house": PROP_HOUSE_QUERIES,
    "prop_lot": PROP_LOT_QUERIES,
}
