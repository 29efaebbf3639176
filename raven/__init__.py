"""
Raven — Governance activity notifications for DAO communities
==============================================================
Polls DAO-governance sources (proposals, votes, rounds, ideas, comments),
works out which entities are new since the last cycle, and announces them
to Discord webhooks and Farcaster channels.

Package layout::

    raven/
    ├── __main__.py        # python -m raven — bootstrap + cycle loop
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Per-source labels, links, vote tables
    ├── errors.py          # FetchError, CacheReadError, …
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # novelty_cache table
    ├── engine/
    │   ├── entities.py    # Proposal / Vote / Auction / Idea / Comment
    │   ├── cache.py       # NoveltyCache over a key-value store
    │   ├── novelty.py     # id diffing + parent resolution
    │   └── cycle.py       # Orchestrator: fetch → diff → dispatch → persist
    └── services/
        ├── fetcher.py     # GraphQL entity sources
        ├── queries.py     # GraphQL documents per source
        ├── sql_store.py   # SQLAlchemy key-value store
        ├── dispatcher.py  # Concurrent fan-out with per-task isolation
        ├── handler.py     # NotificationHandler interface
        ├── discord_handler.py / farcaster_handler.py
        ├── embeds.py / messages.py
        ├── wallet.py      # Address shortening + name lookup
        └── registry.py    # Config → orchestrators
"""

__version__ = "0.1.0"
