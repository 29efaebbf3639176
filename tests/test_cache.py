"""
tests/test_cache.py — Novelty Cache Tests
==========================================

Covers key layout, miss vs. read error, snapshot ordering, and the
SQLAlchemy-backed store against an in-memory SQLite database.
"""

from __future__ import annotations

import asyncio
import json

import pytest
from sqlalchemy import inspect

from raven.database.engine import create_db_engine, get_session, init_db
from raven.database.models import CacheEntry
from raven.engine.cache import MemoryStore, NoveltyCache, cache_key
from raven.engine.entities import EntityKind, Proposal, Vote
from raven.errors import CacheReadError, CacheWriteError
from raven.services.sql_store import SqlStore

ADDR = "0x1a2b3c4d5e6f7a8b9c0d1e2f3a4b5c6d7e8fbeef"


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.get_event_loop_policy().new_event_loop().run_until_complete(coro)


class BrokenStore:
    async def get(self, key):
        raise OSError("disk gone")

    async def set(self, key, value):
        raise OSError("disk full")


def _proposals(*ids: int) -> list[Proposal]:
    return [Proposal(id=i, title=f"P{i}", proposer=ADDR) for i in ids]


class TestCacheKey:

    def test_source_and_kind(self):
        assert cache_key("lil_nouns", EntityKind.PROPOSAL) == "lil_nouns:proposals"
        assert cache_key("prop_lot", EntityKind.COMMENT) == "prop_lot:comments"


class TestNoveltyCache:

    def test_miss_is_none(self, cache):
        assert run_async(cache.get("lil_nouns", EntityKind.PROPOSAL)) is None

    def test_round_trip_keeps_order(self, cache):
        run_async(cache.set("lil_nouns", EntityKind.PROPOSAL, _proposals(3, 1, 2)))

        snapshot = run_async(cache.get("lil_nouns", EntityKind.PROPOSAL))

        assert [p.id for p in snapshot.entities] == [3, 1, 2]
        assert snapshot.ids == frozenset({1, 2, 3})
        assert snapshot.kind is EntityKind.PROPOSAL

    def test_stored_value_is_a_json_array_of_canonical_records(self, store, cache):
        vote = Vote(id=1, voter=ADDR, direction=2, proposal_id=4)
        run_async(cache.set("lil_nouns", EntityKind.VOTE, [vote]))

        raw = run_async(store.get("lil_nouns:votes"))
        rows = json.loads(raw)

        assert isinstance(rows, list)
        assert rows[0]["voter"] == ADDR
        assert rows[0]["proposal_id"] == 4

    def test_set_replaces_the_whole_snapshot(self, cache):
        run_async(cache.set("meta_gov", EntityKind.PROPOSAL, _proposals(1, 2)))
        run_async(cache.set("meta_gov", EntityKind.PROPOSAL, _proposals(2)))

        snapshot = run_async(cache.get("meta_gov", EntityKind.PROPOSAL))
        assert snapshot.ids == frozenset({2})

    def test_empty_snapshot_is_a_baseline_not_a_miss(self, cache):
        run_async(cache.set("meta_gov", EntityKind.VOTE, []))

        snapshot = run_async(cache.get("meta_gov", EntityKind.VOTE))

        assert snapshot is not None
        assert snapshot.entities == ()

    def test_keys_are_isolated_per_source_and_kind(self, store, cache):
        run_async(cache.set("lil_nouns", EntityKind.PROPOSAL, _proposals(1)))

        assert "lil_nouns:proposals" in store
        assert run_async(cache.get("meta_gov", EntityKind.PROPOSAL)) is None
        assert run_async(cache.get("lil_nouns", EntityKind.VOTE)) is None

    @pytest.mark.parametrize("raw", [b"{not json", b'{"id": 1}', b'[{"title": "no id"}]'])
    def test_corrupt_snapshot_is_a_read_error(self, raw):
        cache = NoveltyCache(MemoryStore({"lil_nouns:proposals": raw}))

        with pytest.raises(CacheReadError):
            run_async(cache.get("lil_nouns", EntityKind.PROPOSAL))

    def test_store_failures_are_wrapped(self):
        cache = NoveltyCache(BrokenStore())

        with pytest.raises(CacheReadError, match="lil_nouns:proposals"):
            run_async(cache.get("lil_nouns", EntityKind.PROPOSAL))
        with pytest.raises(CacheWriteError, match="disk full"):
            run_async(cache.set("lil_nouns", EntityKind.PROPOSAL, _proposals(1)))


class TestSqlStore:

    def test_missing_key(self, db_engine):
        assert run_async(SqlStore(db_engine).get("nope")) is None

    def test_insert_then_overwrite(self, db_engine):
        store = SqlStore(db_engine)

        run_async(store.set("lil_nouns:proposals", b"[1]"))
        run_async(store.set("lil_nouns:proposals", b"[1, 2]"))

        assert run_async(store.get("lil_nouns:proposals")) == b"[1, 2]"
        with get_session(db_engine) as session:
            assert session.query(CacheEntry).count() == 1

    def test_backs_the_novelty_cache(self, db_engine):
        cache = NoveltyCache(SqlStore(db_engine))

        run_async(cache.set("prop_lot", EntityKind.PROPOSAL, _proposals(5, 6)))
        snapshot = run_async(cache.get("prop_lot", EntityKind.PROPOSAL))

        assert [p.title for p in snapshot.entities] == ["P5", "P6"]


class TestEngineHelpers:

    def test_missing_database_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            create_db_engine()

    def test_init_db_creates_the_cache_table(self):
        engine = create_db_engine("sqlite://")
        init_db(engine)
        assert inspect(engine).has_table("novelty_cache")

    def test_session_rolls_back_on_error(self, db_engine):
        with pytest.raises(ValueError):
            with get_session(db_engine) as session:
                session.add(CacheEntry(key="k", value_json="[]"))
                session.flush()
                raise ValueError("abort")

        assert run_async(SqlStore(db_engine).get("k")) is None
