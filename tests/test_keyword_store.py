"""Tests for the keyword stores"""

import asyncio

import pytest

from collector.collector.models import KeywordRecord
from collector.storage import JsonFileKeywordStore, MemoryKeywordStore
from naver.core.types import DocumentCounts


@pytest.fixture(params=["memory", "json_file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryKeywordStore()
    return JsonFileKeywordStore(tmp_path / "keywords.json")


def test_upsert_keeps_counts_and_seed_flag(store):
    async def scenario():
        await store.add_keywords([KeywordRecord(keyword="a", total_search=10)])
        await store.update_document_counts("a", DocumentCounts(blog=1, cafe=2, news=3, webkr=4))
        await store.mark_as_used_seed("a")
        added = await store.add_keywords(
            [KeywordRecord(keyword="a", total_search=20), KeywordRecord(keyword="b")]
        )
        return added, {r.keyword: r for r in await store.get_keywords()}

    added, records = asyncio.run(scenario())
    assert added == 1
    assert records["a"].total_search == 20
    assert records["a"].blog_total_count == 1
    assert records["a"].used_as_seed is True
    assert records["a"].queried_at is not None


def test_without_counts_and_unused_seeds(store):
    async def scenario():
        await store.add_keywords(
            [
                KeywordRecord(keyword="low", total_search=5),
                KeywordRecord(keyword="high", total_search=500),
                KeywordRecord(keyword="done", total_search=50, blog_total_count=0),
            ]
        )
        await store.mark_as_used_seed("done")
        return (
            await store.get_keywords_without_doc_counts(),
            await store.get_unused_seed_keywords(limit=1),
        )

    missing, seeds = asyncio.run(scenario())
    assert sorted(missing) == ["high", "low"]
    assert [r.keyword for r in seeds] == ["high"]


def test_delete_and_unknown_keyword(store):
    async def scenario():
        await store.add_keywords([KeywordRecord(keyword="a")])
        return (
            await store.delete_keywords(["a", "zzz"]),
            await store.update_document_counts("zzz", DocumentCounts(blog=1)),
            await store.mark_as_used_seed("zzz"),
        )

    assert asyncio.run(scenario()) == (1, False, False)
