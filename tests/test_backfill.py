"""Tests for filling in missing document counts"""

import asyncio

import pytest

from collector.collector.backfill import backfill_document_counts
from collector.collector.collection_engine import CollectionEngine
from collector.collector.exceptions import JobFailed, JobStoreError
from collector.collector.models import CollectionConfig, KeywordRecord, PollerConfig
from collector.collector.poller import JobPoller, StoreStatusSource
from collector.collector.result_cache import ResultCache
from collector.storage import MemoryJobStore, MemoryKeywordStore
from naver.core.types import DocumentCounts
from naver.key_pool.round_robin import CredentialRotator

from conftest import FakeCountClient, RecordingSleep, open_keys


class FailingAppendStore(MemoryJobStore):
    async def append_result(self, job_id, keyword, counts):
        raise JobStoreError("disk full")


def make_backfill(job_store=None):
    job_store = job_store or MemoryJobStore()
    engine = CollectionEngine(
        job_store=job_store,
        cache=ResultCache(),
        rotator=CredentialRotator(open_api_keys=open_keys("o1")),
        client=FakeCountClient(),
        config=CollectionConfig(window_size=2),
        sleep=RecordingSleep(),
    )
    poller = JobPoller(
        StoreStatusSource(job_store),
        PollerConfig(interval=0, max_seconds=30, max_polls=100_000),
    )
    keyword_store = MemoryKeywordStore(
        [
            KeywordRecord(keyword="a"),
            KeywordRecord(keyword="b"),
            KeywordRecord(keyword="c"),
            KeywordRecord(keyword="done", blog_total_count=7),
        ]
    )
    return engine, poller, keyword_store


def test_backfill_updates_keywords_without_counts():
    engine, poller, keyword_store = make_backfill()
    engine.cache.set("a", DocumentCounts(blog=1, cafe=1, news=1, webkr=1))

    async def scenario():
        updated = await backfill_document_counts(engine, poller, keyword_store)
        await engine.wait_idle()
        return updated, {r.keyword: r for r in await keyword_store.get_keywords()}

    updated, records = asyncio.run(scenario())

    assert updated == 3
    assert records["a"].blog_total_count == 1
    assert records["b"].webkr_total_count == 40
    assert records["c"].cafe_total_count == 20
    assert records["done"].blog_total_count == 7
    assert records["done"].cafe_total_count is None


def test_backfill_with_nothing_missing():
    engine, poller, _ = make_backfill()
    keyword_store = MemoryKeywordStore([KeywordRecord(keyword="x", news_total_count=0)])
    assert asyncio.run(backfill_document_counts(engine, poller, keyword_store)) == 0


def test_backfill_raises_when_job_fails():
    engine, poller, keyword_store = make_backfill(FailingAppendStore())

    async def scenario():
        try:
            await backfill_document_counts(engine, poller, keyword_store)
        finally:
            await engine.wait_idle()

    with pytest.raises(JobFailed) as exc:
        asyncio.run(scenario())
    assert "disk full" in str(exc.value)
