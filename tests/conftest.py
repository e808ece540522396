"""Shared fakes for the test suite"""

import asyncio

import pytest

from naver.core.exceptions import APIError
from naver.core.types import OpenApiKey, RelatedKeyword, SearchAdKey


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Records requested delays, advances an optional clock and yields to the loop"""

    def __init__(self, clock: FakeClock | None = None):
        self.delays: list[float] = []
        self.clock = clock

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.clock is not None:
            self.clock.advance(delay)
        await asyncio.sleep(0)


class FakeCountClient:
    """Document-count client driven by a table of totals and an optional failure rule"""

    def __init__(
        self,
        totals: dict | None = None,
        fail=None,
        gate: asyncio.Event | None = None,
        delays: dict[str, float] | None = None,
    ):
        self.totals = totals or {"blog": 10, "cafe": 20, "news": 30, "webkr": 40}
        self.fail = fail
        self.gate = gate
        self.delays = delays or {}
        self.calls: list[tuple[str, str, str]] = []

    async def get_document_count(self, doc_type, keyword, key):
        self.calls.append((doc_type, keyword, key.name))
        if self.gate is not None:
            await self.gate.wait()
        if keyword in self.delays:
            await asyncio.sleep(self.delays[keyword])
        if self.fail is not None:
            error = self.fail(doc_type, keyword, key)
            if error is not None:
                raise error
        return self.totals[doc_type]


class FakeRelatedClient:
    """Related-keyword client backed by a keyword graph"""

    def __init__(self, graph: dict[str, list[str]], failing: set[str] | None = None):
        self.graph = graph
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    async def get_related_keywords(self, keyword, key):
        self.calls.append((keyword, key.name))
        if keyword in self.failing:
            raise APIError(status_code=500, detail="boom")
        return [
            RelatedKeyword(keyword=kw, monthly_pc_search=100, monthly_mobile_search=200)
            for kw in self.graph.get(keyword, [])
        ]


def open_keys(*names: str) -> list[OpenApiKey]:
    return [OpenApiKey(name=n, client_id=f"{n}-id", client_secret=f"{n}-secret") for n in names]


def search_ad_keys(*names: str) -> list[SearchAdKey]:
    return [
        SearchAdKey(name=n, customer_id=f"{n}-customer", api_key=f"{n}-api", secret_key=f"{n}-secret")
        for n in names
    ]


@pytest.fixture
def clock():
    return FakeClock()


def make_services(**config_overrides):
    """Services wired with memory stores and fake Naver clients"""
    from collector.collector.collection_engine import CollectionEngine
    from collector.collector.expansion_tracker import ExpansionTracker
    from collector.collector.keyword_expander import KeywordExpander
    from collector.collector.models import CollectionConfig, PollerConfig
    from collector.collector.result_cache import ResultCache
    from collector.storage import MemoryJobStore, MemoryKeywordStore
    from naver.key_pool.round_robin import CredentialRotator
    from naver.providers.related_keywords import RelatedKeywordProvider
    from settings.config_loader import AppConfig
    from settings.services import Services

    config = AppConfig(
        collection=CollectionConfig(window_delay=0, base_delay=0, keyword_retry_delay=0),
        poller=PollerConfig(interval=0.01, max_seconds=10, max_polls=10_000),
        **config_overrides,
    )
    rotator = CredentialRotator(search_ad_keys("s1"), open_keys("o1", "o2"))
    related_client = FakeRelatedClient({"캠핑": ["캠핑의자", "캠핑장"], "캠핑의자": ["캠핑장"]})
    job_store = MemoryJobStore()
    keyword_store = MemoryKeywordStore()
    tracker = ExpansionTracker()
    engine = CollectionEngine(
        job_store, ResultCache(), rotator, FakeCountClient(), config.collection
    )

    return Services(
        config=config,
        rotator=rotator,
        open_search=None,
        search_ad=related_client,
        job_store=job_store,
        keyword_store=keyword_store,
        engine=engine,
        tracker=tracker,
        expander=KeywordExpander(tracker, rotator, related_client, keyword_store, call_delay=0),
        related=RelatedKeywordProvider(rotator, related_client),
    )
