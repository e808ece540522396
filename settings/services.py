"""Builds the collector components from an AppConfig"""

import logging
from dataclasses import dataclass

from collector.collector.collection_engine import CollectionEngine
from collector.collector.expansion_tracker import ExpansionTracker
from collector.collector.keyword_expander import KeywordExpander
from collector.collector.poller import JobPoller, StoreStatusSource
from collector.collector.result_cache import ResultCache
from collector.storage.base import BatchJobStore, KeywordStore
from collector.storage.factory import QueueMode, create_job_store
from collector.storage.json_file import JsonFileKeywordStore
from naver.client.open_search import OpenSearchClient
from naver.client.search_ad import SearchAdClient
from naver.key_pool.round_robin import CredentialRotator
from naver.providers.related_keywords import RelatedKeywordProvider
from settings.config_loader import AppConfig

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything a front end needs, wired once per process"""

    config: AppConfig
    rotator: CredentialRotator
    open_search: OpenSearchClient
    search_ad: SearchAdClient
    job_store: BatchJobStore
    keyword_store: KeywordStore
    engine: CollectionEngine
    tracker: ExpansionTracker
    expander: KeywordExpander
    related: RelatedKeywordProvider

    def store_poller(self) -> JobPoller:
        return JobPoller(StoreStatusSource(self.job_store), self.config.poller)

    async def startup(self) -> None:
        """Fail jobs a previous process left behind in a persisted queue"""
        if self.config.queue_mode == QueueMode.JSON_FILE:
            await self.engine.recover()


def build_services(config: AppConfig) -> Services:
    rotator = CredentialRotator(config.search_ad_keys, config.open_api_keys)
    open_search = OpenSearchClient(timeout=config.api_timeout)
    search_ad = SearchAdClient(timeout=config.api_timeout)

    job_store = create_job_store(config.queue_mode, config.queue_path)
    keyword_store = JsonFileKeywordStore(config.keyword_store_path)
    cache = ResultCache(ttl=config.cache_ttl, max_entries=config.cache_max_entries)

    engine = CollectionEngine(job_store, cache, rotator, open_search, config.collection)
    tracker = ExpansionTracker(config.tracker_max_history, config.tracker_path)
    expander = KeywordExpander(tracker, rotator, search_ad, keyword_store)
    related = RelatedKeywordProvider(rotator, search_ad)

    return Services(
        config=config,
        rotator=rotator,
        open_search=open_search,
        search_ad=search_ad,
        job_store=job_store,
        keyword_store=keyword_store,
        engine=engine,
        tracker=tracker,
        expander=expander,
        related=related,
    )
