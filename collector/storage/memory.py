"""In-process storage backends (lost on restart, single instance only)"""

import asyncio
import copy
import time
from datetime import datetime
from typing import Callable

from collector.collector.models import BatchJob, KeywordRecord
from collector.storage.base import JobTableStore
from naver.core.types import DocumentCounts


class MemoryJobStore(JobTableStore):
    """Batch jobs kept in a dict"""

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self._jobs: dict[str, BatchJob] = {}
        self._lock = asyncio.Lock()

    async def _transaction(self, fn, write: bool = True):
        async with self._lock:
            return fn(self._jobs)


class KeywordTable:
    """Keyword dataset operations over a dict keyed by keyword"""

    @staticmethod
    def upsert(table: dict[str, KeywordRecord], records: list[KeywordRecord]) -> int:
        added = 0
        now = datetime.now().isoformat()
        for record in records:
            record = copy.deepcopy(record)
            if record.queried_at is None:
                record.queried_at = now
            existing = table.get(record.keyword)
            if existing is None:
                added += 1
            else:
                # Keep collected counts and seed usage across upserts
                record.used_as_seed = record.used_as_seed or existing.used_as_seed
                if not record.has_document_counts and existing.has_document_counts:
                    record.blog_total_count = existing.blog_total_count
                    record.cafe_total_count = existing.cafe_total_count
                    record.news_total_count = existing.news_total_count
                    record.webkr_total_count = existing.webkr_total_count
            table[record.keyword] = record
        return added

    @staticmethod
    def update_counts(
        table: dict[str, KeywordRecord], keyword: str, counts: DocumentCounts
    ) -> bool:
        record = table.get(keyword)
        if record is None:
            return False
        record.apply_counts(counts)
        return True

    @staticmethod
    def delete(table: dict[str, KeywordRecord], keywords: list[str]) -> int:
        return sum(1 for kw in keywords if table.pop(kw, None) is not None)

    @staticmethod
    def without_counts(table: dict[str, KeywordRecord]) -> list[str]:
        return [kw for kw, record in table.items() if not record.has_document_counts]

    @staticmethod
    def unused_seeds(table: dict[str, KeywordRecord], limit: int) -> list[KeywordRecord]:
        candidates = [r for r in table.values() if not r.used_as_seed]
        candidates.sort(key=lambda r: r.total_search, reverse=True)
        return [copy.deepcopy(r) for r in candidates[:limit]]

    @staticmethod
    def mark_used(table: dict[str, KeywordRecord], keyword: str) -> bool:
        record = table.get(keyword)
        if record is None:
            return False
        record.used_as_seed = True
        return True


class MemoryKeywordStore:
    """Keyword dataset kept in a dict"""

    def __init__(self, records: list[KeywordRecord] | None = None):
        self._table: dict[str, KeywordRecord] = {}
        self._lock = asyncio.Lock()
        if records:
            KeywordTable.upsert(self._table, records)

    async def get_keywords(self) -> list[KeywordRecord]:
        async with self._lock:
            return [copy.deepcopy(r) for r in self._table.values()]

    async def add_keywords(self, records: list[KeywordRecord]) -> int:
        async with self._lock:
            return KeywordTable.upsert(self._table, records)

    async def update_document_counts(self, keyword: str, counts: DocumentCounts) -> bool:
        async with self._lock:
            return KeywordTable.update_counts(self._table, keyword, counts)

    async def delete_keywords(self, keywords: list[str]) -> int:
        async with self._lock:
            return KeywordTable.delete(self._table, keywords)

    async def get_keywords_without_doc_counts(self) -> list[str]:
        async with self._lock:
            return KeywordTable.without_counts(self._table)

    async def get_unused_seed_keywords(self, limit: int = 10) -> list[KeywordRecord]:
        async with self._lock:
            return KeywordTable.unused_seeds(self._table, limit)

    async def mark_as_used_seed(self, keyword: str) -> bool:
        async with self._lock:
            return KeywordTable.mark_used(self._table, keyword)
