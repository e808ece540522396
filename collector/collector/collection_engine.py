"""
Batch document-count collection engine
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable

from collector.collector.models import (
    BatchJob,
    CollectionConfig,
    JobStatus,
    KeywordResult,
    SubmitResult,
)
from collector.collector.result_cache import ResultCache
from collector.collector.validation import normalize_keywords
from naver.client.base import DocumentCountClient
from naver.core.exceptions import APIError, NaverAPIError
from naver.core.types import DOC_TYPES, DocumentCounts, OpenApiKey
from naver.key_pool.base import KeyPool

if TYPE_CHECKING:
    from collector.storage.base import BatchJobStore

logger = logging.getLogger(__name__)


async def run_all(coros) -> list:
    """
    Run coroutines concurrently and return their results in order.

    On the first failure the remaining coroutines are cancelled and awaited
    before the error is re-raised.
    """
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    if not tasks:
        return []
    try:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    for task in pending:
        task.cancel()
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    for outcome in outcomes:
        if isinstance(outcome, BaseException) and not isinstance(
            outcome, asyncio.CancelledError
        ):
            raise outcome
    return outcomes


class CollectionEngine:
    """Turns keyword submissions into cached results or a single background job"""

    def __init__(
        self,
        job_store: "BatchJobStore",
        cache: ResultCache,
        rotator: KeyPool,
        client: DocumentCountClient,
        config: CollectionConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self.job_store = job_store
        self.cache = cache
        self.rotator = rotator
        self.client = client
        self.config = config or CollectionConfig()
        self._sleep = sleep
        self._clock = clock
        self._tasks: set[asyncio.Task] = set()

    async def submit(self, keywords: list[str]) -> SubmitResult:
        """
        Partition keywords into cache hits and misses and start a job for the misses.

        Returns immediately. A fully cached request never creates a job, and a
        request arriving while another job is active gets that job's id back.
        """
        unique = normalize_keywords(keywords, self.config.max_keyword_length)

        cached: list[KeywordResult] = []
        to_process: list[str] = []
        for keyword in unique:
            counts = self.cache.get(keyword)
            if counts is not None:
                cached.append(KeywordResult(keyword=keyword, counts=counts))
            else:
                to_process.append(keyword)

        logger.info(
            f"[Batch] request: {len(keywords)} keyword(s), {len(unique)} unique, "
            f"{len(cached)} cached, {len(to_process)} to process"
        )

        result = SubmitResult(
            status="cached",
            job_id=None,
            results=cached,
            total=len(keywords),
            unique=len(unique),
            cached=len(cached),
            processing=len(to_process),
        )
        if not to_process:
            return result

        await self.job_store.sweep_expired(self.config.retention)

        job, created = await self.job_store.create_if_idle(to_process)
        result.job_id = job.id
        if not created:
            logger.info(f"[Batch] job {job.id} is still active, not starting another")
            result.status = "busy"
            result.processing = 0
            return result

        await self.job_store.update_status(
            job.id, status=JobStatus.PROCESSING, started_at=self._clock()
        )
        self._spawn(job.id, to_process)
        result.status = "started"
        return result

    def _spawn(self, job_id: str, keywords: list[str]) -> None:
        task = asyncio.create_task(self._run_job(job_id, keywords), name=job_id)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_job(self, job_id: str, keywords: list[str]) -> None:
        """Drain the job and record its terminal state"""
        logger.info(f"[Batch] job {job_id} started with {len(keywords)} keyword(s)")
        try:
            await self._drain(job_id, keywords)
            await self.job_store.update_status(
                job_id, status=JobStatus.COMPLETED, completed_at=self._clock()
            )
            logger.info(f"[Batch] job {job_id} completed")
        except Exception as e:
            logger.error(f"[Batch] job {job_id} failed: {e}", exc_info=True)
            try:
                await self.job_store.update_status(
                    job_id,
                    status=JobStatus.FAILED,
                    error=str(e) or type(e).__name__,
                    completed_at=self._clock(),
                )
            except Exception as store_error:
                logger.error(
                    f"[Batch] could not record failure of job {job_id}: {store_error}",
                    exc_info=True,
                )

    async def _drain(self, job_id: str, keywords: list[str]) -> None:
        window = self.config.window_size
        processed = 0

        for start in range(0, len(keywords), window):
            batch = keywords[start : start + window]
            logger.info(
                f"[Batch] window {start // window + 1}: {', '.join(batch)}"
            )

            counts = await run_all(
                self._process_keyword(job_id, keyword) for keyword in batch
            )

            processed += len(batch)
            await self.job_store.update_progress(job_id, processed)

            empty = sum(1 for c in counts if c.is_empty)
            logger.info(
                f"[Batch] {processed}/{len(keywords)} done "
                f"({len(batch) - empty} with counts, {empty} empty)"
            )

            if start + window < len(keywords):
                await self._sleep(self.config.window_delay)

    async def _process_keyword(self, job_id: str, keyword: str) -> DocumentCounts:
        counts = await self.fetch_document_counts(keyword)
        if not counts.is_empty:
            self.cache.set(keyword, counts)
        await self.job_store.append_result(job_id, keyword, counts)
        return counts

    async def fetch_document_counts(self, keyword: str) -> DocumentCounts:
        """
        Four lookups for one keyword. If the fan-out itself fails, retry with a
        freshly rotated key; after the last attempt return empty counts.
        """
        attempts = self.config.keyword_retries + 1
        for attempt in range(attempts):
            try:
                key = self.rotator.next_open_api_key()
                logger.debug(f"[Batch] '{keyword}' with {key.name} (retry {attempt})")
                totals = await run_all(
                    self.get_document_count_with_retry(doc_type, keyword, key)
                    for doc_type in DOC_TYPES
                )
                return DocumentCounts(**dict(zip(DOC_TYPES, totals)))

            except NaverAPIError as e:
                logger.error(f"[Batch] document counts failed for '{keyword}': {e}")
                if attempt < attempts - 1:
                    logger.info(
                        f"[Batch] retrying '{keyword}' ({attempt + 1}/{attempts - 1}) "
                        f"with another key"
                    )
                    await self._sleep(self.config.keyword_retry_delay * (attempt + 1))

        return DocumentCounts()

    async def get_document_count_with_retry(
        self, doc_type: str, keyword: str, key: OpenApiKey
    ) -> int | None:
        """Up to max_retries + 1 attempts with exponential backoff; None when all fail"""
        max_retries = self.config.max_retries
        for attempt in range(max_retries + 1):
            try:
                return await self.client.get_document_count(doc_type, keyword, key)
            except APIError as e:
                logger.warning(
                    f"[API] {doc_type} lookup failed for '{keyword}' "
                    f"(attempt {attempt + 1}/{max_retries + 1}): {e}"
                )
                if attempt < max_retries:
                    await self._sleep(self.config.base_delay * 2**attempt)

        logger.error(f"[API] {doc_type} lookup gave up for '{keyword}'")
        return None

    async def status(self, job_id: str) -> BatchJob | None:
        return await self.job_store.get(job_id)

    async def list_jobs(self) -> list[BatchJob]:
        return await self.job_store.list_all()

    def clear_cache(self) -> int:
        return self.cache.clear()

    async def recover(self) -> int:
        """Fail jobs that a previous process left running"""
        return await self.job_store.mark_interrupted()

    async def wait_idle(self) -> None:
        """Wait for every spawned job task to finish"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
