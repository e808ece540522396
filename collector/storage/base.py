"""Storage protocols and the shared job table logic"""

import copy
import logging
import time
import uuid
from typing import Callable, Protocol, TypeVar

from collector.collector.models import (
    BatchJob,
    JobProgress,
    JobStatus,
    KeywordRecord,
    KeywordResult,
)
from naver.core.types import DocumentCounts

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


class BatchJobStore(Protocol):
    """Protocol for batch job persistence"""

    async def create(self, keywords: list[str]) -> BatchJob:
        """Create a pending job"""
        ...

    async def create_if_idle(self, keywords: list[str]) -> tuple[BatchJob, bool]:
        """Create a job unless one is active. Returns (job, created)"""
        ...

    async def get(self, job_id: str) -> BatchJob | None:
        ...

    async def list_all(self) -> list[BatchJob]:
        ...

    async def update_status(self, job_id: str, **updates) -> BatchJob | None:
        """Shallow-merge status, started_at, completed_at, error"""
        ...

    async def update_progress(self, job_id: str, current: int) -> BatchJob | None:
        ...

    async def append_result(
        self, job_id: str, keyword: str, counts: DocumentCounts
    ) -> BatchJob | None:
        ...

    async def has_active_job(self) -> bool:
        ...

    async def current_active_job_id(self) -> str | None:
        ...

    async def sweep_expired(self, retention: float) -> int:
        """Delete terminal jobs completed more than retention seconds ago"""
        ...

    async def delete(self, job_id: str) -> bool:
        ...

    async def mark_interrupted(self) -> int:
        """Fail jobs left non-terminal by a previous process"""
        ...


class KeywordStore(Protocol):
    """Protocol for the keyword dataset"""

    async def get_keywords(self) -> list[KeywordRecord]:
        ...

    async def add_keywords(self, records: list[KeywordRecord]) -> int:
        """Upsert by keyword. Returns number of new keywords"""
        ...

    async def update_document_counts(self, keyword: str, counts: DocumentCounts) -> bool:
        ...

    async def delete_keywords(self, keywords: list[str]) -> int:
        ...

    async def get_keywords_without_doc_counts(self) -> list[str]:
        ...

    async def get_unused_seed_keywords(self, limit: int = 10) -> list[KeywordRecord]:
        ...

    async def mark_as_used_seed(self, keyword: str) -> bool:
        ...


def new_job_id(clock: Callable[[], float] = time.time) -> str:
    return f"batch_{int(clock() * 1000)}_{uuid.uuid4().hex[:9]}"


class JobTableStore:
    """
    Job store operations expressed over a dict of jobs.

    Subclasses provide _transaction(), which hands the current table to a
    function and persists it afterwards when write is True.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    async def _transaction(
        self, fn: Callable[[dict[str, BatchJob]], T], write: bool = True
    ) -> T:
        raise NotImplementedError

    def _new_job(self, keywords: list[str]) -> BatchJob:
        return BatchJob(
            id=new_job_id(self._clock),
            keywords=list(keywords),
            status=JobStatus.PENDING,
            progress=JobProgress(current=0, total=len(keywords)),
            created_at=self._clock(),
        )

    @staticmethod
    def _active(jobs: dict[str, BatchJob]) -> BatchJob | None:
        active = [job for job in jobs.values() if not job.status.is_terminal]
        if not active:
            return None
        return min(active, key=lambda job: job.created_at or 0)

    async def create(self, keywords: list[str]) -> BatchJob:
        def fn(jobs):
            job = self._new_job(keywords)
            jobs[job.id] = job
            return copy.deepcopy(job)

        job = await self._transaction(fn)
        logger.info(f"[Jobs] created {job.id} with {len(keywords)} keyword(s)")
        return job

    async def create_if_idle(self, keywords: list[str]) -> tuple[BatchJob, bool]:
        def fn(jobs):
            active = self._active(jobs)
            if active is not None:
                return copy.deepcopy(active), False
            job = self._new_job(keywords)
            jobs[job.id] = job
            return copy.deepcopy(job), True

        job, created = await self._transaction(fn)
        if created:
            logger.info(f"[Jobs] created {job.id} with {len(keywords)} keyword(s)")
        return job, created

    async def get(self, job_id: str) -> BatchJob | None:
        def fn(jobs):
            job = jobs.get(job_id)
            return copy.deepcopy(job) if job else None

        return await self._transaction(fn, write=False)

    async def list_all(self) -> list[BatchJob]:
        return await self._transaction(
            lambda jobs: [copy.deepcopy(job) for job in jobs.values()], write=False
        )

    async def update_status(
        self,
        job_id: str,
        status: JobStatus | None = None,
        started_at=_UNSET,
        completed_at=_UNSET,
        error=_UNSET,
    ) -> BatchJob | None:
        def fn(jobs):
            job = jobs.get(job_id)
            if job is None:
                return None
            if status is not None:
                job.status = JobStatus(status)
            if started_at is not _UNSET:
                job.started_at = started_at
            if completed_at is not _UNSET:
                job.completed_at = completed_at
            if error is not _UNSET:
                job.error = error
            return copy.deepcopy(job)

        return await self._transaction(fn)

    async def update_progress(self, job_id: str, current: int) -> BatchJob | None:
        def fn(jobs):
            job = jobs.get(job_id)
            if job is None:
                return None
            job.progress.current = current
            return copy.deepcopy(job)

        return await self._transaction(fn)

    async def append_result(
        self, job_id: str, keyword: str, counts: DocumentCounts
    ) -> BatchJob | None:
        def fn(jobs):
            job = jobs.get(job_id)
            if job is None:
                return None
            job.results.append(KeywordResult(keyword=keyword, counts=copy.copy(counts)))
            return copy.deepcopy(job)

        return await self._transaction(fn)

    async def has_active_job(self) -> bool:
        return await self.current_active_job_id() is not None

    async def current_active_job_id(self) -> str | None:
        def fn(jobs):
            active = self._active(jobs)
            return active.id if active else None

        return await self._transaction(fn, write=False)

    async def sweep_expired(self, retention: float) -> int:
        now = self._clock()

        def fn(jobs):
            expired = [
                job_id
                for job_id, job in jobs.items()
                if job.status.is_terminal
                and job.completed_at is not None
                and now - job.completed_at > retention
            ]
            for job_id in expired:
                del jobs[job_id]
            return expired

        expired = await self._transaction(fn)
        for job_id in expired:
            logger.info(f"[Jobs] swept {job_id}")
        return len(expired)

    async def delete(self, job_id: str) -> bool:
        return await self._transaction(lambda jobs: jobs.pop(job_id, None) is not None)

    async def mark_interrupted(self) -> int:
        now = self._clock()

        def fn(jobs):
            count = 0
            for job in jobs.values():
                if not job.status.is_terminal:
                    job.status = JobStatus.FAILED
                    job.error = "Interrupted by process restart"
                    job.completed_at = now
                    count += 1
            return count

        count = await self._transaction(fn)
        if count:
            logger.warning(f"[Jobs] marked {count} interrupted job(s) as failed")
        return count
