"""
Background job poller
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable, Protocol

from curl_cffi.requests import AsyncSession

from collector.collector.exceptions import CollectorError, PollingTimeout
from collector.collector.models import BatchJob, JobStatus, PollerConfig, PollOutcome
from naver.client.base import parse_json
from naver.core.exceptions import APIError, NaverAPIError

if TYPE_CHECKING:
    from collector.storage.base import BatchJobStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
ErrorCallback = Callable[[Exception], None]


class JobStatusSource(Protocol):
    """Where the poller reads job state from"""

    async def fetch_status(self, job_id: str) -> BatchJob | None:
        """Return the job, or None when it no longer exists"""
        ...


class StoreStatusSource:
    """Reads job state straight from a job store"""

    def __init__(self, job_store: "BatchJobStore"):
        self.job_store = job_store

    async def fetch_status(self, job_id: str) -> BatchJob | None:
        return await self.job_store.get(job_id)


class HttpStatusSource:
    """Reads job state from the status endpoint of the web app"""

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch_status(self, job_id: str) -> BatchJob | None:
        try:
            async with AsyncSession() as session:
                resp = await asyncio.wait_for(
                    session.get(
                        f"{self.base_url}/api/documents/status",
                        params={"jobId": job_id},
                    ),
                    timeout=self.timeout,
                )
        except asyncio.TimeoutError:
            raise
        except Exception as e:
            raise APIError(status_code=0, detail=f"Status request failed: {e}")

        # Swept after completion
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise APIError(status_code=resp.status_code, detail=resp.text[:200])

        data = parse_json(resp)
        if not data.get("success") or not isinstance(data.get("job"), dict):
            raise APIError(status_code=resp.status_code, detail="Unexpected status payload")
        return BatchJob.from_dict(data["job"])


class JobPoller:
    """Polls a job until it is terminal, within a wall-clock and poll-count ceiling"""

    def __init__(
        self,
        source: JobStatusSource,
        config: PollerConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.config = config or PollerConfig()
        self._sleep = sleep
        self._clock = clock

    async def wait(
        self,
        job_id: str,
        on_progress: ProgressCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> PollOutcome:
        """
        Check once immediately, then every interval. Raises PollingTimeout when
        either ceiling is exceeded; the job itself keeps running.
        """
        logger.info(f"[Poller] monitoring {job_id}")
        started = self._clock()
        polls = 0
        first = True

        while True:
            if not first:
                await self._sleep(self.config.interval)
                polls += 1
                elapsed = self._clock() - started
                if elapsed > self.config.max_seconds or polls > self.config.max_polls:
                    logger.warning(
                        f"[Poller] timeout for {job_id}: {elapsed:.0f}s, {polls} poll(s)"
                    )
                    raise PollingTimeout(job_id, elapsed, polls)
            first = False

            try:
                job = await self.source.fetch_status(job_id)
            except asyncio.TimeoutError:
                logger.warning(f"[Poller] status request for {job_id} timed out, retrying")
                continue
            except (NaverAPIError, CollectorError) as e:
                logger.error(f"[Poller] status check failed for {job_id}: {e}")
                polls += self.config.error_penalty
                if on_error:
                    on_error(e)
                continue

            if job is None:
                logger.info(f"[Poller] {job_id} not found, treating as completed and swept")
                return PollOutcome(status=JobStatus.COMPLETED, swept=True)

            logger.debug(
                f"[Poller] {job_id}: {job.status.value} "
                f"{job.progress.current}/{job.progress.total}"
            )
            if on_progress:
                on_progress(job.progress.current, job.progress.total)

            if job.status.is_terminal:
                logger.info(
                    f"[Poller] {job_id} {job.status.value} with {len(job.results)} result(s)"
                )
                return PollOutcome(
                    status=job.status,
                    results=job.results,
                    progress=job.progress,
                    error=job.error,
                )
