"""
Fill in document counts for stored keywords that have none
"""

import logging
from typing import TYPE_CHECKING

from collector.collector.collection_engine import CollectionEngine
from collector.collector.exceptions import JobFailed
from collector.collector.models import JobStatus, KeywordResult
from collector.collector.poller import JobPoller, ProgressCallback

if TYPE_CHECKING:
    from collector.storage.base import KeywordStore

logger = logging.getLogger(__name__)


async def _write_back(
    keyword_store: "KeywordStore", results: list[KeywordResult], wanted: set[str]
) -> int:
    updated = 0
    for result in results:
        if result.keyword not in wanted:
            continue
        if await keyword_store.update_document_counts(result.keyword, result.counts):
            updated += 1
    return updated


async def backfill_document_counts(
    engine: CollectionEngine,
    poller: JobPoller,
    keyword_store: "KeywordStore",
    on_progress: ProgressCallback | None = None,
) -> int:
    """Submit keywords without counts, wait for the job and store what comes back"""
    keywords = await keyword_store.get_keywords_without_doc_counts()
    if not keywords:
        logger.info("[Backfill] every keyword already has document counts")
        return 0

    wanted = set(keywords)
    submitted = await engine.submit(keywords)
    updated = await _write_back(keyword_store, submitted.results, wanted)

    if submitted.status == "cached":
        logger.info(f"[Backfill] {updated} keyword(s) updated from cache")
        return updated

    if submitted.status == "busy":
        logger.info(
            f"[Backfill] job {submitted.job_id} already running, "
            f"keeping whatever it returns for our keywords"
        )

    outcome = await poller.wait(submitted.job_id, on_progress=on_progress)
    if outcome.status == JobStatus.FAILED:
        raise JobFailed(submitted.job_id, outcome.error)

    updated += await _write_back(keyword_store, outcome.results, wanted)
    logger.info(f"[Backfill] {updated}/{len(keywords)} keyword(s) updated")
    return updated
