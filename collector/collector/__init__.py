"""
Collector module - document-count collection and keyword expansion
"""

from collector.collector.backfill import backfill_document_counts
from collector.collector.collection_engine import CollectionEngine
from collector.collector.expansion_tracker import ExpansionTracker
from collector.collector.keyword_expander import KeywordExpander
from collector.collector.logging_setup import setup_logging
from collector.collector.models import (
    BatchJob,
    CollectionConfig,
    JobStatus,
    KeywordRecord,
    KeywordResult,
    PollerConfig,
    SubmitResult,
)
from collector.collector.poller import HttpStatusSource, JobPoller, StoreStatusSource
from collector.collector.progress_tracker import ProgressTracker
from collector.collector.result_cache import ResultCache

__all__ = [
    "backfill_document_counts",
    "CollectionEngine",
    "ExpansionTracker",
    "KeywordExpander",
    "setup_logging",
    "BatchJob",
    "CollectionConfig",
    "JobStatus",
    "KeywordRecord",
    "KeywordResult",
    "PollerConfig",
    "SubmitResult",
    "HttpStatusSource",
    "JobPoller",
    "StoreStatusSource",
    "ProgressTracker",
    "ResultCache",
]
