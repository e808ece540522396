"""
Job and keyword storage backends
"""

from collector.storage.base import BatchJobStore, KeywordStore
from collector.storage.factory import QueueMode, create_job_store
from collector.storage.json_file import JsonFileJobStore, JsonFileKeywordStore
from collector.storage.memory import MemoryJobStore, MemoryKeywordStore

__all__ = [
    "BatchJobStore",
    "KeywordStore",
    "QueueMode",
    "create_job_store",
    "JsonFileJobStore",
    "JsonFileKeywordStore",
    "MemoryJobStore",
    "MemoryKeywordStore",
]
