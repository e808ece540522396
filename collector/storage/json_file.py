"""
JSON file storage backends

Data survives restarts and can be shared by several processes: every
operation re-reads the file under an OS-level lock held for the whole
read-modify-write.
"""

import asyncio
import json
import logging
import os
import time
from dataclasses import asdict
from pathlib import Path
from typing import Callable

from filelock import FileLock, Timeout

from collector.collector.exceptions import JobStoreError
from collector.collector.models import BatchJob, KeywordRecord
from collector.storage.base import JobTableStore
from collector.storage.memory import KeywordTable
from naver.core.types import DocumentCounts

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10.0


def _read_json(path: Path, default):
    """Read a JSON document; a missing file yields default"""
    if not path.exists():
        return default
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise JobStoreError(f"cannot read {path}", e)


def _write_json(path: Path, data) -> None:
    """Write via a temp file so readers never see a partial document"""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except OSError as e:
        raise JobStoreError(f"cannot write {path}", e)


class LockedJsonFile:
    """A JSON document guarded by a sibling .lock file"""

    def __init__(self, path: str | Path, timeout: float = LOCK_TIMEOUT_SECONDS):
        self.path = Path(path)
        self.timeout = timeout
        self._file_lock = FileLock(
            str(self.path.with_suffix(self.path.suffix + ".lock")), timeout=timeout
        )
        # Serialises coroutines of this process; the file lock covers other processes
        self._lock = asyncio.Lock()

    async def transaction(self, load, save, fn, write: bool = True):
        async with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self._file_lock:
                    data = load()
                    result = fn(data)
                    if write:
                        save(data)
                    return result
            except Timeout as e:
                raise JobStoreError(f"timed out waiting for lock on {self.path}", e)
            except OSError as e:
                raise JobStoreError(f"cannot lock {self.path}", e)


class JsonFileJobStore(JobTableStore):
    """Batch jobs stored in a JSON file, re-read on every operation"""

    def __init__(self, path: str | Path, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self._path = Path(path)
        self._file = LockedJsonFile(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, BatchJob]:
        data = _read_json(self._path, {"jobs": []})
        try:
            jobs = [BatchJob.from_dict(item) for item in data.get("jobs", [])]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise JobStoreError(f"malformed job data in {self._path}", e)
        return {job.id: job for job in jobs}

    def _save(self, jobs: dict[str, BatchJob]) -> None:
        _write_json(self._path, {"jobs": [job.to_dict() for job in jobs.values()]})

    async def _transaction(self, fn, write: bool = True):
        return await self._file.transaction(self._load, self._save, fn, write)


class JsonFileKeywordStore:
    """Keyword dataset stored in a JSON file"""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._file = LockedJsonFile(self._path)

    def _load(self) -> dict[str, KeywordRecord]:
        data = _read_json(self._path, [])
        try:
            records = [KeywordRecord(**item) for item in data]
        except TypeError as e:
            raise JobStoreError(f"malformed keyword data in {self._path}", e)
        return {r.keyword: r for r in records}

    def _save(self, table: dict[str, KeywordRecord]) -> None:
        _write_json(self._path, [asdict(r) for r in table.values()])

    async def _transaction(self, fn, write: bool = True):
        return await self._file.transaction(self._load, self._save, fn, write)

    async def get_keywords(self) -> list[KeywordRecord]:
        return await self._transaction(lambda t: list(t.values()), write=False)

    async def add_keywords(self, records: list[KeywordRecord]) -> int:
        added = await self._transaction(lambda t: KeywordTable.upsert(t, records))
        logger.info(f"[Keywords] upserted {len(records)} record(s), {added} new")
        return added

    async def update_document_counts(self, keyword: str, counts: DocumentCounts) -> bool:
        return await self._transaction(
            lambda t: KeywordTable.update_counts(t, keyword, counts)
        )

    async def delete_keywords(self, keywords: list[str]) -> int:
        return await self._transaction(lambda t: KeywordTable.delete(t, keywords))

    async def get_keywords_without_doc_counts(self) -> list[str]:
        return await self._transaction(KeywordTable.without_counts, write=False)

    async def get_unused_seed_keywords(self, limit: int = 10) -> list[KeywordRecord]:
        return await self._transaction(
            lambda t: KeywordTable.unused_seeds(t, limit), write=False
        )

    async def mark_as_used_seed(self, keyword: str) -> bool:
        return await self._transaction(lambda t: KeywordTable.mark_used(t, keyword))
