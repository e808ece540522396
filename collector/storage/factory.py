"""Job store selection, resolved once at startup"""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable

from collector.storage.base import BatchJobStore
from collector.storage.json_file import JsonFileJobStore
from collector.storage.memory import MemoryJobStore

logger = logging.getLogger(__name__)


class QueueMode(str, Enum):
    MEMORY = "memory"
    JSON_FILE = "json_file"

    @classmethod
    def parse(cls, value: "str | QueueMode") -> "QueueMode":
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Unknown queue mode: {value!r} (expected one of: {valid})")


def create_job_store(
    mode: QueueMode,
    path: str | Path | None = None,
    clock: Callable[[], float] = time.time,
) -> BatchJobStore:
    """Build the job store for mode, falling back to memory if the file location is unusable"""
    if mode == QueueMode.JSON_FILE:
        if path is None:
            raise ValueError("json_file queue mode requires a path")
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"[Jobs] cannot use {path} ({e}), falling back to memory mode")
            return MemoryJobStore(clock)
        logger.info(f"[Jobs] JSON file mode: {path}")
        return JsonFileJobStore(path, clock)

    logger.info("[Jobs] memory mode")
    return MemoryJobStore(clock)
