"""
Bounded document-count cache with expiry
"""

import logging
import threading
import time
from typing import Callable

from naver.core.types import DocumentCounts

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_MAX_ENTRIES = 2000


class ResultCache:
    """
    keyword -> (DocumentCounts, inserted_at).

    Entries older than ttl are misses. When the map grows past max_entries the
    earliest inserted entry is evicted; reads do not refresh an entry's position.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[DocumentCounts, float]] = {}
        self._lock = threading.Lock()

    def get(self, keyword: str) -> DocumentCounts | None:
        with self._lock:
            entry = self._entries.get(keyword)
            if entry is None:
                return None
            counts, inserted_at = entry
            if self._clock() - inserted_at >= self.ttl:
                del self._entries[keyword]
                logger.debug(f"[Cache] expired: {keyword}")
                return None
        logger.debug(f"[Cache] hit: {keyword}")
        return counts

    def set(self, keyword: str, counts: DocumentCounts) -> None:
        with self._lock:
            # Overwriting keeps the original insertion position
            self._entries[keyword] = (counts, self._clock())
            while len(self._entries) > self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug(f"[Cache] evicted: {oldest}")
        logger.debug(f"[Cache] stored: {keyword} {counts.to_dict()}")

    def delete(self, keyword: str) -> bool:
        with self._lock:
            return self._entries.pop(keyword, None) is not None

    def clear(self) -> int:
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.info(f"[Cache] cleared {size} entries")
        return size

    def size(self) -> int:
        with self._lock:
            return len(self._entries)
