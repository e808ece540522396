"""
Keyword expansion tracker

Remembers which seed keywords were expanded, from which parent and at what
depth, and decides whether a keyword may be expanded again.
"""

import json
import logging
import threading
from collections import Counter
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Callable

from collector.collector.models import CollectionHistoryEntry, ExpansionDecision

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 10000

REASON_MAX_DEPTH = "max depth reached"
REASON_ALREADY_COLLECTED = "already collected"
REASON_CIRCULAR = "circular reference"
REASON_DEPTH_EXCEEDED = "depth exceeded during cycle check"


class ExpansionTracker:
    """
    Collection history with depth, duplicate and cycle checks.

    Safe to share between the web request thread and the event loop thread.
    """

    def __init__(
        self,
        max_history: int = DEFAULT_MAX_HISTORY,
        path: str | Path | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.max_history = max_history
        self._path = Path(path) if path else None
        self._now = now
        self._lock = threading.RLock()
        self._history: dict[str, CollectionHistoryEntry] = self._load()

    def _load(self) -> dict[str, CollectionHistoryEntry]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            entries = [CollectionHistoryEntry(**item) for item in data]
        except (json.JSONDecodeError, OSError, TypeError) as e:
            logger.error(f"[Tracker] failed to load history from {self._path}: {e}")
            return {}
        return {entry.keyword: entry for entry in entries}

    def _save(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(
                    [asdict(e) for e in self._history.values()],
                    f,
                    ensure_ascii=False,
                    indent=2,
                )
        except OSError as e:
            logger.error(f"[Tracker] failed to save history to {self._path}: {e}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

    def get(self, keyword: str) -> CollectionHistoryEntry | None:
        with self._lock:
            return self._history.get(keyword)

    def is_collected(self, keyword: str) -> bool:
        with self._lock:
            return keyword in self._history

    def expected_depth(self, parent_keyword: str | None) -> int | None:
        """Depth a child of parent_keyword must have, or None when the parent is unknown"""
        if not parent_keyword:
            return None
        with self._lock:
            parent = self._history.get(parent_keyword)
            return parent.depth + 1 if parent else None

    def _ancestor_check(
        self, keyword: str, parent_keyword: str | None, max_depth: int
    ) -> str | None:
        """Walk parent pointers from parent_keyword for at most max_depth hops"""
        if not parent_keyword:
            return None

        visited: set[str] = set()
        current: str | None = parent_keyword
        hops = 0

        with self._lock:
            while current and hops < max_depth:
                if current == keyword or current in visited:
                    logger.warning(
                        f"[Tracker] circular reference: {keyword} <- ... <- {current}"
                    )
                    return REASON_CIRCULAR
                visited.add(current)
                entry = self._history.get(current)
                current = entry.parent_keyword if entry else None
                hops += 1

        if current:
            logger.warning(f"[Tracker] ancestor chain of {keyword} longer than {max_depth}")
            return REASON_DEPTH_EXCEEDED
        return None

    def has_circular_reference(
        self, keyword: str, parent_keyword: str | None, max_depth: int = 5
    ) -> bool:
        return self._ancestor_check(keyword, parent_keyword, max_depth) is not None

    def can_expand(
        self,
        keyword: str,
        parent_keyword: str | None,
        current_depth: int,
        max_depth: int,
    ) -> ExpansionDecision:
        if current_depth >= max_depth:
            return ExpansionDecision(
                False, f"{REASON_MAX_DEPTH} ({current_depth}/{max_depth})"
            )

        with self._lock:
            if keyword in self._history:
                return ExpansionDecision(False, REASON_ALREADY_COLLECTED)

            reason = self._ancestor_check(keyword, parent_keyword, max_depth)
            if reason:
                return ExpansionDecision(False, reason)

        return ExpansionDecision(True)

    def record_expansion(
        self,
        keyword: str,
        parent_keyword: str | None,
        depth: int,
        child_keywords: list[str],
    ) -> CollectionHistoryEntry:
        with self._lock:
            expected = self.expected_depth(parent_keyword)
            if expected is not None and depth != expected:
                raise ValueError(
                    f"Depth of '{keyword}' must be {expected} "
                    f"(parent '{parent_keyword}' is at depth {expected - 1}), got {depth}"
                )

            entry = CollectionHistoryEntry(
                keyword=keyword,
                parent_keyword=parent_keyword,
                depth=depth,
                collected_at=self._now().isoformat(),
                child_keywords=list(child_keywords),
            )
            self._history[keyword] = entry
            self._evict()
            self._save()

        logger.info(
            f"[Tracker] recorded {keyword} (depth: {depth}, children: {len(child_keywords)})"
        )
        return entry

    def _evict(self) -> None:
        # Caller holds the lock
        overflow = len(self._history) - self.max_history
        if overflow <= 0:
            return
        oldest = sorted(
            self._history.values(),
            key=lambda e: datetime.fromisoformat(e.collected_at),
        )[:overflow]
        for entry in oldest:
            del self._history[entry.keyword]
        logger.info(f"[Tracker] evicted {len(oldest)} old history entries")

    def stats(self) -> dict:
        with self._lock:
            entries = list(self._history.values())
        by_depth = Counter(entry.depth for entry in entries)
        recent = sorted(
            entries,
            key=lambda e: datetime.fromisoformat(e.collected_at),
            reverse=True,
        )[:10]
        return {
            "total_collected": len(entries),
            "by_depth": dict(sorted(by_depth.items())),
            "recent": [asdict(e) for e in recent],
        }

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
            if self._path is not None and self._path.exists():
                self._path.unlink()
        logger.info("[Tracker] history cleared")
