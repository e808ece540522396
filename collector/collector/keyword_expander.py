"""
Related-keyword expansion ("auto collect") gated by the expansion tracker
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Awaitable, Callable

from collector.collector.expansion_tracker import ExpansionTracker
from collector.collector.models import ExpansionResult, KeywordRecord
from naver.client.base import RelatedKeywordClient
from naver.core.exceptions import NaverAPIError
from naver.core.types import RelatedKeyword
from naver.key_pool.base import KeyPool

if TYPE_CHECKING:
    from collector.storage.base import KeywordStore

logger = logging.getLogger(__name__)


def to_keyword_record(related: RelatedKeyword) -> KeywordRecord:
    return KeywordRecord(
        keyword=related.keyword,
        monthly_pc_search=related.monthly_pc_search,
        monthly_mobile_search=related.monthly_mobile_search,
        total_search=related.total_search,
        competition=related.competition,
        monthly_pc_clicks=related.monthly_pc_clicks,
        monthly_mobile_clicks=related.monthly_mobile_clicks,
        monthly_pc_click_rate=related.monthly_pc_click_rate,
        monthly_mobile_click_rate=related.monthly_mobile_click_rate,
        monthly_ad_count=related.monthly_ad_count,
        root_keyword=related.root_keyword,
        seed_depth=related.seed_depth,
    )


class KeywordExpander:
    """Expands seed keywords into related keywords without revisiting any seed"""

    def __init__(
        self,
        tracker: ExpansionTracker,
        rotator: KeyPool,
        client: RelatedKeywordClient,
        keyword_store: "KeywordStore | None" = None,
        call_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.tracker = tracker
        self.rotator = rotator
        self.client = client
        self.keyword_store = keyword_store
        self.call_delay = call_delay
        self._sleep = sleep
        self._clock = clock
        self._last_call: float | None = None

    async def _throttle(self) -> None:
        """Keep call_delay between consecutive keyword tool calls"""
        if self._last_call is not None:
            wait = self.call_delay - (self._clock() - self._last_call)
            if wait > 0:
                await self._sleep(wait)
        self._last_call = self._clock()

    async def expand(
        self,
        seed_keywords: list[str],
        depth: int = 0,
        parent_keyword: str | None = None,
        max_depth: int = 10,
    ) -> ExpansionResult:
        """Fetch related keywords for every admissible seed"""
        logger.info(
            f"[Expand] {len(seed_keywords)} seed(s) at depth {depth}/{max_depth}"
        )
        expected = self.tracker.expected_depth(parent_keyword)
        if expected is not None and depth != expected:
            raise ValueError(
                f"Depth must be {expected} for children of '{parent_keyword}', got {depth}"
            )

        result = ExpansionResult(depth=depth + 1)

        for seed in seed_keywords:
            decision = self.tracker.can_expand(seed, parent_keyword, depth, max_depth)
            if not decision.allowed:
                logger.info(f"[Expand] skipped {seed}: {decision.reason}")
                result.skipped.append(seed)
                continue

            await self._throttle()
            try:
                key = self.rotator.next_search_ad_key()
                related = await self.client.get_related_keywords(seed, key)
            except NaverAPIError as e:
                logger.error(f"[Expand] related keywords failed for {seed}: {e}")
                continue

            tagged = [
                replace(r, root_keyword=seed, seed_depth=depth + 1) for r in related
            ]
            result.results.extend(tagged)
            self.tracker.record_expansion(
                seed, parent_keyword, depth, [r.keyword for r in tagged]
            )

            if self.keyword_store is not None:
                await self.keyword_store.add_keywords(
                    [to_keyword_record(r) for r in tagged]
                )
                await self.keyword_store.mark_as_used_seed(seed)

            logger.info(f"[Expand] {seed}: {len(tagged)} related keyword(s)")

        logger.info(
            f"[Expand] done: {len(result.results)} collected, {len(result.skipped)} skipped"
        )
        return result

    async def expand_recursive(
        self,
        seed_keywords: list[str],
        max_depth: int = 3,
        max_keywords: int = 1000,
    ) -> ExpansionResult:
        """
        Breadth-first expansion: every level's new keywords become the next
        level's seeds, each with the seed that produced it as parent.
        """
        total = ExpansionResult()
        frontier: list[tuple[str, str | None]] = [(kw, None) for kw in seed_keywords]
        seen = set(seed_keywords)
        depth = 0

        while frontier and depth < max_depth and len(total.results) < max_keywords:
            next_frontier: list[tuple[str, str | None]] = []
            for keyword, parent in frontier:
                if len(total.results) >= max_keywords:
                    break
                level = await self.expand([keyword], depth, parent, max_depth)
                total.results.extend(level.results)
                total.skipped.extend(level.skipped)
                for related in level.results:
                    if related.keyword not in seen:
                        seen.add(related.keyword)
                        next_frontier.append((related.keyword, keyword))
            frontier = next_frontier
            depth += 1

        total.results = total.results[:max_keywords]
        total.depth = depth
        return total
