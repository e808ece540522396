"""Related-keyword provider that fails over across search-ad keys"""

import logging
from dataclasses import dataclass

from ..client.base import RelatedKeywordClient
from ..core.exceptions import AllKeysFailed, NaverAPIError, NoCredentialsConfigured
from ..core.types import RelatedKeyword
from ..key_pool.base import KeyPool

logger = logging.getLogger(__name__)


@dataclass
class RelatedKeywordProvider:
    """Composes the rotator and the keyword tool client"""

    rotator: KeyPool
    client: RelatedKeywordClient

    async def lookup(self, keyword: str) -> list[RelatedKeyword]:
        """
        Try every search-ad key once, in rotation order, until one succeeds.
        """
        attempts = self.rotator.key_count()["search_ad_keys"]
        if attempts == 0:
            raise NoCredentialsConfigured("search-ad")

        last_error: Exception | None = None
        for attempt in range(attempts):
            key = self.rotator.next_search_ad_key()
            logger.info(f"[Related] attempt {attempt + 1}/{attempts} with {key.name}")
            try:
                return await self.client.get_related_keywords(keyword, key)
            except NaverAPIError as e:
                logger.error(f"[Related] {key.name} failed for '{keyword}': {e}")
                last_error = e

        raise AllKeysFailed(attempts=attempts, last_error=last_error)
