"""Round-robin credential rotator"""

import logging
import random
import threading
from typing import Sequence

from ..core.exceptions import NoCredentialsConfigured
from ..core.types import OpenApiKey, SearchAdKey

logger = logging.getLogger(__name__)


class _Rotation:
    """One credential list with its own cursor"""

    def __init__(self, kind: str, keys: Sequence):
        self.kind = kind
        self.keys = tuple(keys)
        self._cursor = 0
        self._lock = threading.Lock()

    def next(self):
        if not self.keys:
            raise NoCredentialsConfigured(self.kind)
        with self._lock:
            key = self.keys[self._cursor]
            self._cursor = (self._cursor + 1) % len(self.keys)
        return key

    def random(self):
        if not self.keys:
            raise NoCredentialsConfigured(self.kind)
        return random.choice(self.keys)

    def at(self, index: int):
        if 0 <= index < len(self.keys):
            return self.keys[index]
        return None


class CredentialRotator:
    """Hands out search-ads and open-search credentials in round-robin order"""

    def __init__(
        self,
        search_ad_keys: Sequence[SearchAdKey] = (),
        open_api_keys: Sequence[OpenApiKey] = (),
    ):
        self._search_ad = _Rotation("search-ad", search_ad_keys)
        self._open_api = _Rotation("open-api", open_api_keys)
        logger.info(
            f"Credential rotator initialized with {len(self._search_ad.keys)} "
            f"search-ad key(s) and {len(self._open_api.keys)} open-api key(s)"
        )

    @property
    def search_ad_keys(self) -> tuple[SearchAdKey, ...]:
        return self._search_ad.keys

    @property
    def open_api_keys(self) -> tuple[OpenApiKey, ...]:
        return self._open_api.keys

    def next_search_ad_key(self) -> SearchAdKey:
        return self._search_ad.next()

    def next_open_api_key(self) -> OpenApiKey:
        return self._open_api.next()

    def random_search_ad_key(self) -> SearchAdKey:
        return self._search_ad.random()

    def random_open_api_key(self) -> OpenApiKey:
        return self._open_api.random()

    def search_ad_key_at(self, index: int) -> SearchAdKey | None:
        return self._search_ad.at(index)

    def open_api_key_at(self, index: int) -> OpenApiKey | None:
        return self._open_api.at(index)

    def key_count(self) -> dict[str, int]:
        return {
            "search_ad_keys": len(self._search_ad.keys),
            "open_api_keys": len(self._open_api.keys),
        }
