"""Credential pool protocol"""

from typing import Protocol

from ..core.types import OpenApiKey, SearchAdKey


class KeyPool(Protocol):
    """Protocol for handing out API credentials"""

    def next_search_ad_key(self) -> SearchAdKey:
        """Return the next search-ads credential set"""
        ...

    def next_open_api_key(self) -> OpenApiKey:
        """Return the next open-search credential set"""
        ...

    def key_count(self) -> dict[str, int]:
        """Number of configured credential sets per kind"""
        ...
