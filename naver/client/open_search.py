"""Naver Open API search client (document counts)"""

import asyncio
import logging

from curl_cffi.requests import AsyncSession

from ..core.exceptions import APIError
from ..core.types import DOC_ENDPOINTS, DOC_TYPES, DocumentCounts, OpenApiKey
from .base import check_response, parse_json

logger = logging.getLogger(__name__)

NAVER_SEARCH_BASE = "https://openapi.naver.com/v1/search"


class OpenSearchClient:
    """Document-count lookups against the Open API search endpoints"""

    def __init__(self, base_url: str = NAVER_SEARCH_BASE, timeout: float = 10.0):
        self.base_url = base_url
        self.timeout = timeout

    async def get_document_count(
        self, doc_type: str, keyword: str, key: OpenApiKey
    ) -> int:
        """GET <endpoint>?query=<kw>&display=1 and return its total"""
        endpoint = DOC_ENDPOINTS.get(doc_type)
        if endpoint is None:
            raise ValueError(f"Unknown document type: {doc_type}")

        headers = {
            "X-Naver-Client-Id": key.client_id,
            "X-Naver-Client-Secret": key.client_secret,
        }
        params = {"query": keyword, "display": "1"}

        try:
            async with AsyncSession() as session:
                resp = await session.get(
                    f"{self.base_url}{endpoint}",
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                )
        except Exception as e:
            logger.warning(f"[Open API] {endpoint} request failed: {e}")
            raise APIError(status_code=0, detail=f"Request failed: {e}")

        check_response(resp, key.name)
        data = parse_json(resp)

        total = data.get("total") or 0
        if isinstance(total, bool) or not isinstance(total, int):
            raise APIError(
                status_code=resp.status_code, detail=f"Invalid total field: {total!r}"
            )
        return total

    async def get_document_counts(self, keyword: str, key: OpenApiKey) -> DocumentCounts:
        """Four lookups with a single key; a failed lookup leaves its field empty"""
        totals = await asyncio.gather(
            *(self.get_document_count(doc_type, keyword, key) for doc_type in DOC_TYPES),
            return_exceptions=True,
        )

        counts = DocumentCounts()
        for doc_type, total in zip(DOC_TYPES, totals):
            if isinstance(total, Exception):
                logger.error(f"[Open API] {doc_type} lookup failed for '{keyword}': {total}")
                continue
            setattr(counts, doc_type, total)
        return counts
