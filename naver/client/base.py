"""Client protocols and shared response handling"""

from typing import Any, Protocol

from ..core.exceptions import APIError, CredentialRejected, RateLimited
from ..core.types import OpenApiKey, RelatedKeyword, SearchAdKey


class DocumentCountClient(Protocol):
    """Protocol for the document-count lookup"""

    async def get_document_count(
        self, doc_type: str, keyword: str, key: OpenApiKey
    ) -> int:
        """
        Return the total document count for one search type.
        Raises APIError on transient failure, CredentialError when the key is unusable.
        """
        ...


class RelatedKeywordClient(Protocol):
    """Protocol for the related-keyword lookup"""

    async def get_related_keywords(
        self, keyword: str, key: SearchAdKey
    ) -> list[RelatedKeyword]:
        """Return related keyword records for a hint keyword"""
        ...


def check_response(resp: Any, key_name: str) -> None:
    """Map a non-2xx response to the matching exception"""
    status = resp.status_code
    if 200 <= status < 300:
        return

    if status in (401, 403):
        raise CredentialRejected(key_name, status)

    if status == 429:
        retry_after = None
        header = resp.headers.get("Retry-After") if resp.headers else None
        if header:
            try:
                retry_after = float(header)
            except ValueError:
                retry_after = None
        raise RateLimited(key_name, retry_after)

    raise APIError(status_code=status, detail=resp.text[:200], response=resp)


def parse_json(resp: Any) -> dict:
    """Decode a JSON object body or raise APIError"""
    try:
        data = resp.json()
    except Exception as e:
        raise APIError(status_code=resp.status_code, detail=f"Invalid JSON response: {e}")
    if not isinstance(data, dict):
        raise APIError(status_code=resp.status_code, detail="Unexpected response format")
    return data
