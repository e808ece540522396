"""Search-ads request signing"""

import base64
import hashlib
import hmac
import time

from ..core.types import SearchAdKey


def generate_signature(timestamp: int, method: str, uri: str, secret_key: str) -> str:
    """Base64 HMAC-SHA256 over "{timestamp}.{method}.{uri}" """
    message = f"{timestamp}.{method}.{uri}"
    digest = hmac.new(
        secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def create_headers(
    method: str, uri: str, key: SearchAdKey, timestamp: int | None = None
) -> dict[str, str]:
    """Signed headers for one search-ads request"""
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return {
        "X-Timestamp": str(timestamp),
        "X-API-KEY": key.api_key,
        "X-Customer": key.customer_id,
        "X-Signature": generate_signature(timestamp, method, uri, key.secret_key),
    }
