"""Naver API layer - credentials, signing and HTTP clients"""

from .core.types import (
    DOC_TYPES,
    DocumentCounts,
    OpenApiKey,
    RelatedKeyword,
    SearchAdKey,
)

__all__ = [
    "DOC_TYPES",
    "DocumentCounts",
    "OpenApiKey",
    "RelatedKeyword",
    "SearchAdKey",
]
