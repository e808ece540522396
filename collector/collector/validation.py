"""Keyword input validation"""

import re

from collector.collector.exceptions import KeywordValidationError

MAX_KEYWORD_LENGTH = 50

_WHITESPACE = re.compile(r"\s+")


def normalize_keywords(keywords, max_length: int = MAX_KEYWORD_LENGTH) -> list[str]:
    """Strip, drop blanks and deduplicate while keeping first-seen order"""
    if not isinstance(keywords, (list, tuple)) or not keywords:
        raise KeywordValidationError("Keyword list is required")

    unique: dict[str, None] = {}
    for raw in keywords:
        if not isinstance(raw, str):
            raise KeywordValidationError(f"Keyword must be a string: {raw!r}")
        keyword = raw.strip()
        if not keyword:
            continue
        if len(keyword) > max_length:
            raise KeywordValidationError(
                f"Keyword longer than {max_length} characters: {keyword}"
            )
        unique.setdefault(keyword, None)

    if not unique:
        raise KeywordValidationError("Keyword list is required")
    return list(unique)


def normalize_hint_keyword(raw: str | None, max_length: int = MAX_KEYWORD_LENGTH) -> str:
    """Hint keywords for the keyword tool must not contain whitespace"""
    keyword = _WHITESPACE.sub("", raw or "")
    if not keyword:
        raise KeywordValidationError("Keyword is required")
    if len(keyword) > max_length:
        raise KeywordValidationError(f"Keyword must be at most {max_length} characters")
    return keyword


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_expansion_request(
    seed_keywords,
    depth=0,
    parent_keyword=None,
    max_depth=10,
    max_length: int = MAX_KEYWORD_LENGTH,
) -> tuple[list[str], int, str | None, int]:
    """Validate auto-collect parameters before any API call is made"""
    seeds = normalize_keywords(seed_keywords, max_length)

    if not _is_int(depth) or depth < 0:
        raise KeywordValidationError(f"depth must be a non-negative integer: {depth!r}")
    if not _is_int(max_depth) or max_depth < 1:
        raise KeywordValidationError(f"maxDepth must be a positive integer: {max_depth!r}")

    if parent_keyword is not None:
        if not isinstance(parent_keyword, str) or not parent_keyword.strip():
            raise KeywordValidationError("parentKeyword must be a non-empty string")
        parent_keyword = parent_keyword.strip()

    return seeds, depth, parent_keyword, max_depth
