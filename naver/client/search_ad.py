"""Naver search-ads client (keyword tool)"""

import logging

from curl_cffi.requests import AsyncSession

from ..auth.signature import create_headers
from ..core.exceptions import APIError
from ..core.types import RelatedKeyword, SearchAdKey
from .base import check_response, parse_json

logger = logging.getLogger(__name__)

SEARCH_AD_BASE = "https://api.naver.com"
KEYWORD_TOOL_URI = "/keywordstool"


def _to_number(value) -> float:
    """Numbers arrive as ints, floats or strings like "< 10" """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def parse_keyword_record(item: dict) -> RelatedKeyword:
    """Convert one keywordList entry"""
    return RelatedKeyword(
        keyword=item.get("relKeyword", ""),
        monthly_pc_search=int(_to_number(item.get("monthlyPcQcCnt"))),
        monthly_mobile_search=int(_to_number(item.get("monthlyMobileQcCnt"))),
        competition=item.get("compIdx") or "정보없음",
        monthly_pc_clicks=_to_number(item.get("monthlyAvePcClkCnt")),
        monthly_mobile_clicks=_to_number(item.get("monthlyAveMobileClkCnt")),
        monthly_pc_click_rate=_to_number(item.get("monthlyAvePcCtr")),
        monthly_mobile_click_rate=_to_number(item.get("monthlyAveMobileCtr")),
        monthly_ad_count=_to_number(item.get("plAvgDepth")),
    )


class SearchAdClient:
    """Related-keyword lookups against the signed keyword tool endpoint"""

    def __init__(self, base_url: str = SEARCH_AD_BASE, timeout: float = 10.0):
        self.base_url = base_url
        self.timeout = timeout

    async def get_related_keywords(
        self, keyword: str, key: SearchAdKey
    ) -> list[RelatedKeyword]:
        headers = create_headers("GET", KEYWORD_TOOL_URI, key)
        params = {"hintKeywords": keyword, "showDetail": "1"}

        try:
            async with AsyncSession() as session:
                resp = await session.get(
                    f"{self.base_url}{KEYWORD_TOOL_URI}",
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                )
        except Exception as e:
            logger.warning(f"[Search Ad] Request failed for '{keyword}': {e}")
            raise APIError(status_code=0, detail=f"Request failed: {e}")

        check_response(resp, key.name)
        data = parse_json(resp)

        keyword_list = data.get("keywordList")
        if not isinstance(keyword_list, list):
            return []
        records = [
            parse_keyword_record(item)
            for item in keyword_list
            if isinstance(item, dict) and item.get("relKeyword")
        ]
        logger.info(f"[Search Ad] {key.name}: {len(records)} related keyword(s) for '{keyword}'")
        return records
