"""Core data types for the Naver API layer"""

from dataclasses import dataclass, field, fields

# Document types and their Open API search endpoints
DOC_TYPES = ("blog", "cafe", "news", "webkr")
DOC_ENDPOINTS = {
    "blog": "/blog.json",
    "cafe": "/cafearticle.json",
    "news": "/news.json",
    "webkr": "/webkr.json",
}


@dataclass(frozen=True)
class SearchAdKey:
    """Search-ads API credential set"""

    name: str
    customer_id: str
    api_key: str
    secret_key: str


@dataclass(frozen=True)
class OpenApiKey:
    """Open (search) API credential set"""

    name: str
    client_id: str
    client_secret: str


@dataclass
class DocumentCounts:
    """Document counts per search type. None means not collected."""

    blog: int | None = None
    cafe: int | None = None
    news: int | None = None
    webkr: int | None = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in DOC_TYPES)

    def to_dict(self) -> dict:
        """Only collected fields are emitted"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "DocumentCounts":
        data = data or {}
        return cls(**{name: data.get(name) for name in DOC_TYPES})


@dataclass
class RelatedKeyword:
    """One record returned by the keyword tool"""

    keyword: str
    monthly_pc_search: int = 0
    monthly_mobile_search: int = 0
    competition: str = "정보없음"
    monthly_pc_clicks: float = 0
    monthly_mobile_clicks: float = 0
    monthly_pc_click_rate: float = 0
    monthly_mobile_click_rate: float = 0
    monthly_ad_count: float = 0
    root_keyword: str | None = None
    seed_depth: int | None = None
    extra: dict = field(default_factory=dict)

    @property
    def total_search(self) -> int:
        return self.monthly_pc_search + self.monthly_mobile_search

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "monthly_pc_search": self.monthly_pc_search,
            "monthly_mobile_search": self.monthly_mobile_search,
            "total_search": self.total_search,
            "competition": self.competition,
            "monthly_pc_clicks": self.monthly_pc_clicks,
            "monthly_mobile_clicks": self.monthly_mobile_clicks,
            "monthly_pc_click_rate": self.monthly_pc_click_rate,
            "monthly_mobile_click_rate": self.monthly_mobile_click_rate,
            "monthly_ad_count": self.monthly_ad_count,
            "root_keyword": self.root_keyword,
            "seed_depth": self.seed_depth,
        }
