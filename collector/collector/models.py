"""
Data models for document-count collection and keyword expansion
"""

from dataclasses import asdict, dataclass, field
from enum import Enum

from naver.core.types import DocumentCounts


class JobStatus(str, Enum):
    """Batch job lifecycle"""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class JobProgress:
    current: int = 0
    total: int = 0


@dataclass
class KeywordResult:
    """Document counts collected for one keyword"""

    keyword: str
    counts: DocumentCounts

    def to_dict(self) -> dict:
        return {"keyword": self.keyword, "counts": self.counts.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "KeywordResult":
        return cls(
            keyword=data["keyword"], counts=DocumentCounts.from_dict(data.get("counts"))
        )


@dataclass
class BatchJob:
    """A document-count collection job"""

    id: str
    keywords: list[str]
    status: JobStatus = JobStatus.PENDING
    progress: JobProgress = field(default_factory=JobProgress)
    results: list[KeywordResult] = field(default_factory=list)
    created_at: float | None = None
    started_at: float | None = None
    completed_at: float | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "keywords": list(self.keywords),
            "status": self.status.value,
            "progress": asdict(self.progress),
            "results": [r.to_dict() for r in self.results],
            "created_at": self.created_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BatchJob":
        progress = data.get("progress") or {}
        return cls(
            id=data["id"],
            keywords=list(data.get("keywords", [])),
            status=JobStatus(data.get("status", JobStatus.PENDING.value)),
            progress=JobProgress(
                current=progress.get("current", 0), total=progress.get("total", 0)
            ),
            results=[KeywordResult.from_dict(r) for r in data.get("results", [])],
            created_at=data.get("created_at"),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
            error=data.get("error"),
        )


@dataclass
class SubmitResult:
    """Outcome of a batch submission"""

    status: str  # "cached" | "started" | "busy"
    job_id: str | None
    results: list[KeywordResult] = field(default_factory=list)
    total: int = 0
    unique: int = 0
    cached: int = 0
    processing: int = 0

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "job_id": self.job_id,
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "unique": self.unique,
            "cached": self.cached,
            "processing": self.processing,
        }


@dataclass
class CollectionHistoryEntry:
    """One expanded seed keyword"""

    keyword: str
    parent_keyword: str | None
    depth: int
    collected_at: str
    child_keywords: list[str] = field(default_factory=list)


@dataclass
class ExpansionDecision:
    allowed: bool
    reason: str | None = None


@dataclass
class KeywordRecord:
    """A row of the keyword store"""

    keyword: str
    monthly_pc_search: int = 0
    monthly_mobile_search: int = 0
    total_search: int = 0
    competition: str = "정보없음"
    monthly_pc_clicks: float = 0
    monthly_mobile_clicks: float = 0
    monthly_pc_click_rate: float = 0
    monthly_mobile_click_rate: float = 0
    monthly_ad_count: float = 0
    root_keyword: str | None = None
    seed_depth: int | None = None
    queried_at: str | None = None
    used_as_seed: bool = False
    blog_total_count: int | None = None
    cafe_total_count: int | None = None
    news_total_count: int | None = None
    webkr_total_count: int | None = None

    @property
    def has_document_counts(self) -> bool:
        return any(
            value is not None
            for value in (
                self.blog_total_count,
                self.cafe_total_count,
                self.news_total_count,
                self.webkr_total_count,
            )
        )

    def apply_counts(self, counts: DocumentCounts) -> None:
        self.blog_total_count = counts.blog
        self.cafe_total_count = counts.cafe
        self.news_total_count = counts.news
        self.webkr_total_count = counts.webkr


@dataclass
class PollOutcome:
    """Final state observed by the poller"""

    status: JobStatus
    results: list[KeywordResult] = field(default_factory=list)
    progress: JobProgress = field(default_factory=JobProgress)
    error: str | None = None
    swept: bool = False


@dataclass
class ExpansionResult:
    """Related keywords gathered from a set of seeds"""

    results: list = field(default_factory=list)  # list[RelatedKeyword]
    skipped: list[str] = field(default_factory=list)
    depth: int = 0

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "count": len(self.results),
            "skipped_count": len(self.skipped),
            "skipped_keywords": self.skipped[:10],
            "depth": self.depth,
        }


@dataclass
class CollectionConfig:
    """Collection engine tuning"""

    window_size: int = 5  # Keywords processed concurrently
    window_delay: float = 0.3  # Pause between windows
    max_retries: int = 3  # Extra attempts per document-count lookup
    base_delay: float = 0.3  # Lookup backoff: base_delay * 2 ** attempt
    keyword_retries: int = 2  # Extra attempts per keyword with a rotated key
    keyword_retry_delay: float = 1.0  # Keyword backoff: keyword_retry_delay * attempt
    retention: float = 10 * 60  # Terminal jobs kept this long after completion
    max_keyword_length: int = 50


@dataclass
class PollerConfig:
    """Background poller limits"""

    interval: float = 30.0
    max_seconds: float = 5 * 60
    max_polls: int = 10
    error_penalty: int = 5  # Polls charged for a failed status fetch
