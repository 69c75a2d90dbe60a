"""Data models for the harvester."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DownloadStatus(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureReason(str, Enum):
    ALREADY_EXISTS = "already_exists"
    TRANSPORT = "transport"
    BAD_STATUS = "bad_status"
    WRONG_CONTENT_TYPE = "wrong_content_type"
    EMPTY_BODY = "empty_body"
    WRITE_ERROR = "write_error"


@dataclass
class DownloadOutcome:
    """Result of handing one link to the downloader."""

    status: DownloadStatus
    url: str
    path: Path | None = None
    reason: FailureReason | None = None
    bytes_written: int = 0
    detail: str = ""  # human readable cause, e.g. "404 Not Found"

    @classmethod
    def succeeded(cls, url: str, path: Path, bytes_written: int) -> "DownloadOutcome":
        return cls(DownloadStatus.SUCCEEDED, url, path, bytes_written=bytes_written)

    @classmethod
    def skipped(cls, url: str, path: Path) -> "DownloadOutcome":
        return cls(DownloadStatus.SKIPPED, url, path, FailureReason.ALREADY_EXISTS)

    @classmethod
    def failed(
        cls, url: str, path: Path | None, reason: FailureReason, detail: str = ""
    ) -> "DownloadOutcome":
        return cls(DownloadStatus.FAILED, url, path, reason, detail=detail)

    @property
    def filename(self) -> str:
        return self.path.name if self.path else ""

    def to_csv_row(self, key: str = "") -> list:
        """Convert to CSV row format."""
        return [
            key,
            self.url,
            self.filename,
            self.status.value,
            self.reason.value if self.reason else "",
            self.bytes_written,
            self.detail,
        ]

    @staticmethod
    def csv_headers() -> list:
        """Return CSV column headers."""
        return ["key", "url", "filename", "status", "reason", "bytes", "detail"]


@dataclass
class CacheLookup:
    """A cached search response body for one key, exactly as stored."""

    key: str
    body: bytes
    from_cache: bool  # False when this call performed the search
    search_failed: bool = False  # body is the empty placeholder

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass
class RunSummary:
    """Counters collected over one run."""

    keys: int = 0
    cache_hits: int = 0
    searches: int = 0
    search_failures: int = 0
    links: int = 0
    outcomes: dict = field(default_factory=lambda: {status: 0 for status in DownloadStatus})

    def record(self, outcome: DownloadOutcome) -> None:
        self.outcomes[outcome.status] += 1

    @property
    def downloaded(self) -> int:
        return self.outcomes[DownloadStatus.SUCCEEDED]

    @property
    def skipped(self) -> int:
        return self.outcomes[DownloadStatus.SKIPPED]

    @property
    def failed(self) -> int:
        return self.outcomes[DownloadStatus.FAILED]

    def summary(self) -> str:
        """Return run summary."""
        return (
            f"Keys: {self.keys} (cached: {self.cache_hits}, searched: {self.searches}, "
            f"search failures: {self.search_failures}), Links: {self.links}, "
            f"Downloaded: {self.downloaded}, Skipped: {self.skipped}, Failed: {self.failed}"
        )
