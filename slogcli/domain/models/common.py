"""Defines common Value Objects used across the slog domain.

These objects describe pagination, rate-limit quota and configuration
values shared by the API layer, the services and the CLI.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, NewType, Optional, Tuple, TypeVar

# === Core Value Objects ===

IssueId = NewType("IssueId", str)        # Numeric issue id or short id (e.g. 'PROJ-1A')
EventId = NewType("EventId", str)        # 32 char hex event id
OrgSlug = NewType("OrgSlug", str)        # Organization slug
ProjectSlug = NewType("ProjectSlug", str)
SearchQuery = NewType("SearchQuery", str)  # Sentry search syntax, e.g. 'is:unresolved level:error'
StatsPeriod = NewType("StatsPeriod", str)  # e.g. '24h', '7d'

T = TypeVar("T")

DEFAULT_BASE_URL = "https://sentry.io/api/0"


class OutputFormat(str, Enum):
    """How command results are rendered."""
    TABLE = "table"
    JSON = "json"


# === Rate Limiting Context ===

@dataclass
class RateLimitState:
    """Last observed quota state for one connection.

    Fields are only ever overwritten from response headers; they are never
    estimated locally.
    """
    remaining: int = 100
    limit: int = 100
    reset_at: int = 0  # epoch milliseconds


# === Pagination Context ===

@dataclass(frozen=True)
class CursorLink:
    """One direction of cursor pagination."""
    cursor: str
    has_more: bool


@dataclass(frozen=True)
class PaginationLinks:
    """Decoded `link` header. Either relation may be missing."""
    next: Optional[CursorLink] = None
    previous: Optional[CursorLink] = None

    def next_cursor(self) -> Optional[str]:
        """Cursor to follow, or None when the server reports no further pages."""
        if self.next is not None and self.next.has_more:
            return self.next.cursor
        return None


@dataclass(frozen=True)
class Page(Generic[T]):
    """Records from a single HTTP response plus their pagination links."""
    records: Tuple[T, ...]
    links: PaginationLinks = field(default_factory=PaginationLinks)


# === Configuration Context ===

@dataclass(frozen=True)
class SentryConfig:
    """Connection settings for one Sentry organization."""
    auth_token: str
    org: OrgSlug
    base_url: str = DEFAULT_BASE_URL
    http_timeout: float = 30.0

    def __repr__(self) -> str:
        # Keep the token out of logs and tracebacks
        return f"SentryConfig(org={self.org!r}, base_url={self.base_url!r}, http_timeout={self.http_timeout!r})"


# === Query Context ===

@dataclass(frozen=True)
class IssuesQuery:
    """A logical issues listing request, as supplied by the CLI."""
    query: Optional[SearchQuery] = None
    stats_period: Optional[StatsPeriod] = None
    environment: Optional[str] = None
    project: Optional[ProjectSlug] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class TailOptions:
    """Settings for one `tail` session."""
    query: Optional[SearchQuery] = None
    project: Optional[ProjectSlug] = None
    interval: float = 10.0
    output_format: OutputFormat = OutputFormat.TABLE
    redact: bool = False
    fields: Optional[str] = None
