"""Tracks the Sentry rate-limit window for one connection.

Sentry reports its quota on every response through the
`x-sentry-rate-limit-*` headers. The tracker keeps the latest values and
tells the executor how long to hold back the next request once the window
is exhausted.
"""

import logging
from typing import Mapping, Optional

from slogcli.domain.models.common import RateLimitState

logger = logging.getLogger(__name__)

REMAINING_HEADER = "x-sentry-rate-limit-remaining"
LIMIT_HEADER = "x-sentry-rate-limit-limit"
RESET_HEADER = "x-sentry-rate-limit-reset"  # epoch seconds


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Parses a header value as an integer; None when absent or malformed."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class RateLimitTracker:
    """Holds the most recently observed quota state.

    Not thread-safe: it has a single owner, the RequestExecutor that
    created it, and requests are issued sequentially.
    """

    def __init__(self, state: Optional[RateLimitState] = None):
        self.state = state or RateLimitState()

    def should_wait(self, now_ms: int) -> int:
        """Milliseconds to wait before the next request, or 0."""
        if self.state.remaining <= 0 and now_ms < self.state.reset_at:
            return self.state.reset_at - now_ms
        return 0

    def update(self, headers: Mapping[str, str]) -> None:
        """Overwrites quota fields from the headers that are present and numeric."""
        remaining = _parse_int(headers.get(REMAINING_HEADER))
        if remaining is not None:
            self.state.remaining = remaining

        limit = _parse_int(headers.get(LIMIT_HEADER))
        if limit is not None:
            self.state.limit = limit

        reset = _parse_int(headers.get(RESET_HEADER))
        if reset is not None:
            self.state.reset_at = reset * 1000

        logger.debug(
            f"Rate limit state: remaining={self.state.remaining} "
            f"limit={self.state.limit} reset_at={self.state.reset_at}"
        )
