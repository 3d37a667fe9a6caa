"""Helpers that turn CLI options into Sentry search parameters."""

import re
from typing import Optional

from slogcli.domain.models.common import SearchQuery, StatsPeriod

_STATS_PERIOD_RE = re.compile(r"^\d+[hdwm]$")
_VERBOSE_PERIOD_RE = re.compile(r"^(\d+)\s*(hours?|days?|weeks?|minutes?)$", re.IGNORECASE)

_UNIT_SUFFIXES = {"hour": "h", "day": "d", "week": "w", "minute": "m"}


def parse_time_period(since: Optional[str]) -> Optional[StatsPeriod]:
    """Normalizes `--since` to Sentry's statsPeriod format.

    '24h' and '7d' pass through, '2 hours' becomes '2h'. Anything else is
    passed through unchanged and left for the server to reject.
    """
    if not since:
        return None
    since = since.strip()
    if _STATS_PERIOD_RE.match(since):
        return StatsPeriod(since)

    match = _VERBOSE_PERIOD_RE.match(since)
    if match:
        value, unit = match.group(1), match.group(2).lower()
        for prefix, suffix in _UNIT_SUFFIXES.items():
            if unit.startswith(prefix):
                return StatsPeriod(f"{value}{suffix}")

    return StatsPeriod(since)


def build_query(query: Optional[str], environment: Optional[str]) -> Optional[SearchQuery]:
    """Folds `--env` into the search query unless it already filters on environment."""
    query = (query or "").strip()
    if environment and "environment:" not in query:
        query = f"{query} environment:{environment}" if query else f"environment:{environment}"
    return SearchQuery(query) if query else None
