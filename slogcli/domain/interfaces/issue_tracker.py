"""Interface for the issue-tracking backend.

Defines the contract the services depend on, so that the Sentry HTTP client
can be swapped for a fake in tests.
"""

import abc
from typing import List, Optional

from slogcli.domain.models.common import IssueId, EventId, ProjectSlug
from slogcli.domain.models.sentry import SentryIssue, SentryEvent


class IssueTracker(abc.ABC):
    """Abstract Base Class for read access to issues and events."""

    @abc.abstractmethod
    async def get_issues(
        self,
        project: Optional[ProjectSlug] = None,
        query: Optional[str] = None,
        stats_period: Optional[str] = None,
        environment: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[SentryIssue]:
        """Lists issues matching a query, at most `limit` of them.

        Raises:
            ApiError: If any page request fails.
        """
        pass

    @abc.abstractmethod
    async def get_issue_events(
        self,
        issue_id: IssueId,
        limit: Optional[int] = None,
        full: bool = False,
    ) -> List[SentryEvent]:
        """Lists the most recent events of an issue."""
        pass

    @abc.abstractmethod
    async def get_event(self, issue_id: IssueId, event_id: EventId) -> SentryEvent:
        """Fetches one event with its full payload."""
        pass

    @abc.abstractmethod
    async def get_latest_event(self, issue_id: IssueId) -> SentryEvent:
        """Fetches the most recent event of an issue."""
        pass

    @abc.abstractmethod
    async def test_connection(self) -> bool:
        """Returns True when the configured credentials can reach the organization."""
        pass
