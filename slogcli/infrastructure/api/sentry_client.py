"""Sentry REST API client.

Implements the IssueTracker interface on top of httpx. One client owns one
RequestExecutor, so every query made through it shares the connection's
rate-limit state.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from slogcli.domain.interfaces.issue_tracker import IssueTracker
from slogcli.domain.models.common import EventId, IssueId, ProjectSlug, SentryConfig
from slogcli.domain.models.errors import ApiError
from slogcli.domain.models.sentry import SentryEvent, SentryIssue
from slogcli.infrastructure.api.pagination import PaginationDriver
from slogcli.infrastructure.resilience.request_executor import EventListener, RequestExecutor, SleepFunc

logger = logging.getLogger(__name__)

DEFAULT_ISSUE_LIMIT = 25
DEFAULT_EVENT_LIMIT = 10
USER_AGENT = "slog/1.0"
MAX_PAGE_SIZE = 100  # server-side cap on `limit`


def build_http_client(
    config: SentryConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Creates the `httpx.AsyncClient` used for every request of a connection."""
    return httpx.AsyncClient(
        base_url=config.base_url,
        timeout=httpx.Timeout(config.http_timeout),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        transport=transport,
    )


class SentryClient(IssueTracker):
    """Read-only access to one organization's issues and events."""

    def __init__(
        self,
        config: SentryConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFunc = asyncio.sleep,
        event_listener: Optional[EventListener] = None,
    ):
        self.config = config
        self._http_client = http_client or build_http_client(config)
        self.executor = RequestExecutor(
            self._http_client,
            auth_token=config.auth_token,
            sleep=sleep,
            event_listener=event_listener,
        )
        self.paginator = PaginationDriver(self.executor, default_max_results=DEFAULT_ISSUE_LIMIT)
        logger.debug(f"SentryClient initialized for {config!r}")

    async def __aenter__(self) -> "SentryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http_client.aclose()

    def _issues_path(self, project: Optional[ProjectSlug]) -> str:
        if project:
            return f"/projects/{self.config.org}/{project}/issues/"
        return f"/organizations/{self.config.org}/issues/"

    def _issue_path(self, issue_id: IssueId) -> str:
        return f"/organizations/{self.config.org}/issues/{issue_id}"

    async def get_issues(
        self,
        project: Optional[ProjectSlug] = None,
        query: Optional[str] = None,
        stats_period: Optional[str] = None,
        environment: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[SentryIssue]:
        params: Dict[str, Any] = {}
        if query:
            params["query"] = query
        if stats_period:
            params["statsPeriod"] = stats_period
        if environment:
            params["environment"] = environment
        if limit:
            params["limit"] = str(min(limit, MAX_PAGE_SIZE))

        return await self.paginator.list_all(
            self._issues_path(project), params, max_results=limit or DEFAULT_ISSUE_LIMIT,
        )

    async def get_issue_events(
        self,
        issue_id: IssueId,
        limit: Optional[int] = None,
        full: bool = False,
    ) -> List[SentryEvent]:
        params: Dict[str, Any] = {}
        if limit:
            params["limit"] = str(min(limit, MAX_PAGE_SIZE))
        if full:
            params["full"] = "true"

        return await self.paginator.list_all(
            f"{self._issue_path(issue_id)}/events/", params, max_results=limit or DEFAULT_EVENT_LIMIT,
        )

    async def get_event(self, issue_id: IssueId, event_id: EventId) -> SentryEvent:
        page = await self.executor.execute(f"{self._issue_path(issue_id)}/events/{event_id}/", shape=dict)
        return page.records[0]

    async def get_latest_event(self, issue_id: IssueId) -> SentryEvent:
        page = await self.executor.execute(f"{self._issue_path(issue_id)}/events/latest/", shape=dict)
        return page.records[0]

    async def test_connection(self) -> bool:
        try:
            await self.executor.execute(f"/organizations/{self.config.org}/", shape=dict)
            return True
        except ApiError as e:
            logger.debug(f"Connection test failed: {e!r}")
            return False
