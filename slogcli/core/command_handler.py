"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work
to the application services and turns API failures into user-facing
errors. Each handler returns True on success so that main.py can choose the
process exit code.
"""

import logging
from typing import Optional

from slogcli.core.services.event_service import EventService
from slogcli.core.services.issue_service import IssueService
from slogcli.core.services.query import build_query
from slogcli.core.services.tail_service import TailService
from slogcli.domain.interfaces.issue_tracker import IssueTracker
from slogcli.domain.interfaces.user_interface import UserInterface
from slogcli.domain.models.common import IssueId, OutputFormat, ProjectSlug, SentryConfig, TailOptions
from slogcli.domain.models.errors import ApiError
from slogcli.infrastructure.config.settings import validate_config

logger = logging.getLogger(__name__)

DEFAULT_TAIL_QUERY = "is:unresolved"


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        issue_service: IssueService,
        event_service: EventService,
        tail_service: TailService,
        tracker: IssueTracker,
        ui: UserInterface,
    ):
        self.issue_service = issue_service
        self.event_service = event_service
        self.tail_service = tail_service
        self.tracker = tracker
        self.ui = ui

    def _report(self, command: str, error: ApiError) -> bool:
        logger.error(f"'{command}' command failed: {error!r}")
        if error.body:
            logger.debug(f"Response body: {error.body}")
        self.ui.display_error(error.message)
        return False

    async def handle_issues(
        self,
        query: Optional[str] = None,
        env: Optional[str] = None,
        since: Optional[str] = None,
        limit: int = 25,
        project: Optional[str] = None,
        output_format: OutputFormat = OutputFormat.TABLE,
        redact: bool = False,
        fields: Optional[str] = None,
    ) -> bool:
        """Handles the 'issues' command."""
        issues_query = self.issue_service.build_issues_query(
            query=query, environment=env, since=since, project=project, limit=limit,
        )
        logger.info(f"Handling 'issues' command: {issues_query}")
        try:
            await self.issue_service.list_issues(issues_query, output_format, redact, fields)
        except ApiError as e:
            return self._report("issues", e)
        return True

    async def handle_events(
        self,
        issue_id: str,
        limit: int = 10,
        expand: bool = False,
        output_format: OutputFormat = OutputFormat.TABLE,
        redact: bool = False,
        fields: Optional[str] = None,
    ) -> bool:
        """Handles the 'events' command."""
        logger.info(f"Handling 'events' command for issue {issue_id} (limit={limit}, expand={expand})")
        try:
            await self.event_service.list_events(
                IssueId(issue_id), limit, expand, output_format, redact, fields,
            )
        except ApiError as e:
            return self._report("events", e)
        return True

    async def handle_tail(
        self,
        query: Optional[str] = DEFAULT_TAIL_QUERY,
        env: Optional[str] = None,
        project: Optional[str] = None,
        interval: float = 10.0,
        output_format: OutputFormat = OutputFormat.TABLE,
        redact: bool = False,
        fields: Optional[str] = None,
        max_polls: Optional[int] = None,
    ) -> bool:
        """Handles the 'tail' command. Only a failed initial fetch is fatal."""
        options = TailOptions(
            query=build_query(query or DEFAULT_TAIL_QUERY, env),
            project=ProjectSlug(project) if project else None,
            interval=interval,
            output_format=output_format,
            redact=redact,
            fields=fields,
        )
        logger.info(f"Handling 'tail' command: {options}")
        try:
            await self.tail_service.run(options, max_polls=max_polls)
        except ApiError as e:
            logger.error(f"Initial tail fetch failed: {e!r}")
            self.ui.display_error(f"Error during initial fetch: {e.message}")
            return False
        return True

    async def handle_check(self, config: SentryConfig, source: Optional[str]) -> bool:
        """Handles the 'check' command: shows where settings come from and tests the connection."""
        self.ui.display_info(f"Config source: {source or 'none'}")
        self.ui.display_info(f"Organization: {config.org}")
        self.ui.display_info(f"Base URL: {config.base_url}")
        for warning in validate_config(config):
            self.ui.display_warning(warning)

        if await self.tracker.test_connection():
            self.ui.display_output(f"Connected to organization '{config.org}'.", style="green")
            return True
        self.ui.display_error(f"Could not reach organization '{config.org}' at {config.base_url}.")
        return False
