"""Application Service for listing issues."""

import logging
from typing import List, Optional

from slogcli.core.services.query import build_query, parse_time_period
from slogcli.domain.interfaces.issue_tracker import IssueTracker
from slogcli.domain.interfaces.user_interface import UserInterface
from slogcli.domain.models.common import IssuesQuery, OutputFormat, ProjectSlug
from slogcli.domain.models.sentry import SentryIssue
from slogcli.infrastructure.cli.formatters import build_issues_table, prepare_records
from slogcli.infrastructure.redaction.redactor import redact

logger = logging.getLogger(__name__)


class IssueService:
    """Fetches issues through the IssueTracker and renders them."""

    def __init__(self, tracker: IssueTracker, ui: UserInterface):
        self.tracker = tracker
        self.ui = ui

    @staticmethod
    def build_issues_query(
        query: Optional[str] = None,
        environment: Optional[str] = None,
        since: Optional[str] = None,
        project: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> IssuesQuery:
        """Translates CLI options into an IssuesQuery."""
        return IssuesQuery(
            query=build_query(query, environment),
            stats_period=parse_time_period(since),
            project=ProjectSlug(project) if project else None,
            limit=limit,
        )

    async def fetch_issues(self, issues_query: IssuesQuery) -> List[SentryIssue]:
        logger.info(f"Fetching issues: {issues_query}")
        return await self.tracker.get_issues(
            project=issues_query.project,
            query=issues_query.query,
            stats_period=issues_query.stats_period,
            environment=issues_query.environment,
            limit=issues_query.limit,
        )

    async def list_issues(
        self,
        issues_query: IssuesQuery,
        output_format: OutputFormat = OutputFormat.TABLE,
        redact_data: bool = False,
        fields: Optional[str] = None,
    ) -> List[SentryIssue]:
        """Fetches and displays issues.

        Raises:
            ApiError: If fetching fails; nothing is displayed in that case.
        """
        issues = await self.fetch_issues(issues_query)

        if output_format == OutputFormat.JSON:
            self.ui.display_json(prepare_records(issues, redact_data, fields))
        elif not issues:
            self.ui.display_output("No issues found", style="bright_black")
        else:
            self.ui.display_output(build_issues_table(redact(issues) if redact_data else issues))
        return issues
