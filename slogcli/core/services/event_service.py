"""Application Service for listing the events of an issue."""

import logging
from typing import List, Optional

from slogcli.domain.interfaces.issue_tracker import IssueTracker
from slogcli.domain.interfaces.user_interface import UserInterface
from slogcli.domain.models.common import EventId, IssueId, OutputFormat
from slogcli.domain.models.sentry import SentryEvent
from slogcli.infrastructure.cli.formatters import build_events_view, prepare_records
from slogcli.infrastructure.redaction.redactor import redact

logger = logging.getLogger(__name__)


class EventService:
    """Fetches events for an issue, optionally with full payloads."""

    def __init__(self, tracker: IssueTracker, ui: UserInterface):
        self.tracker = tracker
        self.ui = ui

    async def fetch_events(self, issue_id: IssueId, limit: int, expand: bool = False) -> List[SentryEvent]:
        """Lists events; with `expand`, makes sure each one carries its entries.

        The listing endpoint may ignore `full=true`. In that case every event
        is fetched individually, one request at a time.
        """
        events = await self.tracker.get_issue_events(issue_id, limit=limit, full=expand)
        if not (expand and events and not events[0].get("entries")):
            return events

        logger.info(f"Listing for issue {issue_id} has no entries; fetching {len(events)} events individually")
        full_events = []
        for event in events:
            full_events.append(await self.tracker.get_event(issue_id, EventId(event["eventID"])))
        return full_events

    async def list_events(
        self,
        issue_id: IssueId,
        limit: int,
        expand: bool = False,
        output_format: OutputFormat = OutputFormat.TABLE,
        redact_data: bool = False,
        fields: Optional[str] = None,
    ) -> List[SentryEvent]:
        """Fetches and displays events.

        Raises:
            ApiError: If any request fails.
        """
        events = await self.fetch_events(issue_id, limit, expand)

        if output_format == OutputFormat.JSON:
            self.ui.display_json(prepare_records(events, redact_data, fields))
        elif not events:
            self.ui.display_output("No events found", style="bright_black")
        else:
            self.ui.display_output(build_events_view(redact(events) if redact_data else events, expand=expand))
        return events
