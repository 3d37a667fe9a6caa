"""Application Service for `tail`: polls for new events and prints them.

Events already present when tailing starts are marked as seen and never
printed. Each poll lists recently active issues, skips the ones not seen
since the previous poll, and prints events that are both unseen and newer
than the previous poll.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Set

from slogcli.domain.interfaces.issue_tracker import IssueTracker
from slogcli.domain.interfaces.user_interface import UserInterface
from slogcli.domain.models.common import IssueId, OutputFormat, StatsPeriod, TailOptions
from slogcli.domain.models.errors import ApiError
from slogcli.domain.models.sentry import SentryEvent, SentryIssue
from slogcli.infrastructure.cli.formatters import format_tail_line, parse_timestamp, prepare_records
from slogcli.infrastructure.redaction.redactor import redact

logger = logging.getLogger(__name__)

TAIL_STATS_PERIOD = StatsPeriod("1h")
PRIME_ISSUE_LIMIT = 10
POLL_ISSUE_LIMIT = 25
EVENTS_PER_ISSUE = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TailService:
    """Keeps the seen-event set and the last poll time for one session."""

    def __init__(
        self,
        tracker: IssueTracker,
        ui: UserInterface,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.tracker = tracker
        self.ui = ui
        self._sleep = sleep
        self._clock = clock
        self.seen_events: Set[str] = set()
        self.last_check: Optional[datetime] = None

    async def _list_issues(self, options: TailOptions, limit: int) -> List[SentryIssue]:
        return await self.tracker.get_issues(
            project=options.project,
            query=options.query,
            stats_period=TAIL_STATS_PERIOD,
            limit=limit,
        )

    async def _recent_events(self, issue: SentryIssue) -> List[SentryEvent]:
        """Latest events of one issue; a failure here only skips the issue."""
        try:
            return await self.tracker.get_issue_events(IssueId(issue["id"]), limit=EVENTS_PER_ISSUE)
        except ApiError as e:
            logger.warning(f"Skipping issue {issue.get('id')}: {e.message}")
            return []

    async def prime(self, options: TailOptions) -> None:
        """Marks the events that exist right now as seen.

        Raises:
            ApiError: If the issue listing fails.
        """
        self.last_check = self._clock()
        for issue in await self._list_issues(options, PRIME_ISSUE_LIMIT):
            for event in await self._recent_events(issue):
                if event.get("eventID"):
                    self.seen_events.add(event["eventID"])
        logger.info(f"Tail primed with {len(self.seen_events)} known events")

    async def poll_once(self, options: TailOptions) -> List[SentryEvent]:
        """Prints and returns the events that appeared since the last poll.

        Raises:
            ApiError: If the issue listing fails. last_check is left unchanged.
        """
        poll_started = self._clock()
        last_check = self.last_check or poll_started
        new_events: List[SentryEvent] = []

        for issue in await self._list_issues(options, POLL_ISSUE_LIMIT):
            last_seen = parse_timestamp(issue.get("lastSeen"))
            if last_seen is None or last_seen <= last_check:
                continue

            for event in await self._recent_events(issue):
                event_id = event.get("eventID")
                if not event_id or event_id in self.seen_events:
                    continue
                created = parse_timestamp(event.get("dateCreated"))
                if created is None or created <= last_check:
                    continue
                self.seen_events.add(event_id)
                new_events.append(event)
                self._emit(event, options)

        self.last_check = poll_started
        return new_events

    def _emit(self, event: SentryEvent, options: TailOptions) -> None:
        if options.output_format == OutputFormat.JSON:
            self.ui.display_json(prepare_records([event], options.redact, options.fields)[0], compact=True)
        else:
            self.ui.display_output(format_tail_line(redact(event) if options.redact else event))

    async def run(self, options: TailOptions, max_polls: Optional[int] = None) -> None:
        """Primes, then polls every `options.interval` seconds.

        Runs until cancelled (Ctrl+C) unless `max_polls` is given. A failed
        poll is reported and polling continues; a failed priming is raised.
        """
        self.ui.display_info(f"Tailing events matching: {options.query or '(all)'}")
        self.ui.display_info(f"Polling every {options.interval:g}s. Press Ctrl+C to stop.")
        await self.prime(options)

        polls = 0
        while max_polls is None or polls < max_polls:
            await self._sleep(options.interval)
            try:
                await self.poll_once(options)
            except ApiError as e:
                logger.warning(f"Poll failed: {e!r}")
                self.ui.display_error(f"Poll error: {e.message}")
            polls += 1
