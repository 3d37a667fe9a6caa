"""Executes single Sentry API requests with rate-limit handling.

Each call waits out an exhausted quota window, sends the request with the
bearer credential, feeds the response headers back into the rate-limit
tracker and retries HTTP 429 responses after the server's `retry-after`
hint. Every other failure is classified and raised to the caller.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type

import httpx

from slogcli.domain.events.api_events import (
    DomainEvent, RequestDeferred, RequestFailed, RequestSucceeded, RetryScheduled,
)
from slogcli.domain.models.common import Page
from slogcli.domain.models.errors import ApiError, DecodeError, RateLimitExceeded, TransportError
from slogcli.infrastructure.api.link_header import decode_links
from slogcli.infrastructure.resilience.rate_limiter import RateLimitTracker

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60

SleepFunc = Callable[[float], Awaitable[None]]
ClockFunc = Callable[[], int]
EventListener = Callable[[DomainEvent], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _log_event(event: DomainEvent) -> None:
    logger.debug(f"EVENT: {event}")


def parse_retry_after(value: Optional[str], default: int = DEFAULT_RETRY_AFTER_SECONDS) -> int:
    """Seconds to wait after a 429; `default` when the header is absent or unusable."""
    if value is None:
        return default
    try:
        seconds = int(value.strip())
    except ValueError:
        return default
    return seconds if seconds >= 0 else default


class RequestExecutor:
    """Sends requests for one configured connection.

    The executor owns the connection's RateLimitTracker. Queries that share
    a connection must share the executor so they see the same quota.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        auth_token: str,
        tracker: Optional[RateLimitTracker] = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: ClockFunc = _now_ms,
        event_listener: Optional[EventListener] = None,
        default_retry_after: int = DEFAULT_RETRY_AFTER_SECONDS,
    ):
        """Initializes the executor.

        Args:
            http_client: Client configured with the API base URL and timeout.
            auth_token: Bearer credential sent on every request.
            tracker: Rate-limit tracker; a fresh one when omitted.
            sleep: Suspension primitive, in seconds.
            clock: Current time in epoch milliseconds.
            event_listener: Receives a DomainEvent per deferral, retry and outcome.
            default_retry_after: Wait in seconds when a 429 carries no usable hint.
        """
        self.http_client = http_client
        self._auth_token = auth_token
        self.tracker = tracker or RateLimitTracker()
        self._sleep = sleep
        self._clock = clock
        self._dispatch = event_listener or _log_event
        self.default_retry_after = default_retry_after

    def _build_headers(self, extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._auth_token}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _wait_for_quota(self, path: str) -> None:
        wait_ms = self.tracker.should_wait(self._clock())
        if wait_ms > 0:
            self._dispatch(RequestDeferred(path=path, wait_ms=wait_ms))
            await self._sleep(wait_ms / 1000)

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]],
        headers: Dict[str, str],
        json_body: Any,
    ) -> httpx.Response:
        """Sends one request and raises for anything but a 2xx response."""
        try:
            response = await self.http_client.request(
                method, path, params=params, headers=headers, json=json_body,
            )
        except httpx.DecodingError as e:
            raise DecodeError(f"Sentry API response for {path} could not be decoded: {e}", status_code=0) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise TransportError(f"Request to {path} failed: {e}", cause=e) from e

        self.tracker.update(response.headers)

        if response.status_code == 429:
            raise RateLimitExceeded(
                parse_retry_after(response.headers.get("retry-after"), self.default_retry_after)
            )
        if not response.is_success:
            raise ApiError(
                f"Sentry API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def _to_page(self, path: str, response: httpx.Response, shape: Type) -> Page:
        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(
                f"Sentry API returned invalid JSON for {path}: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(payload, shape):
            raise DecodeError(
                f"Sentry API returned {type(payload).__name__} for {path}, expected {shape.__name__}",
                status_code=response.status_code,
                body=response.text,
            )

        records = tuple(payload) if isinstance(payload, list) else (payload,)
        return Page(records=records, links=decode_links(response.links))

    async def execute(
        self,
        path: str,
        *,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        json_body: Any = None,
        shape: Type = list,
    ) -> Page:
        """Performs one logical request, retrying it for as long as the server answers 429.

        Args:
            path: Path relative to the API base URL.
            method: HTTP method.
            params: Query parameters.
            headers: Extra headers, merged over the defaults.
            json_body: Optional JSON request body.
            shape: Expected top-level JSON type, `list` for collections or
                `dict` for a single resource (returned as a one-record page).

        Returns:
            The decoded page.

        Raises:
            TransportError: The request could not be sent or answered.
            ApiError: Any non-2xx status other than 429.
            DecodeError: The body cannot be decoded, or is not JSON of the expected shape.
        """
        request_headers = self._build_headers(headers)
        attempt = 0
        while True:
            attempt += 1
            await self._wait_for_quota(path)
            start_time = time.perf_counter()
            try:
                response = await self._send(method, path, params, request_headers, json_body)
                page = self._to_page(path, response, shape)
            except RateLimitExceeded as e:
                self._dispatch(RetryScheduled(
                    path=path, attempt_number=attempt, delay_seconds=e.retry_after_seconds,
                ))
                await self._sleep(e.retry_after_seconds)
                continue
            except ApiError as e:
                self._dispatch(RequestFailed(
                    path=path, error_type=type(e).__name__,
                    status_code=e.status_code, error_message=e.message,
                ))
                raise

            latency_ms = (time.perf_counter() - start_time) * 1000
            self._dispatch(RequestSucceeded(
                path=path, status_code=response.status_code,
                latency_ms=latency_ms, record_count=len(page.records),
            ))
            return page
