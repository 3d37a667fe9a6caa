"""Domain Events emitted by the request executor.

Listeners receive these as requests are deferred, retried, completed or
rejected. The default listener only writes DEBUG log records.
"""

from dataclasses import dataclass, field
import time


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class RequestDeferred(DomainEvent):
    """A request is held back because the rate-limit window is exhausted."""
    path: str
    wait_ms: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """The server answered 429; the same request will be sent again."""
    path: str
    attempt_number: int
    delay_seconds: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestSucceeded(DomainEvent):
    path: str
    status_code: int
    latency_ms: float
    record_count: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestFailed(DomainEvent):
    """A request failed definitively (transport, HTTP or decode error)."""
    path: str
    error_type: str
    status_code: int
    error_message: str
    timestamp: float = field(default_factory=time.time)
