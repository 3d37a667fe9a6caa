"""Shapes of the Sentry JSON payloads consumed by slog.

Records stay plain dicts at runtime; these TypedDicts document the keys the
formatters and services read. Every key is optional because Sentry omits
fields freely between versions and endpoints.
"""

from typing import Any, Dict, List, Optional, Tuple, TypedDict


class ProjectRef(TypedDict, total=False):
    id: str
    name: str
    slug: str


class IssueMetadata(TypedDict, total=False):
    type: str
    value: str
    filename: str
    function: str


class Assignee(TypedDict, total=False):
    type: str
    id: str
    name: str
    email: str


class SentryIssue(TypedDict, total=False):
    """An issue (error group)."""
    id: str
    shortId: str
    title: str
    culprit: str
    level: str
    status: str
    platform: str
    project: ProjectRef
    type: str
    metadata: IssueMetadata
    count: str
    userCount: int
    firstSeen: str
    lastSeen: str
    assignedTo: Optional[Assignee]
    hasSeen: bool
    isBookmarked: bool
    isSubscribed: bool
    annotations: List[str]
    stats: Dict[str, List[Tuple[int, int]]]


class StackFrame(TypedDict, total=False):
    filename: str
    absPath: str
    module: str
    package: str
    platform: str
    function: str
    rawFunction: str
    symbol: str
    context: List[Tuple[int, str]]
    lineNo: int
    colNo: int
    inApp: bool
    vars: Dict[str, Any]


class Stacktrace(TypedDict, total=False):
    frames: List[StackFrame]
    framesOmitted: Tuple[int, int]
    hasSystemFrames: bool


class ExceptionMechanism(TypedDict, total=False):
    type: str
    handled: bool
    description: str


class ExceptionValue(TypedDict, total=False):
    type: str
    value: str
    mechanism: ExceptionMechanism
    stacktrace: Stacktrace
    module: str
    threadId: int


class ExceptionData(TypedDict, total=False):
    values: List[ExceptionValue]
    excOmitted: bool
    hasSystemFrames: bool


class Breadcrumb(TypedDict, total=False):
    type: str
    category: str
    message: str
    data: Dict[str, Any]
    level: str
    timestamp: str


class BreadcrumbData(TypedDict, total=False):
    values: List[Breadcrumb]


class EventEntry(TypedDict, total=False):
    type: str  # 'exception', 'breadcrumbs', 'request', ...
    data: Any


class SentryUser(TypedDict, total=False):
    id: str
    email: str
    username: str
    ip_address: str
    name: str
    data: Dict[str, Any]


class SentryEvent(TypedDict, total=False):
    """A single event belonging to an issue."""
    eventID: str
    id: str
    groupID: str
    dateCreated: str
    dateReceived: str
    entries: List[EventEntry]
    message: str
    title: str
    location: str
    culprit: str
    user: SentryUser
    tags: List[Dict[str, str]]
    platform: str
    type: str
    metadata: Dict[str, Any]
    release: Dict[str, Any]
    environment: str
