import pytest
import httpx
from typer.testing import CliRunner
from unittest.mock import MagicMock

from slogcli.domain.interfaces.issue_tracker import IssueTracker
from slogcli.domain.interfaces.user_interface import UserInterface
from slogcli.domain.models.common import OrgSlug, SentryConfig
from slogcli.infrastructure.config import settings

BASE_URL = "https://sentry.example.com/api/0"


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keeps real config files and credentials out of every test."""
    monkeypatch.setattr(settings, "default_config_locations", lambda: [])
    for key in (settings.AUTH_TOKEN_KEY, settings.ORG_KEY, settings.BASE_URL_KEY,
                settings.LOG_LEVEL_KEY, settings.LOG_FILE_KEY, settings.HTTP_TIMEOUT_KEY):
        monkeypatch.delenv(key, raising=False)
    settings.clear_test_config()
    yield
    settings.clear_test_config()


@pytest.fixture
def sentry_config():
    return SentryConfig(auth_token="sntrys_test_token", org=OrgSlug("acme"), base_url=BASE_URL)


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def mock_tracker():
    """IssueTracker mock; its coroutine methods are AsyncMocks."""
    return MagicMock(spec=IssueTracker)


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records the requested delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


def make_http_client(handler, base_url=BASE_URL):
    """httpx.AsyncClient answering every request with `handler(request)`."""
    return httpx.AsyncClient(base_url=base_url, transport=httpx.MockTransport(handler))


def link_header(next_cursor=None, next_results="false", prev_cursor="0:0:1", prev_results="false"):
    """Builds a Sentry style `link` header."""
    url = f"{BASE_URL}/organizations/acme/issues/"
    parts = [f'<{url}?&cursor={prev_cursor}>; rel="previous"; results="{prev_results}"; cursor="{prev_cursor}"']
    if next_cursor is not None:
        parts.append(f'<{url}?&cursor={next_cursor}>; rel="next"; results="{next_results}"; cursor="{next_cursor}"')
    return ", ".join(parts)
