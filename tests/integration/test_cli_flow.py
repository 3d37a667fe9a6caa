import json

import httpx
import pytest

from conftest import BASE_URL, link_header
from slogcli import __version__
from slogcli.main import app

ISSUES_PAGE_1 = [
    {"id": "101", "shortId": "WEB-1", "title": "TypeError: x is undefined", "level": "error",
     "count": "12", "userCount": 3, "lastSeen": "2024-01-15T10:00:00Z", "culprit": "app.js in render"},
    {"id": "102", "shortId": "WEB-2", "title": "Login failed for bob@example.com", "level": "warning",
     "count": "1", "userCount": 1, "lastSeen": "2024-01-15T09:00:00Z", "culprit": "auth.py"},
]
ISSUES_PAGE_2 = [
    {"id": "103", "shortId": "WEB-3", "title": "Timeout", "level": "error",
     "count": "4", "userCount": 0, "lastSeen": "2024-01-15T08:00:00Z", "culprit": "db.py"},
]
EVENT_SUMMARY = {"eventID": "aaaabbbbccccdddd", "title": "ValueError: bad", "dateCreated": "2024-01-15T10:00:00Z"}
EVENT_FULL = dict(EVENT_SUMMARY, entries=[{"type": "exception", "data": {"values": [{
    "type": "ValueError", "value": "bad",
    "stacktrace": {"frames": [{"filename": "app/views.py", "function": "index", "lineNo": 42, "inApp": True}]},
}]}}])


class FakeSentry:
    """Answers the Sentry endpoints used by the CLI and records requests."""

    def __init__(self):
        self.requests = []
        self.issue_status = 200

    def __call__(self, request):
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/issues/"):
            if self.issue_status != 200:
                return httpx.Response(self.issue_status, text="denied")
            if request.url.params.get("cursor") == "0:2:0":
                return httpx.Response(200, json=ISSUES_PAGE_2, headers={"link": link_header("0:3:0", "false")})
            return httpx.Response(200, json=ISSUES_PAGE_1, headers={"link": link_header("0:2:0", "true")})
        if path.endswith("/events/"):
            return httpx.Response(200, json=[EVENT_SUMMARY])
        if "/events/" in path:
            return httpx.Response(200, json=EVENT_FULL)
        if path.endswith("/organizations/acme/"):
            return httpx.Response(200, json={"slug": "acme"})
        return httpx.Response(404, text="not found")


@pytest.fixture
def fake_sentry(mocker, monkeypatch):
    monkeypatch.setenv("SENTRY_AUTH_TOKEN", "sntrys_integration")
    monkeypatch.setenv("SENTRY_ORG", "acme")
    monkeypatch.setenv("SENTRY_BASE_URL", BASE_URL)
    monkeypatch.setenv("COLUMNS", "200")
    mocker.patch("slogcli.main.setup_logging")

    server = FakeSentry()
    mocker.patch(
        "slogcli.main.build_http_client",
        side_effect=lambda config: httpx.AsyncClient(base_url=config.base_url, transport=httpx.MockTransport(server)),
    )
    return server


def test_version(runner, mocker):
    mocker.patch("slogcli.main.setup_logging")
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_issues_json_follows_pagination(runner, fake_sentry):
    result = runner.invoke(app, ["issues", "--format", "json", "--limit", "3", "--env", "prod"])

    assert result.exit_code == 0, result.output
    assert [issue["id"] for issue in json.loads(result.output)] == ["101", "102", "103"]
    assert len(fake_sentry.requests) == 2
    first = fake_sentry.requests[0]
    assert first.headers["Authorization"] == "Bearer sntrys_integration"
    assert first.url.params["query"] == "environment:prod"
    assert first.url.params["statsPeriod"] == "24h"
    assert first.url.params["limit"] == "3"


def test_issues_json_redacted_fields(runner, fake_sentry):
    result = runner.invoke(app, ["issues", "-f", "json", "--limit", "2", "--redact", "--fields", "id,title"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [
        {"id": "101", "title": "TypeError: x is undefined"},
        {"id": "102", "title": "Login failed for [REDACTED]"},
    ]


def test_issues_table(runner, fake_sentry):
    result = runner.invoke(app, ["issues", "--project", "web", "--limit", "2"])

    assert result.exit_code == 0, result.output
    assert "WEB-1" in result.output
    assert "WEB-2" in result.output
    assert fake_sentry.requests[0].url.path == "/api/0/projects/acme/web/issues/"


def test_issues_api_error_exits_1(runner, fake_sentry):
    fake_sentry.issue_status = 403
    result = runner.invoke(app, ["issues", "--format", "json"])

    assert result.exit_code == 1
    assert "Sentry API error: 403 Forbidden" in result.output


def test_missing_credentials_exit_1(runner, mocker):
    mocker.patch("slogcli.main.setup_logging")
    result = runner.invoke(app, ["issues"])

    assert result.exit_code == 1
    assert "Sentry credentials not found." in result.output
    assert "SENTRY_AUTH_TOKEN" in result.output


def test_events_expand_refetches_full_events(runner, fake_sentry):
    result = runner.invoke(app, ["events", "WEB-1", "--expand"])

    assert result.exit_code == 0, result.output
    paths = [request.url.path for request in fake_sentry.requests]
    assert paths == [
        "/api/0/organizations/acme/issues/WEB-1/events/",
        "/api/0/organizations/acme/issues/WEB-1/events/aaaabbbbccccdddd/",
    ]
    assert fake_sentry.requests[0].url.params["full"] == "true"
    assert "app/views.py:42 in index" in result.output


def test_events_json(runner, fake_sentry):
    result = runner.invoke(app, ["events", "WEB-1", "-f", "json", "-l", "1"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [EVENT_SUMMARY]


def test_check(runner, fake_sentry):
    result = runner.invoke(app, ["check"])

    assert result.exit_code == 0, result.output
    assert "Config source: environment" in result.output
    assert "Connected to organization 'acme'." in result.output


def test_tail_stops_cleanly_on_interrupt(runner, fake_sentry, mocker):
    def interrupted(coro, dependencies):
        coro.close()
        raise KeyboardInterrupt

    mocker.patch("slogcli.main.run_async", side_effect=interrupted)
    result = runner.invoke(app, ["tail", "--interval", "1"])

    assert result.exit_code == 0
    assert "Stopped tailing." in result.output
