import pytest

from slogcli.domain.models.common import DEFAULT_BASE_URL, OrgSlug, SentryConfig
from slogcli.domain.models.errors import ConfigurationError
from slogcli.infrastructure.config import settings


@pytest.fixture
def config_files(tmp_path):
    """Two config files, the first one taking priority."""
    high = tmp_path / ".env"
    low = tmp_path / "global"
    high.write_text("SENTRY_ORG=local-org\n")
    low.write_text("SENTRY_AUTH_TOKEN=sntrys_global\nSENTRY_ORG=global-org\n# comment\n")
    return [high, low]


def test_higher_priority_file_wins(config_files):
    settings.load_configuration(config_files, force=True)

    assert settings.get_config("SENTRY_ORG") == "local-org"
    assert settings.get_config("SENTRY_AUTH_TOKEN") == "sntrys_global"
    assert settings.get_config_source() == str(config_files[0])


def test_environment_beats_files(config_files, monkeypatch):
    monkeypatch.setenv("SENTRY_ORG", "env-org")
    settings.load_configuration(config_files, force=True)

    assert settings.get_config("SENTRY_ORG") == "env-org"
    assert settings.get_config_source() == "environment"


def test_test_overrides_beat_environment(monkeypatch):
    monkeypatch.setenv("SENTRY_ORG", "env-org")
    settings.set_config_for_testing({"SENTRY_ORG": "test-org"})
    assert settings.get_config("SENTRY_ORG") == "test-org"


def test_missing_files_are_skipped(tmp_path):
    settings.load_configuration([tmp_path / "nope"], force=True)
    assert settings.get_config("SENTRY_ORG", "fallback") == "fallback"
    assert settings.get_config_source() is None


def test_quoted_values_are_unquoted(tmp_path):
    path = tmp_path / ".slog"
    path.write_text('SENTRY_AUTH_TOKEN="sntrys_quoted"\nexport SENTRY_ORG=acme\n')
    settings.load_configuration([path], force=True)

    assert settings.get_config("SENTRY_AUTH_TOKEN") == "sntrys_quoted"
    assert settings.get_config("SENTRY_ORG") == "acme"


def test_get_sentry_config_from_environment(monkeypatch):
    monkeypatch.setenv("SENTRY_AUTH_TOKEN", "sntrys_abc")
    monkeypatch.setenv("SENTRY_ORG", "acme")
    monkeypatch.setenv("SENTRY_BASE_URL", "https://sentry.internal/api/0/")

    config = settings.get_sentry_config()

    assert config.auth_token == "sntrys_abc"
    assert config.org == "acme"
    assert config.base_url == "https://sentry.internal/api/0"
    assert config.http_timeout == 30.0


def test_get_sentry_config_defaults_base_url(monkeypatch):
    monkeypatch.setenv("SENTRY_AUTH_TOKEN", "sntrys_abc")
    monkeypatch.setenv("SENTRY_ORG", "acme")
    assert settings.get_sentry_config().base_url == DEFAULT_BASE_URL


@pytest.mark.parametrize("values", [
    {},
    {"SENTRY_AUTH_TOKEN": "sntrys_abc"},
    {"SENTRY_ORG": "acme"},
])
def test_missing_credentials_raise(values):
    settings.set_config_for_testing(values)
    with pytest.raises(ConfigurationError):
        settings.get_sentry_config()


@pytest.mark.parametrize("raw, expected", [("12.5", 12.5), ("0", 30.0), ("-1", 30.0), ("abc", 30.0)])
def test_http_timeout(raw, expected):
    settings.set_config_for_testing({"SLOG_HTTP_TIMEOUT": raw})
    assert settings.get_http_timeout() == expected


def test_validate_config_accepts_good_settings():
    config = SentryConfig(auth_token="sntrys_abc", org=OrgSlug("acme"))
    assert settings.validate_config(config) == []


def test_validate_config_warns():
    config = SentryConfig(auth_token="abc", org=OrgSlug("acme"), base_url="sentry.io/api/0")
    warnings = settings.validate_config(config)
    assert len(warnings) == 2
    assert "token format" in warnings[0]
    assert "sentry.io/api/0" in warnings[1]


def test_config_repr_hides_token():
    config = SentryConfig(auth_token="sntrys_supersecret", org=OrgSlug("acme"))
    assert "supersecret" not in repr(config)
