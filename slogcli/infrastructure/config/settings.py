"""Provides functions for loading and accessing configuration settings.

Settings come from environment variables and from env-format files parsed
with python-dotenv. Priority order (highest to lowest):

1. Environment variables
2. `.env` in the current directory
3. `.slog` in the current directory
4. `~/.config/slog/config`
5. `~/.slog`
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import dotenv_values

from slogcli.domain.models.common import DEFAULT_BASE_URL, OrgSlug, SentryConfig
from slogcli.domain.models.errors import ConfigurationError

logger = logging.getLogger(__name__)

# --- Configuration Keys ---
AUTH_TOKEN_KEY = "SENTRY_AUTH_TOKEN"
ORG_KEY = "SENTRY_ORG"
BASE_URL_KEY = "SENTRY_BASE_URL"
LOG_LEVEL_KEY = "SLOG_LOG_LEVEL"
LOG_FILE_KEY = "SLOG_LOG_FILE"
HTTP_TIMEOUT_KEY = "SLOG_HTTP_TIMEOUT"

DEFAULT_HTTP_TIMEOUT = 30.0
VALID_TOKEN_PREFIXES = ("sntrys_", "sentry_")

CONFIG_HELP = """Configure by creating one of:
  .env or .slog in current directory
  ~/.config/slog/config (global)
  ~/.slog (global)

File format:
  SENTRY_AUTH_TOKEN=sntrys_your_token
  SENTRY_ORG=your-org-slug
  # Optional:
  # SENTRY_BASE_URL=https://sentry.io/api/0

Or set environment variables:
  export SENTRY_AUTH_TOKEN="..."
  export SENTRY_ORG="..."

Create a token at: https://sentry.io/settings/auth-tokens/"""

# --- Module State ---
_file_config: Dict[str, str] = {}
_source: Optional[str] = None
_test_config: Dict[str, Any] = {}
_loaded = False


def default_config_locations() -> List[Path]:
    """Config files in priority order, highest first."""
    cwd = Path.cwd()
    home = Path.home()
    return [
        cwd / ".env",
        cwd / ".slog",
        home / ".config" / "slog" / "config",
        home / ".slog",
    ]


def _read_config_file(path: Path) -> Dict[str, str]:
    """Parses one env-format file; empty when the file is missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        values = dotenv_values(path, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read config file {path}: {e}")
        return {}
    return {key: value for key, value in values.items() if value is not None}


def load_configuration(locations: Optional[List[Path]] = None, force: bool = False) -> None:
    """Loads settings from the config files.

    Args:
        locations: Files to read, highest priority first. Defaults to
            `default_config_locations()`.
        force: Reload even if configuration was already loaded.
    """
    global _file_config, _source, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _file_config = {}
    _source = None

    # Lowest priority first so that higher priority files overwrite
    for path in reversed(locations if locations is not None else default_config_locations()):
        values = _read_config_file(path)
        if values:
            _file_config.update(values)
            _source = str(path)
            logger.debug(f"Loaded configuration from: {path}")

    if os.environ.get(AUTH_TOKEN_KEY) or os.environ.get(ORG_KEY):
        _source = "environment"

    _loaded = True
    logger.debug(f"Configuration loading completed. Source: {_source}")


def get_config(key: str, default: Any = None) -> Any:
    """Gets a configuration value by key.

    Priority: test overrides, environment variable, config files, default.
    """
    if key in _test_config:
        return _test_config[key]
    value = os.environ.get(key)
    if value:
        return value
    if not _loaded:
        load_configuration()
    value = _file_config.get(key)
    if value:
        return value
    return default


def get_config_source() -> Optional[str]:
    """Where the credentials came from: a file path, 'environment', or None."""
    if not _loaded:
        load_configuration()
    return _source


def get_http_timeout() -> float:
    raw = get_config(HTTP_TIMEOUT_KEY, DEFAULT_HTTP_TIMEOUT)
    try:
        timeout = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {HTTP_TIMEOUT_KEY}={raw!r}; using {DEFAULT_HTTP_TIMEOUT}s")
        return DEFAULT_HTTP_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_HTTP_TIMEOUT


def get_sentry_config() -> SentryConfig:
    """Builds the connection settings.

    Raises:
        ConfigurationError: If the auth token or organization is missing.
    """
    auth_token = get_config(AUTH_TOKEN_KEY)
    org = get_config(ORG_KEY)
    if not auth_token or not org:
        raise ConfigurationError("Sentry credentials not found.")

    return SentryConfig(
        auth_token=str(auth_token),
        org=OrgSlug(str(org)),
        base_url=str(get_config(BASE_URL_KEY, DEFAULT_BASE_URL)).rstrip("/"),
        http_timeout=get_http_timeout(),
    )


def validate_config(config: SentryConfig) -> List[str]:
    """Returns warnings about settings that look wrong but are not fatal."""
    warnings = []
    if not config.auth_token.startswith(VALID_TOKEN_PREFIXES):
        warnings.append(
            "Auth token format may be invalid. Expected prefix: " + " or ".join(VALID_TOKEN_PREFIXES)
        )
    if not config.base_url.startswith(("https://", "http://")):
        warnings.append(f"Base URL does not look like an HTTP URL: {config.base_url}")
    return warnings


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Overrides configuration values (highest priority) for tests."""
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration keys: {sorted(config_dict)}")


def clear_test_config() -> None:
    """Clears overrides and forgets loaded files."""
    global _loaded
    _test_config.clear()
    _loaded = False
