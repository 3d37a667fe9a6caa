"""Scrubs credentials and personal data from Sentry payloads.

Used by `--redact` before anything is rendered. Strings are scanned for
known secret shapes; dict entries whose key names a credential are replaced
wholesale.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

REDACTED = "[REDACTED]"

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
API_KEY_RE = re.compile(r"\b(?:sk[-_]|pk[-_]|api[-_]?key[-_]?|token[-_]?)[a-zA-Z0-9_-]{20,}\b", re.IGNORECASE)
BEARER_RE = re.compile(r"Bearer\s+[a-zA-Z0-9_.-]+", re.IGNORECASE)
BASIC_AUTH_RE = re.compile(r"Basic\s+[a-zA-Z0-9+/=]+", re.IGNORECASE)
JWT_RE = re.compile(r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*")
AWS_KEY_RE = re.compile(r"\b(?:AKIA|ASIA)[A-Z0-9]{16}\b")
SENTRY_TOKEN_RE = re.compile(r"\b(?:sntrys_|sentry_)[a-zA-Z0-9_-]+")
URL_PASSWORD_RE = re.compile(r"://([^:/@\s]+):([^@/\s]+)@")

SENSITIVE_HEADERS = frozenset({
    "authorization",
    "x-api-key",
    "x-auth-token",
    "cookie",
    "set-cookie",
    "x-csrf-token",
    "x-xsrf-token",
    "proxy-authorization",
    "www-authenticate",
    "x-access-token",
    "x-refresh-token",
})

SENSITIVE_KEY_FRAGMENTS = ("password", "secret", "token", "api_key", "apikey", "auth", "credential")


def redact_string(value: str) -> str:
    """Replaces every secret-looking substring of `value`."""
    result = URL_PASSWORD_RE.sub(rf"://\1:{REDACTED}@", value)
    result = EMAIL_RE.sub(REDACTED, result)
    result = JWT_RE.sub(REDACTED, result)
    result = BEARER_RE.sub(f"Bearer {REDACTED}", result)
    result = BASIC_AUTH_RE.sub(f"Basic {REDACTED}", result)
    result = API_KEY_RE.sub(REDACTED, result)
    result = AWS_KEY_RE.sub(REDACTED, result)
    result = SENTRY_TOKEN_RE.sub(REDACTED, result)
    return result


def is_sensitive_key(key: str) -> bool:
    lower_key = key.lower()
    return lower_key in SENSITIVE_HEADERS or any(fragment in lower_key for fragment in SENSITIVE_KEY_FRAGMENTS)


def redact(value: Any) -> Any:
    """Returns a redacted deep copy of a JSON-like value."""
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, Mapping):
        result: Dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(key, str) and is_sensitive_key(key):
                result[key] = REDACTED
            else:
                result[key] = redact(item)
        return result
    if isinstance(value, (list, tuple)):
        # Sentry sends headers and cookies as [name, value] pairs
        if len(value) == 2 and isinstance(value[0], str) and is_sensitive_key(value[0]):
            return [value[0], REDACTED]
        return [redact(item) for item in value]
    return value


def filter_fields(record: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Keeps only the listed top-level keys, in the order given."""
    return {field: record[field] for field in fields if field in record}


def parse_fields(fields: Optional[str]) -> List[str]:
    """Splits a `--fields` value such as 'id, title,level'."""
    if not fields:
        return []
    return [field.strip() for field in fields.split(",") if field.strip()]
