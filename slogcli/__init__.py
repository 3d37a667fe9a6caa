"""slog: a scriptable command-line client for Sentry issues and events."""

__version__ = "1.0.0"
