"""Sentry REST access.

Cursor pagination over the `link` header and the IssueTracker implementation.
"""
