"""Adapters: Sentry HTTP access, resilience, configuration, logging and console output."""
