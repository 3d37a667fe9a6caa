"""Application layer: command handling and services."""
