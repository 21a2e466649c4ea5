"""Shared helpers used across layers (logging, time, background tasks, headers)."""
