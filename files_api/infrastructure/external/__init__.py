"""Adapters for external systems (object storage)."""
