"""Shared utilities: datetime, background tasks, header builders."""

from files_api.shared.utils.background import drain_background_tasks, spawn_background
from files_api.shared.utils.datetime import ensure_utc, utc_now
from files_api.shared.utils.http_headers import content_disposition_attachment

__all__ = [
    "content_disposition_attachment",
    "drain_background_tasks",
    "ensure_utc",
    "spawn_background",
    "utc_now",
]
