"""Action log service: records file downloads in the action_logs table.

Runs after the response has been handed off, so it opens its own session
instead of borrowing the request's.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from files_api.application.dtos.audit import ActionLogCreate, FileDownloadAuditEvent
from files_api.core.constants import ACTION_FILE_DOWNLOAD, RESOURCE_TYPE_FILE
from files_api.infrastructure.persistence.repositories.action_log_repo import (
    ActionLogRepository,
)

SessionFactory = Callable[[], Any]


class ActionLogService:
    """Implements IAuditService on top of ActionLogRepository."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def log_file_download(self, event: FileDownloadAuditEvent) -> None:
        """Append one file_download entry in its own transaction."""
        entry = ActionLogCreate(
            action_type=ACTION_FILE_DOWNLOAD,
            resource_type=RESOURCE_TYPE_FILE,
            resource_id=str(event.record_id),
            source=event.source,
            request_id=event.request.request_id,
            ip_address=event.request.ip_address,
            user_agent=event.request.user_agent,
            details={
                "filename": event.file_name,
                "file_type": event.file_type,
                "size": event.size,
                "mime_type": event.mime_type,
            },
        )
        session: AsyncSession
        async with self._session_factory() as session:
            async with session.begin():
                await ActionLogRepository(session).append(entry)
