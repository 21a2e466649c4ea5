"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from files_api.application.dtos.audit import FileDownloadAuditEvent


class IAuditService(Protocol):
    """Protocol for recording file access in the action log."""

    async def log_file_download(self, event: FileDownloadAuditEvent) -> None:
        """Record one successful download."""
