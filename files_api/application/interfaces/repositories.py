"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from files_api.application.dtos.audit import ActionLogCreate
    from files_api.application.dtos.file import FileRecordCreate, FileRecordResult


class IFileRecordRepository(Protocol):
    """Protocol for the file metadata store (DIP).

    Store failures surface as StoreUnavailableException subclasses.
    """

    async def create_record(self, record: FileRecordCreate) -> FileRecordResult:
        """Insert a record; the store assigns id and created_at."""

    async def get_by_id(self, record_id: int) -> FileRecordResult | None:
        """Return record by id, or None."""

    async def get_by_key(self, bucket: str, key: str) -> FileRecordResult | None:
        """Return record by (bucket, key), or None."""

    async def delete(self, record_id: int) -> bool:
        """Delete record by id. Returns False if nothing was deleted."""


class IActionLogRepository(Protocol):
    """Protocol for the append-only action log."""

    async def append(self, entry: ActionLogCreate) -> None:
        """Persist one action log entry."""
