"""Action log repository. Append-only; implements IActionLogRepository."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from files_api.application.dtos.audit import ActionLogCreate
from files_api.infrastructure.persistence.models.action_log import ActionLog


class ActionLogRepository:
    """Append-only action log repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, entry: ActionLogCreate) -> None:
        """Append one action log entry. Caller owns the transaction."""
        self.db.add(
            ActionLog(
                action_type=entry.action_type,
                resource_type=entry.resource_type,
                resource_id=entry.resource_id,
                source=entry.source,
                request_id=entry.request_id,
                ip_address=entry.ip_address,
                user_agent=entry.user_agent,
                details=dict(entry.details),
            )
        )
        await self.db.flush()
