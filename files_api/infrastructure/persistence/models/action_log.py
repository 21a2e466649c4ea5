"""ActionLog ORM model. Append-only log of file access (downloads)."""

from typing import Any

from sqlalchemy import Connection, Index, String, Text, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from files_api.infrastructure.persistence.database import Base
from files_api.infrastructure.persistence.models.mixins import (
    BigIdentityMixin,
    CreatedAtMixin,
)


class ActionLog(BigIdentityMixin, CreatedAtMixin, Base):
    """Who accessed which resource, when, and from where. No update."""

    __tablename__ = "action_logs"

    action_type: Mapped[str] = mapped_column(String(64), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(64), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String, nullable=True)
    source: Mapped[str | None] = mapped_column(String(64), nullable=True)
    request_id: Mapped[str | None] = mapped_column(String, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_action_logs_resource", "resource_type", "resource_id"),
    )


@event.listens_for(ActionLog, "before_update")
def _prevent_action_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: ActionLog
) -> None:
    """Action log entries are append-only; updates are forbidden."""
    raise ValueError("Action log entries are immutable and cannot be updated.")
