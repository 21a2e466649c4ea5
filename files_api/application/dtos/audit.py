"""DTOs for the action log (download audit)."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RequestMeta:
    """Request context captured by the HTTP layer for audit records."""

    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class ActionLogCreate:
    """Input for appending one action log record. Append-only; no update."""

    action_type: str
    resource_type: str
    resource_id: str | None
    source: str | None = None
    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FileDownloadAuditEvent:
    """One successful download, as handed to the audit service."""

    record_id: int
    file_name: str
    file_type: str
    size: int
    mime_type: str
    source: str | None = None
    request: RequestMeta = field(default_factory=RequestMeta)
