"""Repositories: map ORM rows to application DTOs."""

from files_api.infrastructure.persistence.repositories.action_log_repo import (
    ActionLogRepository,
)
from files_api.infrastructure.persistence.repositories.file_record_repo import (
    FileRecordRepository,
)

__all__ = ["ActionLogRepository", "FileRecordRepository"]
