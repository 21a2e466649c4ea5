"""ORM models. Importing this package registers every table on Base.metadata."""

from files_api.infrastructure.persistence.models.action_log import ActionLog
from files_api.infrastructure.persistence.models.storage_file import StorageFile

__all__ = ["ActionLog", "StorageFile"]
