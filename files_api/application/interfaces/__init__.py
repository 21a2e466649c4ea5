"""Application interfaces (ports): repository, storage and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from files_api.infrastructure or files_api.api.
"""

from files_api.application.interfaces.repositories import (
    IActionLogRepository,
    IFileRecordRepository,
)
from files_api.application.interfaces.services import IAuditService
from files_api.application.interfaces.storage import IObjectStore

__all__ = [
    "IActionLogRepository",
    "IAuditService",
    "IFileRecordRepository",
    "IObjectStore",
]
