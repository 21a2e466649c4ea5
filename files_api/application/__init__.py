"""Application layer: ports, DTOs, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (object store, file records, audit).
"""

from files_api.application.interfaces import (
    IActionLogRepository,
    IAuditService,
    IFileRecordRepository,
    IObjectStore,
)
from files_api.application.use_cases.files import (
    FileDeleteService,
    FileDownloadService,
    FileUploadService,
)

__all__ = [
    "FileDeleteService",
    "FileDownloadService",
    "FileUploadService",
    "IActionLogRepository",
    "IAuditService",
    "IFileRecordRepository",
    "IObjectStore",
]
