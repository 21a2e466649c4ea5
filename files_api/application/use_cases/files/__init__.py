"""File use cases: upload (write), download (read) and delete."""

from files_api.application.use_cases.files.file_operations import (
    FileDeleteService,
    FileDownloadService,
    FileUploadService,
)

__all__ = [
    "FileDeleteService",
    "FileDownloadService",
    "FileUploadService",
]
