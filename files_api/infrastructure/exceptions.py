"""Infrastructure exceptions for object-store and metadata-store adapters.

They extend the domain store exceptions so use cases can tell "object is
missing" apart from "store call failed" without importing adapter types.
Details carry the adapter reason for server-side logs only.
"""

from files_api.domain.exceptions import (
    ObjectMissingException,
    StoreUnavailableException,
)


class StorageNotFoundError(ObjectMissingException):
    """Object not found in storage."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(
            f"Object not found: {bucket}/{key}",
            "STORAGE_NOT_FOUND",
            {"bucket": bucket, "key": key},
        )


class StorageUploadError(StoreUnavailableException):
    """Object write failed."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to upload object: {bucket}/{key}",
            "STORAGE_UPLOAD_ERROR",
            {"bucket": bucket, "key": key, "reason": reason},
        )


class StorageDownloadError(StoreUnavailableException):
    """Object read (or stat) failed for a reason other than absence."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to download object: {bucket}/{key}",
            "STORAGE_DOWNLOAD_ERROR",
            {"bucket": bucket, "key": key, "reason": reason},
        )


class StorageDeleteError(StoreUnavailableException):
    """Object deletion failed."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to delete object: {bucket}/{key}",
            "STORAGE_DELETE_ERROR",
            {"bucket": bucket, "key": key, "reason": reason},
        )


class StoragePermissionError(StoreUnavailableException):
    """Path escapes the storage root, or the backend refused access."""

    def __init__(self, path: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {path}",
            "STORAGE_PERMISSION_ERROR",
            {"path": path, "operation": operation},
        )


class MetadataStoreError(StoreUnavailableException):
    """Database call made by a file record repository failed."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Metadata store {operation} failed",
            "METADATA_STORE_ERROR",
            {"operation": operation, "reason": reason},
        )
