"""Domain exceptions for the files service.

Defines domain-level exceptions for validation, lookup and store failures.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class FilesApiException(Exception):
    """Base exception for all files service errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ---- Validation (400) ----


class ValidationException(FilesApiException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        error_code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            error_code: Specific code for subclasses; defaults to VALIDATION_ERROR.
            details: Extra context merged after the field.
        """
        merged: dict[str, Any] = {"field": field} if field else {}
        if details:
            merged.update(details)
        super().__init__(message, error_code, merged)


class MissingFileException(ValidationException):
    """Raised when an upload carries no file part."""

    def __init__(self) -> None:
        super().__init__("file is required", field="file", error_code="MISSING_FILE")


class MissingCategoryException(ValidationException):
    """Raised when an upload carries no (or a blank) file category."""

    def __init__(self, allowed: list[str]) -> None:
        super().__init__(
            f"fileType is required ({', '.join(allowed)})",
            field="fileType",
            error_code="MISSING_CATEGORY",
            details={"allowed": allowed},
        )


class FileTooLargeException(ValidationException):
    """Raised when the claimed upload size exceeds the configured maximum."""

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            f"file too large (max {max_size} bytes)",
            field="file",
            error_code="FILE_TOO_LARGE",
            details={"size": size, "max_size": max_size},
        )


class UnsupportedMimeTypeException(ValidationException):
    """Raised when the content type is outside the global allow-list."""

    def __init__(self, mime_type: str) -> None:
        super().__init__(
            "invalid file type",
            field="file",
            error_code="UNSUPPORTED_MIME_TYPE",
            details={"mime_type": mime_type},
        )


class InvalidCategoryException(ValidationException):
    """Raised when a category is not one of the known file categories."""

    def __init__(self, category: str, allowed: list[str]) -> None:
        super().__init__(
            f"invalid fileType: must be {', '.join(allowed)}",
            field="fileType",
            error_code="INVALID_CATEGORY",
            details={"category": category, "allowed": allowed},
        )


class CategoryMimeMismatchException(ValidationException):
    """Raised when the content type does not belong to the category's MIME family."""

    def __init__(self, category: str, mime_type: str, accepted: list[str]) -> None:
        super().__init__(
            f"{category} does not accept content type {mime_type}",
            field="file",
            error_code="CATEGORY_MIME_MISMATCH",
            details={"category": category, "mime_type": mime_type, "accepted": accepted},
        )


class InvalidIdException(ValidationException):
    """Raised when a record id is not a valid numeric identifier."""

    def __init__(self, raw_id: str) -> None:
        super().__init__(
            "invalid file ID",
            field="id",
            error_code="INVALID_ID",
            details={"id": raw_id},
        )


# ---- Not found (404) ----


class ResourceNotFoundException(FilesApiException):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        error_code: str = "RESOURCE_NOT_FOUND",
    ) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'file', 'object').
            resource_id: The ID or key that was not found.
            error_code: Specific code for subclasses.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            error_code,
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class RecordNotFoundException(ResourceNotFoundException):
    """Raised when the metadata store has no file record for the id or key."""

    def __init__(self, resource_id: str) -> None:
        super().__init__("file", resource_id, "RECORD_NOT_FOUND")


class ObjectNotFoundException(ResourceNotFoundException):
    """Raised when a file record exists but its object is missing from the object store."""

    def __init__(self, resource_id: str) -> None:
        super().__init__("file", resource_id, "OBJECT_NOT_FOUND")


# ---- Authentication / authorization (401 / 403) ----


class AuthenticationException(FilesApiException):
    """Raised when authentication fails (e.g. missing or invalid token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(FilesApiException):
    """Raised when the caller lacks the scope required for the operation."""

    def __init__(self, scope: str | None = None, message: str = "Permission denied") -> None:
        """Initialize with optional missing scope.

        Args:
            scope: Scope the caller would need (e.g. 'files:delete').
            message: Human-readable message; default used when scope omitted.
        """
        details: dict[str, Any] = {}
        if scope:
            message = f"Permission denied: scope {scope} required"
            details["scope"] = scope
        super().__init__(message, "PERMISSION_DENIED", details)


# ---- File operation failures (500) ----


class FileOperationException(FilesApiException):
    """Base for failures of a store call made by a file operation.

    Details never carry the underlying store error; that is logged server-side.
    """


class StorageWriteFailedException(FileOperationException):
    """Raised when writing the object to the object store fails (no record is created)."""

    def __init__(self) -> None:
        super().__init__("failed to upload file", "STORAGE_WRITE_FAILED")


class StorageReadFailedException(FileOperationException):
    """Raised when the object store fails for a reason other than a missing object."""

    def __init__(self) -> None:
        super().__init__("failed to read file from storage", "STORAGE_READ_FAILED")


class StorageDeleteFailedException(FileOperationException):
    """Raised when deleting the object fails (the record is left untouched)."""

    def __init__(self) -> None:
        super().__init__("failed to delete file from storage", "STORAGE_DELETE_FAILED")


class MetadataWriteFailedException(FileOperationException):
    """Raised when the file record cannot be created after the object was written."""

    def __init__(self) -> None:
        super().__init__("failed to create file record", "METADATA_WRITE_FAILED")


class MetadataDeleteFailedException(FileOperationException):
    """Raised when the file record cannot be deleted after its object was removed."""

    def __init__(self) -> None:
        super().__init__("failed to delete file record", "METADATA_DELETE_FAILED")


class MetadataUnavailableException(FileOperationException):
    """Raised when reading a file record fails for a reason other than absence."""

    def __init__(self) -> None:
        super().__init__("failed to fetch file record", "METADATA_UNAVAILABLE")


class InvalidStoredCategoryException(FileOperationException):
    """Raised when a stored record carries a category that is no longer known."""

    def __init__(self, record_id: int, category: str) -> None:
        super().__init__(
            "invalid file type in database",
            "INVALID_STORED_CATEGORY",
            {"id": record_id, "category": category},
        )


# ---- Store port failures (raised by adapters, translated by use cases) ----


class StoreException(FilesApiException):
    """Base for failures raised by object-store and metadata-store adapters."""


class ObjectMissingException(StoreException):
    """The object store has no object at (bucket, key)."""


class StoreUnavailableException(StoreException):
    """A store call failed (network, permissions, driver error)."""
