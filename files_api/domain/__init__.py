"""Domain layer: file categories, classification policy, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from files_api.domain.categories import BucketClassifier, CategoryRule, FilePolicy
from files_api.domain.enums import FileCategory
from files_api.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    FileOperationException,
    FilesApiException,
    ObjectMissingException,
    ResourceNotFoundException,
    StoreException,
    StoreUnavailableException,
    ValidationException,
)

__all__ = [
    # Classification
    "BucketClassifier",
    "CategoryRule",
    "FilePolicy",
    # Enums
    "FileCategory",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "FileOperationException",
    "FilesApiException",
    "ObjectMissingException",
    "ResourceNotFoundException",
    "StoreException",
    "StoreUnavailableException",
    "ValidationException",
]
