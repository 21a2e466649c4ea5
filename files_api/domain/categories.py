"""Category to bucket classification and MIME policy.

Pure functions over configuration: decides which bucket a file category
lives in and which content types it accepts. Used at upload, download and
delete time so the three paths always agree on the bucket.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from files_api.domain.enums import FileCategory
from files_api.domain.exceptions import (
    CategoryMimeMismatchException,
    InvalidCategoryException,
)

DEFAULT_BUCKETS: dict[FileCategory, str] = {
    FileCategory.PORTFOLIO_IMAGE: "images",
    FileCategory.MINIATURE_IMAGE: "miniatures",
    FileCategory.DOCUMENT: "documents",
}

IMAGE_MIME_PREFIXES: tuple[str, ...] = ("image/",)
DOCUMENT_MIME_PREFIXES: tuple[str, ...] = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

_ACCEPTED_MIME_PREFIXES: dict[FileCategory, tuple[str, ...]] = {
    FileCategory.PORTFOLIO_IMAGE: IMAGE_MIME_PREFIXES,
    FileCategory.MINIATURE_IMAGE: IMAGE_MIME_PREFIXES,
    FileCategory.DOCUMENT: DOCUMENT_MIME_PREFIXES,
}

DEFAULT_ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    *DOCUMENT_MIME_PREFIXES,
)

DEFAULT_MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB


def matches_prefix(mime_type: str, prefixes: tuple[str, ...] | list[str]) -> bool:
    """Case-insensitive prefix match of a content type against a list of prefixes."""
    lowered = mime_type.strip().lower()
    return any(lowered.startswith(p.lower()) for p in prefixes if p)


@dataclass(frozen=True)
class CategoryRule:
    """Resolved rule for one category."""

    category: FileCategory
    bucket: str
    accepted_mime_prefixes: tuple[str, ...]


@dataclass(frozen=True)
class FilePolicy:
    """Upload policy threaded into the classifier and orchestrators at construction."""

    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE
    allowed_mime_types: tuple[str, ...] = DEFAULT_ALLOWED_MIME_TYPES
    buckets: Mapping[FileCategory, str] = field(
        default_factory=lambda: dict(DEFAULT_BUCKETS)
    )

    def __post_init__(self) -> None:
        # Copy then wrap read-only; the caller's dict stays decoupled.
        object.__setattr__(self, "buckets", MappingProxyType(dict(self.buckets)))
        object.__setattr__(self, "allowed_mime_types", tuple(self.allowed_mime_types))

    def is_mime_allowed(self, mime_type: str) -> bool:
        return matches_prefix(mime_type, self.allowed_mime_types)


class BucketClassifier:
    """Maps a category string to its bucket and MIME family.

    Built once per process from a FilePolicy and shared by the upload,
    download and delete services.
    """

    def __init__(self, buckets: Mapping[FileCategory, str] | None = None) -> None:
        resolved = dict(DEFAULT_BUCKETS)
        if buckets:
            resolved.update(buckets)
        self._rules: dict[str, CategoryRule] = {
            category.value: CategoryRule(
                category=category,
                bucket=resolved[category],
                accepted_mime_prefixes=_ACCEPTED_MIME_PREFIXES[category],
            )
            for category in FileCategory
        }

    @classmethod
    def from_policy(cls, policy: FilePolicy) -> "BucketClassifier":
        return cls(policy.buckets)

    def classify(self, category: str | FileCategory) -> CategoryRule:
        """Return the rule for a category.

        Args:
            category: Category value (e.g. 'portfolio-image').

        Returns:
            CategoryRule with the bucket and accepted MIME prefixes.

        Raises:
            InvalidCategoryException: Category is not one of FileCategory.
        """
        value = category.value if isinstance(category, FileCategory) else category
        rule = self._rules.get(value)
        if rule is None:
            raise InvalidCategoryException(str(value), FileCategory.values())
        return rule

    def validate_mime(self, category: str | FileCategory, mime_type: str) -> CategoryRule:
        """Classify and check the content type belongs to the category's MIME family.

        Raises:
            InvalidCategoryException: Unknown category.
            CategoryMimeMismatchException: Content type outside the category's family.
        """
        rule = self.classify(category)
        if not matches_prefix(mime_type, rule.accepted_mime_prefixes):
            raise CategoryMimeMismatchException(
                rule.category.value, mime_type, list(rule.accepted_mime_prefixes)
            )
        return rule

    def bucket_for(self, category: str | FileCategory) -> str:
        return self.classify(category).bucket
