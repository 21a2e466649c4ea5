"""Object store port: async put/get/stat/delete keyed by (bucket, key).

Adapters raise ObjectMissingException subclasses when an object is absent
and StoreUnavailableException subclasses for every other failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from files_api.application.dtos.file import ObjectInfo, StoredObject


class IObjectStore(Protocol):
    """Protocol for object storage backends (S3/MinIO, local filesystem)."""

    async def put(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        """Store the stream at (bucket, key). Returns the number of bytes stored."""

    async def get(self, bucket: str, key: str) -> StoredObject:
        """Open (bucket, key) for forward-only reading."""

    async def stat(self, bucket: str, key: str) -> ObjectInfo:
        """Return size and content type without reading the body."""

    async def delete(self, bucket: str, key: str) -> None:
        """Remove (bucket, key). Missing objects are not an error."""

    async def ensure_bucket(self, bucket: str) -> None:
        """Create the bucket if it does not exist."""
