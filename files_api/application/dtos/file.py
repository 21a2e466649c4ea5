"""DTOs for file use cases (no dependency on ORM or storage SDKs)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


class ChunkStream(Protocol):
    """Async byte chunks that can be closed before (or without) being iterated.

    Async generators satisfy it.
    """

    def __aiter__(self) -> "ChunkStream": ...

    async def __anext__(self) -> bytes: ...

    async def aclose(self) -> None: ...


@dataclass(frozen=True)
class FileRecordCreate:
    """Input for creating a file record (write-model). Upload service builds this; repo persists and returns FileRecordResult."""

    bucket: str
    key: str
    file_name: str
    file_size: int
    mime_type: str
    file_type: str


@dataclass(frozen=True)
class FileRecordResult:
    """File record read-model (result of create_record, get_by_id, get_by_key)."""

    id: int
    bucket: str
    key: str
    file_name: str
    file_size: int
    mime_type: str
    file_type: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class ObjectInfo:
    """Size and content type reported by the object store for one object."""

    size: int
    content_type: str


@dataclass(frozen=True)
class StoredObject:
    """An object fetched from the object store.

    chunks is one-shot: iterate it once. Exhausting it or calling aclose()
    releases the underlying connection or file handle, even if iteration
    never started.
    """

    size: int
    content_type: str
    chunks: ChunkStream


@dataclass(frozen=True)
class FileDownload:
    """Result of a download: the stored object plus the headers derived from its record."""

    record: FileRecordResult
    size: int
    content_type: str
    content_disposition: str
    chunks: ChunkStream
