"""Local filesystem object store with path validation and atomic writes."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any, BinaryIO, cast

import aiofiles
import aiofiles.os

from files_api.application.dtos.file import ObjectInfo, StoredObject
from files_api.infrastructure.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUploadError,
)
from files_api.shared.utils.datetime import utc_now

_META_SUFFIX = ".meta.json"


class LocalObjectStore:
    """Objects stored as files under <storage_root>/<bucket>/<key>.

    Paths are validated against the bucket directory. Writes use temp file +
    rename. Content type is kept in a .meta.json sidecar.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(self, storage_root: str) -> None:
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, bucket: str, key: str) -> Path:
        """Resolve and validate path under the bucket directory. Raises StoragePermissionError if traversal."""
        bucket_root = (self.storage_root / bucket).resolve()
        if not bucket or bucket_root.parent != self.storage_root:
            raise StoragePermissionError(bucket, "path_validation")
        full_path = (bucket_root / key).resolve()
        try:
            full_path.relative_to(bucket_root)
        except ValueError as e:
            raise StoragePermissionError(f"{bucket}/{key}", "path_validation") from e
        if full_path == bucket_root or full_path.name.endswith(_META_SUFFIX):
            raise StoragePermissionError(f"{bucket}/{key}", "path_validation")
        return full_path

    @staticmethod
    def _meta_path(file_path: Path) -> Path:
        return file_path.with_name(file_path.name + _META_SUFFIX)

    async def _write_metadata(self, file_path: Path, metadata: dict[str, Any]) -> None:
        meta_path = self._meta_path(file_path)
        async with aiofiles.open(meta_path, "w") as f:
            await f.write(json.dumps(metadata, indent=2))
        os.chmod(meta_path, 0o640)

    async def _read_metadata(self, file_path: Path) -> dict[str, Any]:
        """Read JSON sidecar or empty dict."""
        meta_path = self._meta_path(file_path)
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, "r") as f:
            content = await f.read()
        result = json.loads(content)
        return cast(dict[str, Any], result) if isinstance(result, dict) else {}

    async def put(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        """Write the stream atomically. Returns the number of bytes written."""
        target_path = self._get_full_path(bucket, key)
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=target_path.parent,
                prefix=".tmp_",
                suffix=target_path.suffix,
            )
            os.close(temp_fd)
            written = 0
            try:
                async with aiofiles.open(temp_path, "wb") as f:
                    while chunk := stream.read(self.CHUNK_SIZE):
                        await f.write(chunk)
                        written += len(chunk)
                os.chmod(temp_path, 0o640)
                # Sidecar first: the object only appears once both files are complete.
                await self._write_metadata(
                    target_path,
                    {
                        "content_type": content_type,
                        "size": written,
                        "uploaded_at": utc_now().isoformat(),
                    },
                )
                os.replace(temp_path, target_path)
            except OSError:
                self._meta_path(target_path).unlink(missing_ok=True)
                raise
            finally:
                if Path(temp_path).exists():
                    os.unlink(temp_path)
            return written
        except OSError as e:
            raise StorageUploadError(bucket, key, str(e)) from e

    async def get(self, bucket: str, key: str) -> StoredObject:
        info = await self.stat(bucket, key)
        return StoredObject(
            size=info.size,
            content_type=info.content_type,
            chunks=self._iter_file(bucket, key, self._get_full_path(bucket, key)),
        )

    async def _iter_file(self, bucket: str, key: str, file_path: Path) -> AsyncGenerator[bytes, None]:
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while chunk := await f.read(self.CHUNK_SIZE):
                    yield chunk
        except FileNotFoundError as e:
            raise StorageNotFoundError(bucket, key) from e
        except OSError as e:
            raise StorageDownloadError(bucket, key, str(e)) from e

    async def stat(self, bucket: str, key: str) -> ObjectInfo:
        file_path = self._get_full_path(bucket, key)
        if not file_path.is_file():
            raise StorageNotFoundError(bucket, key)
        try:
            size = file_path.stat().st_size
            stored = await self._read_metadata(file_path)
        except FileNotFoundError as e:
            raise StorageNotFoundError(bucket, key) from e
        except (OSError, ValueError) as e:
            raise StorageDownloadError(bucket, key, str(e)) from e
        return ObjectInfo(
            size=size,
            content_type=stored.get("content_type") or "application/octet-stream",
        )

    async def delete(self, bucket: str, key: str) -> None:
        """Delete file and sidecar; a missing file is not an error."""
        file_path = self._get_full_path(bucket, key)
        bucket_root = (self.storage_root / bucket).resolve()
        try:
            for path in (file_path, self._meta_path(file_path)):
                if path.exists():
                    await aiofiles.os.remove(path)
            parent = file_path.parent
            while parent != bucket_root:
                if any(parent.iterdir()):
                    break
                parent.rmdir()
                parent = parent.parent
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageDeleteError(bucket, key, str(e)) from e

    async def ensure_bucket(self, bucket: str) -> None:
        bucket_root = (self.storage_root / bucket).resolve()
        if bucket_root.parent != self.storage_root:
            raise StoragePermissionError(bucket, "path_validation")
        try:
            bucket_root.mkdir(parents=True, exist_ok=True, mode=0o750)
        except OSError as e:
            raise StorageUploadError(bucket, "", str(e)) from e
