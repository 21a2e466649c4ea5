"""S3-compatible object store (AWS S3, MinIO) keyed by (bucket, key)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, BinaryIO

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from files_api.application.dtos.file import ObjectInfo, StoredObject
from files_api.infrastructure.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
_MISSING_BUCKET_CODES = frozenset({"404", "NoSuchBucket", "NotFound"})


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


class S3BodyStream:
    """Chunks of an S3 response body.

    The body holds a pooled HTTP connection. It is closed when reading ends
    or fails; aclose() closes it even before the first read.
    """

    def __init__(self, bucket: str, key: str, body: Any, chunk_size: int) -> None:
        self.bucket = bucket
        self.key = key
        self._body = body
        self._chunk_size = chunk_size
        self._closed = False

    def __aiter__(self) -> S3BodyStream:
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        try:
            chunk = await asyncio.to_thread(self._body.read, self._chunk_size)
        except (ClientError, BotoCoreError, OSError) as e:
            await self.aclose()
            raise StorageDownloadError(self.bucket, self.key, str(e)) from e
        if not chunk:
            await self.aclose()
            raise StopAsyncIteration
        return chunk

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._body.close()


class S3ObjectStore:
    """Object store on S3 or any S3-compatible endpoint.

    Uses boto3 (sync) via asyncio.to_thread for async API. With no static
    keys configured the default credential chain (env, profile, IAM role)
    is used. A custom endpoint switches to path-style addressing for MinIO.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
        """
        self.region = region
        self.endpoint_url = endpoint_url
        extra: dict[str, Any] = {}
        if endpoint_url:
            extra["endpoint_url"] = endpoint_url
            extra["config"] = Config(s3={"addressing_style": "path"})
        if access_key and secret_key:
            extra["aws_access_key_id"] = access_key
            extra["aws_secret_access_key"] = secret_key
        self._client = boto3.client("s3", region_name=region, **extra)

    async def put(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        """Upload the stream (multipart for large bodies). Returns stored size."""
        def _put() -> int:
            self._client.upload_fileobj(
                stream,
                bucket,
                key,
                ExtraArgs={"ContentType": content_type},
            )
            head = self._client.head_object(Bucket=bucket, Key=key)
            return int(head["ContentLength"])

        try:
            return await asyncio.to_thread(_put)
        except (ClientError, BotoCoreError, Boto3Error, OSError, ValueError) as e:
            raise StorageUploadError(bucket, key, str(e)) from e

    async def get(self, bucket: str, key: str) -> StoredObject:
        """Open the object; chunks are read lazily from the response body."""
        try:
            resp = await asyncio.to_thread(
                self._client.get_object, Bucket=bucket, Key=key
            )
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                raise StorageNotFoundError(bucket, key) from e
            raise StorageDownloadError(bucket, key, str(e)) from e
        except BotoCoreError as e:
            raise StorageDownloadError(bucket, key, str(e)) from e

        return StoredObject(
            size=int(resp.get("ContentLength", 0)),
            content_type=resp.get("ContentType") or "application/octet-stream",
            chunks=S3BodyStream(bucket, key, resp["Body"], self.CHUNK_SIZE),
        )

    async def stat(self, bucket: str, key: str) -> ObjectInfo:
        def _head() -> ObjectInfo:
            head = self._client.head_object(Bucket=bucket, Key=key)
            return ObjectInfo(
                size=int(head["ContentLength"]),
                content_type=head.get("ContentType") or "application/octet-stream",
            )

        try:
            return await asyncio.to_thread(_head)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                raise StorageNotFoundError(bucket, key) from e
            raise StorageDownloadError(bucket, key, str(e)) from e
        except BotoCoreError as e:
            raise StorageDownloadError(bucket, key, str(e)) from e

    async def delete(self, bucket: str, key: str) -> None:
        """Delete the object. S3 delete_object already succeeds for missing keys."""
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                return
            raise StorageDeleteError(bucket, key, str(e)) from e
        except BotoCoreError as e:
            raise StorageDeleteError(bucket, key, str(e)) from e

    async def ensure_bucket(self, bucket: str) -> None:
        def _ensure() -> None:
            try:
                self._client.head_bucket(Bucket=bucket)
                return
            except ClientError as e:
                if _error_code(e) not in _MISSING_BUCKET_CODES:
                    raise
            params: dict[str, Any] = {"Bucket": bucket}
            if self.region and self.region != "us-east-1":
                params["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.region
                }
            self._client.create_bucket(**params)
            logger.info("Created bucket %s", bucket)

        try:
            await asyncio.to_thread(_ensure)
        except (ClientError, BotoCoreError) as e:
            raise StorageUploadError(bucket, "", str(e)) from e
