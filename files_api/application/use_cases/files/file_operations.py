"""File operations: upload, download and delete across the object store and the metadata store.

The object store holds the bytes; the metadata store holds one record per
object. Upload writes the object first and the record second (compensating
with an object delete if the record fails). Delete removes the object first
and the record second. Download resolves the record by (bucket, key), then
streams the object.
"""

from __future__ import annotations

import logging
import os
import re
import uuid
from typing import TYPE_CHECKING, BinaryIO

from files_api.application.dtos.audit import FileDownloadAuditEvent, RequestMeta
from files_api.application.dtos.file import (
    FileDownload,
    FileRecordCreate,
    FileRecordResult,
)
from files_api.domain.categories import BucketClassifier, FilePolicy
from files_api.domain.enums import FileCategory
from files_api.domain.exceptions import (
    FileTooLargeException,
    InvalidIdException,
    InvalidStoredCategoryException,
    MetadataDeleteFailedException,
    MetadataUnavailableException,
    MetadataWriteFailedException,
    MissingCategoryException,
    MissingFileException,
    ObjectMissingException,
    ObjectNotFoundException,
    RecordNotFoundException,
    StorageDeleteFailedException,
    StorageReadFailedException,
    StorageWriteFailedException,
    StoreException,
    UnsupportedMimeTypeException,
    ValidationException,
)
from files_api.shared.utils.background import spawn_background
from files_api.shared.utils.http_headers import content_disposition_attachment

if TYPE_CHECKING:
    from files_api.application.interfaces.repositories import IFileRecordRepository
    from files_api.application.interfaces.services import IAuditService
    from files_api.application.interfaces.storage import IObjectStore

logger = logging.getLogger(__name__)

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,16}$")
_DECIMAL_ID = re.compile(r"^[0-9]+$")
_MAX_ID = 2**63 - 1

DEFAULT_MIME_TYPE = "application/octet-stream"
MAX_MIME_TYPE_LENGTH = 255  # storage_files.mime_type column width


def safe_extension(filename: str | None) -> str:
    """Extension of the client filename, or '' when it is not short alphanumeric.

    Only the final path element is considered, with backslashes treated as
    separators, so nothing from a directory part can reach the key.
    """
    if not filename:
        return ""
    base = os.path.basename(filename.replace("\\", "/"))
    _, ext = os.path.splitext(base)
    return ext if _SAFE_EXTENSION.fullmatch(ext) else ""


def generate_object_key(filename: str | None) -> str:
    """Server-generated key: random UUID plus the sanitized original extension."""
    return f"{uuid.uuid4()}{safe_extension(filename)}"


def parse_record_id(raw_id: str) -> int:
    """Parse a decimal record id that fits a signed 64-bit integer.

    Raises:
        InvalidIdException: Not all ASCII digits, or out of range.
    """
    if not _DECIMAL_ID.fullmatch(raw_id or ""):
        raise InvalidIdException(raw_id)
    value = int(raw_id)
    if value > _MAX_ID:
        raise InvalidIdException(raw_id)
    return value


class FileUploadService:
    """Single responsibility: validate an upload, store the object, then create its record."""

    def __init__(
        self,
        object_store: IObjectStore,
        file_repo: IFileRecordRepository,
        classifier: BucketClassifier,
        policy: FilePolicy,
    ) -> None:
        self.object_store = object_store
        self.file_repo = file_repo
        self.classifier = classifier
        self.policy = policy

    def _validate(
        self,
        stream: BinaryIO | None,
        size: int | None,
        content_type: str | None,
        category: str | None,
    ) -> tuple[str, str]:
        """Run every check that needs no I/O. Returns (category, content_type)."""
        if stream is None:
            raise MissingFileException()
        if category is None or not category.strip():
            raise MissingCategoryException(FileCategory.values())
        claimed = size or 0
        if claimed > self.policy.max_upload_size:
            raise FileTooLargeException(claimed, self.policy.max_upload_size)
        mime_type = (content_type or DEFAULT_MIME_TYPE).strip()
        if len(mime_type) > MAX_MIME_TYPE_LENGTH:
            raise UnsupportedMimeTypeException(mime_type[:MAX_MIME_TYPE_LENGTH])
        if not self.policy.is_mime_allowed(mime_type):
            raise UnsupportedMimeTypeException(mime_type)
        category = category.strip()
        self.classifier.validate_mime(category, mime_type)
        return category, mime_type

    async def upload(
        self,
        stream: BinaryIO | None,
        size: int | None,
        content_type: str | None,
        filename: str | None,
        category: str | None,
    ) -> FileRecordResult:
        """Store the stream and create its record. Returns the created record.

        Raises:
            ValidationException: Missing input, size or MIME policy violation,
                unknown category (raised before any store call).
            StorageWriteFailedException: Object write failed; no record created.
            MetadataWriteFailedException: Record create failed; the object was
                deleted again on a best-effort basis.
        """
        category, mime_type = self._validate(stream, size, content_type, category)
        assert stream is not None
        bucket = self.classifier.bucket_for(category)
        key = generate_object_key(filename)

        try:
            stored_size = await self.object_store.put(
                bucket, key, stream, size or 0, mime_type
            )
        except StoreException as e:
            logger.warning("Object write failed for %s/%s: %s", bucket, key, e)
            raise StorageWriteFailedException() from e

        create_dto = FileRecordCreate(
            bucket=bucket,
            key=key,
            file_name=filename or key,
            file_size=stored_size,
            mime_type=mime_type,
            file_type=category,
        )
        try:
            record = await self.file_repo.create_record(create_dto)
        except Exception as e:
            logger.warning("Record create failed for %s/%s: %s", bucket, key, e)
            await self._compensate(bucket, key)
            raise MetadataWriteFailedException() from e

        logger.info(
            "Uploaded file id=%s bucket=%s key=%s size=%d", record.id, bucket, key, stored_size
        )
        return record

    async def _compensate(self, bucket: str, key: str) -> None:
        try:
            await self.object_store.delete(bucket, key)
        except Exception:
            logger.exception(
                "Orphaned object left after failed record create: bucket=%s key=%s",
                bucket,
                key,
            )


class FileDownloadService:
    """Single responsibility: resolve a record by (category, key) and open its object for streaming."""

    def __init__(
        self,
        object_store: IObjectStore,
        file_repo: IFileRecordRepository,
        classifier: BucketClassifier,
        audit_service: IAuditService | None = None,
    ) -> None:
        self.object_store = object_store
        self.file_repo = file_repo
        self.classifier = classifier
        self.audit_service = audit_service

    async def download(
        self,
        category: str,
        key: str,
        source: str | None = None,
        request_meta: RequestMeta | None = None,
    ) -> FileDownload:
        """Return the object stream plus headers for (category, key).

        Size and content type come from the object store, not the record.

        Raises:
            InvalidCategoryException: Unknown category.
            RecordNotFoundException: No record for (bucket, key).
            ObjectNotFoundException: Record exists but the object is missing.
            MetadataUnavailableException / StorageReadFailedException: Store failures.
        """
        if key.startswith("/"):
            key = key[1:]
        bucket = self.classifier.bucket_for(category)

        try:
            record = await self.file_repo.get_by_key(bucket, key)
        except StoreException as e:
            logger.warning("Record lookup failed for %s/%s: %s", bucket, key, e)
            raise MetadataUnavailableException() from e
        if record is None:
            raise RecordNotFoundException(key)

        try:
            stored = await self.object_store.get(bucket, key)
        except ObjectMissingException as e:
            logger.warning(
                "Record %s points at missing object %s/%s", record.id, bucket, key
            )
            raise ObjectNotFoundException(key) from e
        except StoreException as e:
            logger.warning("Object read failed for %s/%s: %s", bucket, key, e)
            raise StorageReadFailedException() from e

        self._schedule_audit(record, stored.size, stored.content_type, source, request_meta)

        return FileDownload(
            record=record,
            size=stored.size,
            content_type=stored.content_type or DEFAULT_MIME_TYPE,
            content_disposition=content_disposition_attachment(record.file_name),
            chunks=stored.chunks,
        )

    def _schedule_audit(
        self,
        record: FileRecordResult,
        size: int,
        content_type: str,
        source: str | None,
        request_meta: RequestMeta | None,
    ) -> None:
        if self.audit_service is None:
            return
        event = FileDownloadAuditEvent(
            record_id=record.id,
            file_name=record.file_name,
            file_type=record.file_type,
            size=size,
            mime_type=content_type,
            source=source,
            request=request_meta or RequestMeta(),
        )
        try:
            spawn_background(
                self.audit_service.log_file_download(event),
                name=f"audit-download-{record.id}",
            )
        except Exception as e:
            logger.warning("Failed to schedule download audit for %s: %s", record.id, e)


class FileDeleteService:
    """Single responsibility: delete the object, then its record."""

    def __init__(
        self,
        object_store: IObjectStore,
        file_repo: IFileRecordRepository,
        classifier: BucketClassifier,
    ) -> None:
        self.object_store = object_store
        self.file_repo = file_repo
        self.classifier = classifier

    async def delete(self, raw_id: str) -> None:
        """Delete the file with the given id.

        Retrying after a partial failure is safe: object deletes are idempotent.

        Raises:
            InvalidIdException: Id is not a decimal int64.
            RecordNotFoundException: No record with that id.
            InvalidStoredCategoryException: Stored category is unknown.
            StorageDeleteFailedException: Object delete failed; record untouched.
            MetadataDeleteFailedException: Record delete failed after the object was removed.
        """
        record_id = parse_record_id(raw_id)

        try:
            record = await self.file_repo.get_by_id(record_id)
        except StoreException as e:
            logger.warning("Record lookup failed for id=%s: %s", record_id, e)
            raise MetadataUnavailableException() from e
        if record is None:
            raise RecordNotFoundException(str(record_id))

        try:
            bucket = self.classifier.bucket_for(record.file_type)
        except ValidationException as e:
            logger.error(
                "Record %s has unknown stored category %r", record.id, record.file_type
            )
            raise InvalidStoredCategoryException(record.id, record.file_type) from e

        try:
            await self.object_store.delete(bucket, record.key)
        except StoreException as e:
            logger.warning("Object delete failed for %s/%s: %s", bucket, record.key, e)
            raise StorageDeleteFailedException() from e

        try:
            await self.file_repo.delete(record.id)
        except StoreException as e:
            logger.error(
                "Record %s left without object %s/%s: %s", record.id, bucket, record.key, e
            )
            raise MetadataDeleteFailedException() from e

        logger.info("Deleted file id=%s bucket=%s key=%s", record.id, bucket, record.key)
