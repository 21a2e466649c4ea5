"""File record repository (metadata store). Returns application DTOs."""

from __future__ import annotations

import logging

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from files_api.application.dtos.file import FileRecordCreate, FileRecordResult
from files_api.infrastructure.exceptions import MetadataStoreError
from files_api.infrastructure.persistence.models.storage_file import StorageFile
from files_api.infrastructure.persistence.repositories.base import BaseRepository
from files_api.shared.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


def _create_to_storage_file(d: FileRecordCreate) -> StorageFile:
    """Map FileRecordCreate (write-model) to ORM StorageFile for persistence."""
    return StorageFile(
        s3_bucket=d.bucket,
        s3_key=d.key,
        file_name=d.file_name,
        file_size=d.file_size,
        mime_type=d.mime_type,
        file_type=d.file_type,
    )


def _storage_file_to_result(f: StorageFile) -> FileRecordResult:
    """Map ORM StorageFile to application FileRecordResult."""
    return FileRecordResult(
        id=f.id,
        bucket=f.s3_bucket,
        key=f.s3_key,
        file_name=f.file_name,
        file_size=f.file_size,
        mime_type=f.mime_type,
        file_type=f.file_type,
        created_at=ensure_utc(f.created_at),
    )


class FileRecordRepository(BaseRepository[StorageFile]):
    """Metadata store for stored objects.

    Each write commits its own transaction so a failure surfaces to the
    calling service (which compensates) rather than at session teardown.
    SQLAlchemy errors are wrapped in MetadataStoreError.
    """

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, StorageFile)

    async def create_record(self, record: FileRecordCreate) -> FileRecordResult:
        try:
            created = await self.create(_create_to_storage_file(record))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise MetadataStoreError("create", str(e)) from e
        return _storage_file_to_result(created)

    async def _end_read(self) -> None:
        """End the read transaction so the pooled connection goes back before a long response."""
        if self.db.in_transaction():
            await self.db.rollback()

    async def get_by_id(self, record_id: int) -> FileRecordResult | None:  # type: ignore[override]
        try:
            row = await super().get_by_id(record_id)
            found = _storage_file_to_result(row) if row else None
            await self._end_read()
        except SQLAlchemyError as e:
            raise MetadataStoreError("get_by_id", str(e)) from e
        return found

    async def get_by_key(self, bucket: str, key: str) -> FileRecordResult | None:
        try:
            result = await self.db.execute(
                select(StorageFile).where(
                    and_(StorageFile.s3_bucket == bucket, StorageFile.s3_key == key)
                )
            )
            row = result.scalar_one_or_none()
            found = _storage_file_to_result(row) if row else None
            await self._end_read()
        except SQLAlchemyError as e:
            raise MetadataStoreError("get_by_key", str(e)) from e
        return found

    async def delete(self, record_id: int) -> bool:
        """Delete by id with a single statement; returns False if no row matched."""
        try:
            result = await self.db.execute(
                delete(StorageFile).where(StorageFile.id == record_id)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise MetadataStoreError("delete", str(e)) from e
        deleted = (result.rowcount or 0) > 0
        if not deleted:
            logger.info("No file record deleted for id=%s", record_id)
        return deleted
