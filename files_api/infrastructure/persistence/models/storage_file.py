"""StorageFile ORM model. One row per stored object (bucket, key)."""

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from files_api.infrastructure.persistence.database import Base
from files_api.infrastructure.persistence.models.mixins import (
    BigIdentityMixin,
    CreatedAtMixin,
)


class StorageFile(BigIdentityMixin, CreatedAtMixin, Base):
    """File metadata. Table: storage_files. Rows are never updated."""

    __tablename__ = "storage_files"

    s3_bucket: Mapped[str] = mapped_column(String(255), nullable=False)
    s3_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    __table_args__ = (
        Index("ux_storage_files_bucket_key", "s3_bucket", "s3_key", unique=True),
    )
