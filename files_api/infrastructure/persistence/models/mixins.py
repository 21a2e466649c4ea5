"""SQLAlchemy mixins shared by the append-only tables.

Provides: BigIdentityMixin (BIGINT identity primary key) and CreatedAtMixin.
Rows in this service are inserted and deleted, never updated, so there is
no updated_at column.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Identity
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func


class BigIdentityMixin:
    """Mixin for a store-assigned, monotonically increasing BIGINT id."""

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(BigInteger, Identity(always=False), primary_key=True)


class CreatedAtMixin:
    """Mixin for created_at (server default, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
