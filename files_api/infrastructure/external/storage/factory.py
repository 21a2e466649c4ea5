"""Object store factory: creates the local or S3 backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from files_api.application.interfaces.storage import IObjectStore
    from files_api.core.config import Settings


class StorageFactory:
    """Factory for object store instances based on configuration."""

    @staticmethod
    def create_object_store(settings: "Settings | None" = None) -> "IObjectStore":
        """Create object store from settings.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            LocalObjectStore or S3ObjectStore.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from files_api.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend.lower()

        if backend == "local":
            from files_api.infrastructure.external.storage.local_storage import (
                LocalObjectStore,
            )

            if not s.storage_root:
                raise ValueError("STORAGE_ROOT required for local backend")
            return LocalObjectStore(storage_root=s.storage_root)
        if backend == "s3":
            from files_api.infrastructure.external.storage.s3_storage import (
                S3ObjectStore,
            )

            return S3ObjectStore(
                region=s.s3_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.s3_access_key,
                secret_key=(
                    s.s3_secret_key.get_secret_value() if s.s3_secret_key else None
                ),
            )
        raise ValueError(
            f"Unknown storage backend: {backend}. Supported: 'local', 's3'"
        )
