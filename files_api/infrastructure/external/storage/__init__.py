"""Object stores: local filesystem and S3-compatible backends.

Factory creates the backend from files_api.core.config. Implementations are
loaded lazily inside StorageFactory.create_object_store() and satisfy
files_api.application.interfaces.storage.IObjectStore.
"""

from files_api.infrastructure.external.storage.factory import StorageFactory

__all__ = ["StorageFactory"]
