"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, not on infrastructure directly.
"""

from files_api.api.v1.dependencies.auth import (
    Principal,
    get_principal,
    get_principal_optional,
    require_scope,
)
from files_api.api.v1.dependencies.db import get_db
from files_api.api.v1.dependencies.files import (
    get_audit_service,
    get_classifier,
    get_file_delete_service,
    get_file_download_service,
    get_file_policy,
    get_file_record_repo,
    get_file_upload_service,
    get_object_store,
)

__all__ = [
    "Principal",
    "get_audit_service",
    "get_classifier",
    "get_db",
    "get_file_delete_service",
    "get_file_download_service",
    "get_file_policy",
    "get_file_record_repo",
    "get_file_upload_service",
    "get_object_store",
    "get_principal",
    "get_principal_optional",
    "require_scope",
]
