"""File service dependencies (composition root).

The object store, classifier and policy are built once in the lifespan and
read from app.state; repositories get a per-request session.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from files_api.application.interfaces.services import IAuditService
from files_api.application.interfaces.storage import IObjectStore
from files_api.application.use_cases.files import (
    FileDeleteService,
    FileDownloadService,
    FileUploadService,
)
from files_api.core.config import get_settings
from files_api.domain.categories import BucketClassifier, FilePolicy
from files_api.infrastructure.external.storage import StorageFactory
from files_api.infrastructure.persistence import database
from files_api.infrastructure.persistence.database import get_db
from files_api.infrastructure.persistence.repositories import FileRecordRepository
from files_api.infrastructure.services import ActionLogService


def get_file_policy(request: Request) -> FilePolicy:
    policy = getattr(request.app.state, "file_policy", None)
    if policy is None:
        policy = get_settings().file_policy()
        request.app.state.file_policy = policy
    return policy


def get_classifier(
    request: Request,
    policy: Annotated[FilePolicy, Depends(get_file_policy)],
) -> BucketClassifier:
    classifier = getattr(request.app.state, "classifier", None)
    if classifier is None:
        classifier = BucketClassifier.from_policy(policy)
        request.app.state.classifier = classifier
    return classifier


def get_object_store(request: Request) -> IObjectStore:
    """Object store from lifespan; built on first use when lifespan did not run."""
    store = getattr(request.app.state, "object_store", None)
    if store is None:
        store = StorageFactory.create_object_store()
        request.app.state.object_store = store
    return store


def get_file_record_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FileRecordRepository:
    """File record repository (commits its own writes)."""
    return FileRecordRepository(db)


def get_audit_service() -> IAuditService | None:
    """Action log writer with its own sessions; None when AUDIT_ENABLED is false."""
    if not get_settings().audit_enabled:
        return None
    return ActionLogService(database.get_session_factory())


async def get_file_upload_service(
    store: Annotated[IObjectStore, Depends(get_object_store)],
    repo: Annotated[FileRecordRepository, Depends(get_file_record_repo)],
    classifier: Annotated[BucketClassifier, Depends(get_classifier)],
    policy: Annotated[FilePolicy, Depends(get_file_policy)],
) -> FileUploadService:
    return FileUploadService(
        object_store=store, file_repo=repo, classifier=classifier, policy=policy
    )


async def get_file_download_service(
    store: Annotated[IObjectStore, Depends(get_object_store)],
    repo: Annotated[FileRecordRepository, Depends(get_file_record_repo)],
    classifier: Annotated[BucketClassifier, Depends(get_classifier)],
    audit: Annotated[IAuditService | None, Depends(get_audit_service)],
) -> FileDownloadService:
    return FileDownloadService(
        object_store=store, file_repo=repo, classifier=classifier, audit_service=audit
    )


async def get_file_delete_service(
    store: Annotated[IObjectStore, Depends(get_object_store)],
    repo: Annotated[FileRecordRepository, Depends(get_file_record_repo)],
    classifier: Annotated[BucketClassifier, Depends(get_classifier)],
) -> FileDeleteService:
    return FileDeleteService(object_store=store, file_repo=repo, classifier=classifier)
