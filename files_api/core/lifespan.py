"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (object store, classifier,
optional table creation, audit task drain, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from files_api.core.config import get_settings
from files_api.domain.categories import BucketClassifier
from files_api.infrastructure.external.storage import StorageFactory
from files_api.shared.telemetry.logging import setup_logging
from files_api.shared.utils.background import drain_background_tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, object store, classifier, tables (if
    DATABASE_AUTO_CREATE), buckets (if STORAGE_CREATE_BUCKETS).
    Shutdown order: pending audit writes, SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    policy = settings.file_policy()
    app.state.file_policy = policy
    app.state.classifier = BucketClassifier.from_policy(policy)
    app.state.object_store = StorageFactory.create_object_store(settings)
    logger.info("Object store backend: %s", settings.storage_backend)

    from files_api.infrastructure.persistence import database

    if settings.database_auto_create:
        await database.create_tables()

    if settings.storage_create_buckets:
        for bucket in sorted(set(policy.buckets.values())):
            await app.state.object_store.ensure_bucket(bucket)
            logger.info("Bucket ready: %s", bucket)

    yield

    # ---- Shutdown ----
    await drain_background_tasks()

    if getattr(database, "engine", None) is not None:
        await database.dispose_engine()
        logger.info("Database engine disposed")
