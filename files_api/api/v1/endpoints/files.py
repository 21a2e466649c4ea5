"""File API: thin routes delegating to FileUploadService, FileDownloadService and FileDeleteService."""

import logging
import os
from typing import Annotated

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    Query,
    Request,
    UploadFile,
)
from fastapi.responses import StreamingResponse

from files_api.api.v1.dependencies import (
    get_file_delete_service,
    get_file_download_service,
    get_file_upload_service,
    require_scope,
)
from files_api.application.dtos.audit import RequestMeta
from files_api.application.use_cases.files import (
    FileDeleteService,
    FileDownloadService,
    FileUploadService,
)
from files_api.core.config import get_settings
from files_api.core.constants import (
    DOWNLOAD_SOURCES,
    SCOPE_FILES_DELETE,
    SCOPE_FILES_WRITE,
)
from files_api.core.limiter import limit_upload, limit_writes
from files_api.schemas.file import ErrorResponse, FileUploadResponse, MessageResponse
from files_api.shared.request_audit import get_audit_request_context

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _upload_size(file: UploadFile) -> int:
    """Size reported by the multipart parser, or measured from the spooled file."""
    if file.size is not None:
        return file.size
    current = file.file.tell()
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(current)
    return size


@router.post(
    "",
    response_model=FileUploadResponse,
    responses=_ERROR_RESPONSES,
)
@limit_upload
async def upload_file(
    request: Request,
    file: UploadFile | None = File(None),
    file_type: str | None = Form(None, alias="fileType"),
    _: Annotated[object, Depends(require_scope(SCOPE_FILES_WRITE))] = None,
    upload_svc: FileUploadService = Depends(get_file_upload_service),
):
    """Upload a file (multipart: file, fileType) to the bucket of its category."""
    created = await upload_svc.upload(
        stream=file.file if file is not None else None,
        size=_upload_size(file) if file is not None else None,
        content_type=file.content_type if file is not None else None,
        filename=file.filename if file is not None else None,
        category=file_type,
    )
    public_path = get_settings().files_public_path.rstrip("/")
    return FileUploadResponse(
        id=created.id,
        file_name=created.file_name,
        file_size=created.file_size,
        mime_type=created.mime_type,
        url=f"{public_path}/{created.file_type}/{created.key}",
        file_type=created.file_type,
    )


@router.get(
    "/{category}/{key:path}",
    response_class=StreamingResponse,
    responses={
        200: {"description": "File content", "content": {"application/octet-stream": {}}},
        **_ERROR_RESPONSES,
    },
)
async def download_file(
    request: Request,
    background_tasks: BackgroundTasks,
    category: str,
    key: str,
    source: str | None = Query(None),
    download_svc: FileDownloadService = Depends(get_file_download_service),
):
    """Stream a stored file as an attachment."""
    if source is not None and source not in DOWNLOAD_SOURCES:
        logger.debug("Ignoring unknown download source %r", source)
        source = None
    request_id, ip_address, user_agent = get_audit_request_context(request)
    download = await download_svc.download(
        category,
        key,
        source=source,
        request_meta=RequestMeta(
            request_id=request_id, ip_address=ip_address, user_agent=user_agent
        ),
    )
    # Closes the object stream even when the body was never read.
    background_tasks.add_task(download.chunks.aclose)
    return StreamingResponse(
        download.chunks,
        media_type=download.content_type,
        headers={
            "Content-Length": str(download.size),
            "Content-Disposition": download.content_disposition,
        },
    )


@router.delete(
    "/{file_id}",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
)
@limit_writes
async def delete_file(
    request: Request,
    file_id: str,
    _: Annotated[object, Depends(require_scope(SCOPE_FILES_DELETE))] = None,
    delete_svc: FileDeleteService = Depends(get_file_delete_service),
):
    """Delete a file: object first, then its record."""
    await delete_svc.delete(file_id)
    return MessageResponse(message="file deleted successfully")
