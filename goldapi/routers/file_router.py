from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor
from goldapi.schemas.auth import BaseResponse
from goldapi.schemas.file import (
    PresignedDownloadResponse,
    PresignedUploadRequest,
    PresignedUploadResponse,
)
from goldapi.schemas.user import Actor
from goldapi.services.file_service import FileService

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/upload-url", response_model=PresignedUploadResponse)
@inject
def create_upload_url(
    request: PresignedUploadRequest,
    actor: Actor = Depends(get_current_actor),
    service: FileService = Depends(Provide[Container.services.file_service]),
) -> PresignedUploadResponse:
    """S3 직접 업로드용 pre-signed POST (최대 10MB, 5분)"""
    return service.create_upload_url(actor, request)


@router.get("/download-url", response_model=PresignedDownloadResponse)
@inject
def create_download_url(
    key: str = Query(..., min_length=1),
    actor: Actor = Depends(get_current_actor),
    service: FileService = Depends(Provide[Container.services.file_service]),
) -> PresignedDownloadResponse:
    return service.create_download_url(actor, key)


@router.delete("", response_model=BaseResponse)
@inject
def delete_file(
    key: str = Query(..., min_length=1),
    actor: Actor = Depends(get_current_actor),
    service: FileService = Depends(Provide[Container.services.file_service]),
) -> BaseResponse:
    service.delete_file(actor, key)
    return BaseResponse(data={"key": key, "deleted": True})
