import logging
import os
import uuid
from typing import Optional

from goldapi.config import Settings
from goldapi.core.exceptions import AuthorizationError, ConfigurationError, ValidationError
from goldapi.schemas.file import (
    PresignedDownloadResponse,
    PresignedUploadRequest,
    PresignedUploadResponse,
)
from goldapi.schemas.user import Actor
from goldapi.services.aws_service import AwsService

logger = logging.getLogger(__name__)


def build_object_key(purpose: str, filename: str, user_id: Optional[int] = None) -> str:
    """users/{user_id}/{purpose}/{uuid}{ext} 또는 uploads/{purpose}/{uuid}{ext}"""
    folder = purpose.lower().replace("_", "-")
    extension = os.path.splitext(filename)[1].lower()
    unique_name = f"{uuid.uuid4()}{extension}"
    if user_id is not None:
        return f"users/{user_id}/{folder}/{unique_name}"
    return f"uploads/{folder}/{unique_name}"


class FileService:
    """S3 pre-signed URL 발급 (업로드/다운로드/삭제)"""

    def __init__(self, settings: Settings, aws_service: AwsService):
        self.settings = settings
        self.aws_service = aws_service

    @property
    def bucket(self) -> str:
        if not self.settings.S3_BUCKET_NAME:
            raise ConfigurationError("S3_BUCKET_NAME is not configured")
        return self.settings.S3_BUCKET_NAME

    def _check_access(self, actor: Actor, key: str) -> None:
        if ".." in key or key.startswith("/"):
            raise ValidationError("Invalid object key", details={"key": key})
        if actor.is_admin:
            return
        if not key.startswith(f"users/{actor.id}/"):
            raise AuthorizationError("Access to this file is not allowed")

    def create_upload_url(
        self, actor: Actor, request: PresignedUploadRequest
    ) -> PresignedUploadResponse:
        # 관리자 업로드는 공용 경로
        user_id = None if actor.is_admin else actor.id
        key = build_object_key(request.purpose, request.filename, user_id)

        presigned = self.aws_service.generate_presigned_post(
            bucket_name=self.bucket,
            object_key=key,
            content_type=request.content_type,
            max_size_bytes=self.settings.S3_UPLOAD_MAX_BYTES,
            expires_in=self.settings.S3_UPLOAD_EXPIRES_SECONDS,
        )
        logger.info(f"Issued upload URL for {key}")
        return PresignedUploadResponse(
            url=presigned["url"],
            fields=presigned["fields"],
            key=key,
            expires_in=self.settings.S3_UPLOAD_EXPIRES_SECONDS,
            max_size_bytes=self.settings.S3_UPLOAD_MAX_BYTES,
        )

    def create_download_url(self, actor: Actor, key: str) -> PresignedDownloadResponse:
        self._check_access(actor, key)
        url = self.aws_service.generate_presigned_get(
            bucket_name=self.bucket,
            object_key=key,
            expires_in=self.settings.S3_DOWNLOAD_EXPIRES_SECONDS,
        )
        return PresignedDownloadResponse(
            url=url,
            key=key,
            expires_in=self.settings.S3_DOWNLOAD_EXPIRES_SECONDS,
            filename=key.rsplit("/", 1)[-1],
        )

    def delete_file(self, actor: Actor, key: str) -> bool:
        self._check_access(actor, key)
        self.aws_service.delete_object(self.bucket, key)
        logger.info(f"Deleted object {key}")
        return True
