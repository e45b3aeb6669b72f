from typing import Dict, Optional

from pydantic import BaseModel, Field


class PresignedUploadRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., description="업로드 파일 MIME 타입")
    purpose: str = Field("general", pattern="^[a-z0-9_-]+$", description="업로드 용도")


class PresignedUploadResponse(BaseModel):
    url: str
    fields: Dict[str, str]
    key: str
    expires_in: int
    max_size_bytes: int


class PresignedDownloadResponse(BaseModel):
    url: str
    key: str
    expires_in: int
    filename: Optional[str] = None
