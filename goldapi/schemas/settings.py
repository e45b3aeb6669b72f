from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SettingResponse(BaseModel):
    """설정 항목"""

    id: int
    key: str = Field(..., description="설정 키")
    value: str = Field(..., description="설정 값 (문자열 저장)")
    description: Optional[str] = Field(None, description="설명")
    is_system: bool = Field(False, description="시스템 설정 여부 (삭제 불가)")
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SettingUpsertRequest(BaseModel):
    """설정 생성/수정 요청"""

    value: str = Field(..., min_length=1, description="설정 값")
    description: Optional[str] = Field(None, description="설명")
    is_system: bool = Field(False, description="시스템 설정 여부")


class SettingListResponse(BaseModel):
    settings: List[SettingResponse]
    total_count: int
