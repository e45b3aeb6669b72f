from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SchemeRequestCreate(BaseModel):
    """가입 상담 요청"""

    desired_gold_grams: float = Field(..., gt=0, description="희망 금 그램")
    desired_item: str = Field(..., min_length=1, description="희망 품목 (예: 목걸이)")
    convenient_time: str = Field(..., min_length=1, max_length=100, description="연락 가능 시간")
    comments: Optional[str] = Field(None, max_length=2000)


class SchemeRequestUpdate(BaseModel):
    """관리자 처리 결과"""

    is_addressed: Optional[bool] = None
    comments: Optional[str] = Field(None, max_length=2000)


class SchemeRequestResponse(BaseModel):
    id: int
    user_id: int
    desired_gold_grams: float
    desired_item: str
    convenient_time: str
    is_addressed: bool
    comments: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SchemeRequestListResponse(BaseModel):
    requests: List[SchemeRequestResponse]
    total_count: int
    has_next: bool
    limit: int
    offset: int
