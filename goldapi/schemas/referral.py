from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from goldapi.models.referral import ReferralStatus


class ReferralCreate(BaseModel):
    """지인 소개"""

    name: str = Field(..., min_length=1, max_length=150)
    age: int = Field(..., ge=18, le=120)
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=20)
    convenient_datetime: datetime = Field(..., description="연락 희망 일시")
    comments: Optional[str] = Field(None, max_length=2000)


class ReferralStatusUpdate(BaseModel):
    """관리자 처리 결과 - is_addressed 생략 시 PENDING 이 아니면 처리 완료로 간주"""

    status: ReferralStatus
    is_addressed: Optional[bool] = None
    comments: Optional[str] = Field(None, max_length=2000)


class ReferralResponse(BaseModel):
    id: int
    user_id: int
    name: str
    age: int
    email: str
    phone: str
    convenient_datetime: datetime
    comments: Optional[str] = None
    is_addressed: bool
    status: ReferralStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReferralListResponse(BaseModel):
    referrals: List[ReferralResponse]
    total_count: int
    has_next: bool
    limit: int
    offset: int
