from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from goldapi.models.user_scheme import UserSchemeStatus
from goldapi.schemas.scheme import SchemeResponse
from goldapi.schemas.user import User, UserRegistration


class UserSchemeResponse(BaseModel):
    """사용자 상품 가입 정보"""

    id: int
    user_id: int
    scheme_id: int
    start_date: date
    end_date: date
    total_points: int = Field(..., description="누적 적립 포인트")
    available_points: int = Field(..., description="사용 가능 포인트 (원장 기반 캐시)")
    status: UserSchemeStatus
    accrued_gold: Optional[float] = Field(None, description="포인트 전환 적립 금 (g)")
    certificate_delivered: bool = False
    scheme: Optional[SchemeResponse] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EnrollmentRequest(BaseModel):
    scheme_id: int = Field(..., description="가입할 상품 ID")
    start_date: Optional[date] = Field(None, description="시작일 (기본: 오늘, IST)")


class AdminEnrollmentRequest(EnrollmentRequest):
    user_id: int = Field(..., description="가입 대상 사용자 ID")


class NewUserEnrollmentRequest(BaseModel):
    user: UserRegistration
    scheme_id: int
    start_date: Optional[date] = None


class NewUserEnrollmentResponse(BaseModel):
    user: User
    user_scheme: UserSchemeResponse
    welcome_email_sent: bool = Field(..., description="환영 메일 발송 성공 여부")


class CertificateUpdateRequest(BaseModel):
    delivered: bool = True


class UserSchemeListResponse(BaseModel):
    user_schemes: List[UserSchemeResponse]
    total_count: int


class WithdrawRequest(BaseModel):
    """중도 해지 요청"""

    amount: Optional[float] = Field(None, ge=0, description="지급 금액 (기본 0)")
    description: Optional[str] = Field(None, max_length=500)
