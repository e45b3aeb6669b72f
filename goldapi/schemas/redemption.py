from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from goldapi.models.redemption import RedemptionStatus, RedemptionType


class RedemptionEligibility(BaseModel):
    """상환 가능 여부 - 불가 시 reason 에 사유 (예외 아님)"""

    is_eligible: bool
    reason: Optional[str] = None
    available_points: int
    minimum_points: int
    points_needed: Optional[int] = None


class RedemptionCreateRequest(BaseModel):
    user_scheme_id: int = Field(..., description="상환 대상 가입 ID")
    points: int = Field(..., gt=0, description="상환할 포인트")


class RedemptionDecisionRequest(BaseModel):
    """관리자 승인/반려 요청"""

    status: Literal["APPROVED", "REJECTED"]
    remarks: Optional[str] = Field(None, max_length=1000)


class RedemptionRequestResponse(BaseModel):
    id: int
    user_scheme_id: int
    type: RedemptionType
    points: Optional[int] = None
    status: RedemptionStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RedemptionListResponse(BaseModel):
    requests: List[RedemptionRequestResponse]
    total_count: int
    has_next: bool
    limit: int
    offset: int
