from typing import List, Optional

from pydantic import BaseModel, Field


class MaturityItemResult(BaseModel):
    user_scheme_id: int
    status: str = Field(..., description="created | skipped | failed")
    redemption_request_id: Optional[int] = None
    total_gold: Optional[float] = None
    error: Optional[str] = None


class MaturityRunResult(BaseModel):
    """만기 상환 요청 생성 작업 결과"""

    processed: int
    created: int
    skipped: int
    failed: int
    details: List[MaturityItemResult] = Field(default_factory=list)


class AccrualItemResult(BaseModel):
    user_scheme_id: int
    success: bool
    points_converted: int = 0
    gold_grams: float = 0.0
    error: Optional[str] = None


class AccrualRunResult(BaseModel):
    """포인트 -> 적립 금 전환 작업 결과"""

    total: int
    processed: int
    failed: int
    details: List[AccrualItemResult] = Field(default_factory=list)


class RecalculationItemResult(BaseModel):
    user_scheme_id: int
    previous_points: int
    new_points: int
    success: bool
    error: Optional[str] = None


class RecalculationRunResult(BaseModel):
    """사용 가능 포인트 재계산 작업 결과"""

    processed: int
    succeeded: int
    failed: int
    details: List[RecalculationItemResult] = Field(default_factory=list)


class ScheduledJobInfo(BaseModel):
    job_id: str
    cron: str
    next_run_time: Optional[str] = None


class SchedulerStatusResponse(BaseModel):
    running: bool
    timezone: str
    jobs: List[ScheduledJobInfo] = Field(default_factory=list)
