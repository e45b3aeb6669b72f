from datetime import date as date_type
from typing import Dict, Optional

from pydantic import BaseModel, Field


class UserStats(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int


class UserSchemeStats(BaseModel):
    total_user_schemes: int
    by_status: Dict[str, int] = Field(..., description="ACTIVE / COMPLETED / WITHDRAWN 건수")
    available_points: int = Field(..., description="ACTIVE 가입의 사용 가능 포인트 합계")
    accrued_gold_grams: float = Field(..., description="ACTIVE 가입의 적립 금 합계")


class TransactionStats(BaseModel):
    total_transactions: int
    total_deposits: float
    total_withdrawals: float
    net_amount: float = Field(..., description="입금 - 출금")
    net_gold_grams: float
    total_points: int = Field(..., description="전체 거래 points 합계")
    by_type: Dict[str, int]


class GoldStats(BaseModel):
    current_price: float = 0.0
    last_updated: Optional[date_type] = None


class RedemptionStats(BaseModel):
    total_requests: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    total_points_redeemed: int = Field(..., description="승인된 BONUS 요청 포인트 합계")


class DashboardStats(BaseModel):
    """관리자 대시보드 / 기간 분석 통계 (삭제되지 않은 행 기준)"""

    period_start: Optional[date_type] = None
    period_end: Optional[date_type] = None
    user_stats: UserStats
    total_schemes: int
    user_scheme_stats: UserSchemeStats
    transaction_stats: TransactionStats
    gold_stats: GoldStats
    redemption_stats: RedemptionStats
