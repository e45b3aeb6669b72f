from datetime import date as date_type, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

PriceTrend = Literal["INCREASE", "DECREASE", "NO_CHANGE"]


class GoldPriceResponse(BaseModel):
    """금 시세"""

    id: int
    date: date_type
    price_per_gram: float = Field(..., description="그램당 가격 (INR)")
    is_deleted: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GoldPriceSetRequest(BaseModel):
    """일별 금 시세 등록 요청"""

    date: date_type = Field(..., description="시세 일자")
    price_per_gram: float = Field(..., gt=0, description="그램당 가격")


class BonusCalculationResult(BaseModel):
    """보너스 포인트 지급 결과"""

    bonus_points: int = Field(..., description="지급된 보너스 포인트 합계")
    price_difference: int = Field(..., description="floor(신규) - floor(전일)")
    transactions_created: int = Field(..., description="생성된 points 거래 수")
    total_user_schemes: int = Field(..., description="대상 ACTIVE 가입 수")
    failed: int = Field(0, description="개별 실패 건수")
    price_ref_id: int = Field(..., description="기준 시세 ID")


class GoldPriceSetResult(BaseModel):
    """시세 등록 결과 (2단계 처리 + 보너스 계산)"""

    price: GoldPriceResponse
    replaced_price_id: Optional[int] = Field(None, description="대체되어 삭제된 시세 ID")
    reversed_transactions: int = Field(0, description="무효화된 보너스 거래 수")
    bonus: Optional[BonusCalculationResult] = None
    bonus_error: Optional[str] = None


class GoldPriceListResponse(BaseModel):
    prices: List[GoldPriceResponse]
    total_count: int
    has_next: bool
    limit: int
    offset: int


class PriceHistoryPoint(BaseModel):
    date: date_type
    price_per_gram: float
    trend: PriceTrend
    change: float
    change_percentage: float
    is_interpolated: bool = False


class PriceExtreme(BaseModel):
    price: float
    date: date_type


class PriceHistoryStatistics(BaseModel):
    total_days: int
    current_price: float
    lowest: PriceExtreme
    highest: PriceExtreme
    average_price: float
    median_price: float
    standard_deviation: float
    volatility: float = Field(..., description="연환산 변동성")
    overall_change: float
    overall_change_percentage: float
    increase_days: int
    decrease_days: int
    no_change_days: int
    dominant_trend: PriceTrend
    moving_average_7d: Optional[float] = None
    moving_average_30d: Optional[float] = None
    interpolated_days: int


class GoldPriceHistoryResponse(BaseModel):
    history: List[PriceHistoryPoint]
    statistics: Optional[PriceHistoryStatistics] = None
