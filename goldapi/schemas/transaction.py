from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class TransactionResponse(BaseModel):
    """거래 원장 항목"""

    id: int
    user_scheme_id: int
    transaction_type: str
    amount: float
    gold_grams: float
    points: int
    price_ref_id: Optional[int] = None
    redemption_request_id: Optional[int] = None
    description: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    total_count: int
    has_next: bool
    limit: int
    offset: int


class TransactionSummary(BaseModel):
    """가입 단위 거래 요약 (삭제되지 않은 거래만 집계)"""

    user_scheme_id: int
    total_amount: float = Field(..., description="입금 - 출금 금액")
    total_gold_grams: float = Field(..., description="입금 - 출금 금 그램")
    total_points: int = Field(..., description="points 거래의 포인트 합계")
    transaction_count: int
    count_by_type: Dict[str, int] = Field(default_factory=dict)
