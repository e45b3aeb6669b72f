from typing import List

from pydantic import BaseModel, Field


class SchemeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="상품명")
    duration_months: int = Field(..., gt=0, description="가입 기간 (개월)")
    gold_grams: float = Field(..., gt=0, description="총 금 그램")


class SchemeResponse(BaseModel):
    id: int
    name: str
    duration_months: int
    gold_grams: float

    class Config:
        from_attributes = True


class SchemeListResponse(BaseModel):
    schemes: List[SchemeResponse]
    total_count: int
