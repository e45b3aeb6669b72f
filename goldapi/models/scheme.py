from decimal import Decimal

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from goldapi.models.base import BaseModel, BigIntPK


class Scheme(BaseModel):
    """금 적립 상품 정의 (기간, 총 금 그램) - 가입 시 참조하는 불변 데이터"""

    __tablename__ = "schemes"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    gold_grams: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)

    def __repr__(self):
        return f"<Scheme(id={self.id}, name={self.name}, months={self.duration_months}, grams={self.gold_grams})>"
