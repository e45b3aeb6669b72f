"""
사용자 상품 가입(UserScheme) 모델

available_points / total_points 는 거래 원장(transactions)에서 파생된 캐시 값입니다.
- available_points: 삭제되지 않은 거래의 points 합계와 같아야 함 (야간 재계산 작업으로 보정)
- total_points: 누적 적립 포인트 (적립 전환/재계산 작업은 건드리지 않음)
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, Boolean, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goldapi.models.base import BaseModel, BigIntPK, SoftDeleteMixin


class UserSchemeStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"  # 만기 상환 승인
    WITHDRAWN = "WITHDRAWN"  # 중도 해지


class UserScheme(BaseModel, SoftDeleteMixin):
    __tablename__ = "user_schemes"
    __table_args__ = (
        Index("idx_user_schemes_user_scheme_status", "user_id", "scheme_id", "status"),
        Index("idx_user_schemes_status_end_date", "status", "end_date"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    scheme_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("schemes.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=UserSchemeStatus.ACTIVE.value, nullable=False
    )
    accrued_gold: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 4), nullable=True
    )
    certificate_delivered: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    scheme = relationship("Scheme", lazy="joined")
    user = relationship("User", lazy="select")

    def __repr__(self):
        return (
            f"<UserScheme(id={self.id}, user_id={self.user_id}, scheme_id={self.scheme_id}, "
            f"status={self.status}, available={self.available_points})>"
        )
