"""
거래 원장 모델

모든 포인트/금/금액 변동은 이 테이블에 기록됩니다. 행은 수정되지 않고,
원천(금 시세, 상환 요청)이 무효화되면 is_deleted 로 일괄 논리 삭제됩니다.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goldapi.models.base import BaseModel, BigIntPK, SoftDeleteMixin


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    POINTS = "points"  # 일일 보너스 / 가입 보너스
    BONUS_WITHDRAWAL = "bonus_withdrawal"  # 포인트 상환
    CONVENIENCE_FEE = "convenience_fee"
    CONVERTED_TO_ACCRUED_GOLD = "converted_to_accrued_gold"  # 월간 적립 전환

    @classmethod
    def values(cls):
        return [member.value for member in cls]


class Transaction(BaseModel, SoftDeleteMixin):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_user_scheme", "user_scheme_id", "is_deleted"),
        Index("idx_transactions_price_ref", "price_ref_id", "transaction_type"),
        Index("idx_transactions_redemption", "redemption_request_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_scheme_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("user_schemes.id"), nullable=False
    )
    transaction_type: Mapped[str] = mapped_column(String(40), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(16, 2), default=0, nullable=False)
    gold_grams: Mapped[Decimal] = mapped_column(
        Numeric(12, 4), default=0, nullable=False
    )
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price_ref_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("gold_prices.id"), nullable=True
    )
    redemption_request_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("redemption_requests.id"), nullable=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user_scheme = relationship("UserScheme", lazy="select")

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, user_scheme_id={self.user_scheme_id}, "
            f"type={self.transaction_type}, points={self.points}, deleted={self.is_deleted})>"
        )
