from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goldapi.models.base import BaseModel, BigIntPK, SoftDeleteMixin


class RedemptionType(str, Enum):
    BONUS = "BONUS"  # 포인트 상환
    MATURITY = "MATURITY"  # 만기 상환


class RedemptionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RedemptionRequest(BaseModel, SoftDeleteMixin):
    """상환 요청 - PENDING -> APPROVED | REJECTED, 종료 상태는 변경 불가"""

    __tablename__ = "redemption_requests"
    __table_args__ = (
        Index("idx_redemption_user_scheme_status", "user_scheme_id", "status"),
        Index("idx_redemption_type_status", "type", "status"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_scheme_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("user_schemes.id"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=RedemptionStatus.PENDING.value, nullable=False
    )
    approved_by: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("admins.id"), nullable=True
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user_scheme = relationship("UserScheme", lazy="select")

    def __repr__(self):
        return f"<RedemptionRequest(id={self.id}, type={self.type}, status={self.status})>"
