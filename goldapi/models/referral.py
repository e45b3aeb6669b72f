from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goldapi.models.base import BaseModel, BigIntPK


class ReferralStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    ON_HOLD = "ON_HOLD"


class Referral(BaseModel):
    """가입자가 소개한 지인 - 관리자가 연락 결과를 status 로 기록"""

    __tablename__ = "referrals"
    __table_args__ = (Index("idx_referral_user_status", "user_id", "status"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    convenient_datetime: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_addressed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=ReferralStatus.PENDING.value, nullable=False
    )

    user = relationship("User", lazy="select")

    def __repr__(self):
        return f"<Referral(id={self.id}, user_id={self.user_id}, status={self.status})>"
