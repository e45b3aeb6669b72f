from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goldapi.models.base import BaseModel, BigIntPK


class SchemeRequest(BaseModel):
    """가입 상담 요청 - 관리자가 연락 후 is_addressed 처리"""

    __tablename__ = "scheme_requests"
    __table_args__ = (
        Index("idx_scheme_request_user", "user_id"),
        Index("idx_scheme_request_addressed", "is_addressed"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    desired_gold_grams: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    desired_item: Mapped[str] = mapped_column(Text, nullable=False)
    convenient_time: Mapped[str] = mapped_column(String(100), nullable=False)
    is_addressed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user = relationship("User", lazy="select")

    def __repr__(self):
        return f"<SchemeRequest(id={self.id}, user_id={self.user_id}, addressed={self.is_addressed})>"
