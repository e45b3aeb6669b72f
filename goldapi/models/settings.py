"""
비즈니스 설정 키/값 테이블

포인트 정책(최소 상환 포인트, 상환 기간, 보너스 기본값 등)은 모두 이 테이블에서
결정 시점마다 다시 읽습니다. 관리자만 수정하며, 삭제는 논리 삭제만 허용됩니다.
"""

from typing import Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from goldapi.models.base import BaseModel, BigIntPK, SoftDeleteMixin


class SettingKey:
    """파이프라인에서 사용하는 설정 키"""

    MINIMUM_REDEMPTION_POINTS = "minimumRedemptionPoints"
    REDEMPTION_WINDOW = "redemptionWindow"
    DEFAULT_BONUS_POINTS = "defaultBonusPoints"
    BONUS_MOD_VALUE = "bonusModValue"
    CONVENIENCE_FEE = "convenience_fee"
    JOIN_BONUS_POINT = "join_bonus_point"
    POINT_CONVERSION_RATE = "point_conversion_rate"
    POINT_CONVERSION_VALUE = "point_conversion_value"


class Setting(BaseModel, SoftDeleteMixin):
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Setting(key={self.key}, value={self.value})>"
