import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.orm import Session

from goldapi.core.exceptions import (
    BaseAPIException,
    BusinessRuleViolation,
    ConfigurationError,
    NotFoundError,
    ValidationError,
)
from goldapi.repositories.settings_repository import SettingsRepository
from goldapi.schemas.settings import SettingListResponse, SettingResponse

logger = logging.getLogger(__name__)


class SettingsService:
    """비즈니스 설정 조회/관리

    설정은 캐시하지 않습니다. 각 결정 지점에서 다시 읽으므로 관리자가 값을 바꾸면
    다음 요청/작업부터 바로 반영됩니다.
    """

    def __init__(self, db: Session):
        self.db = db
        self.settings_repo = SettingsRepository(db)

    # ------------------------------------------------------------------
    # 값 조회 헬퍼
    # ------------------------------------------------------------------
    def get_value(self, key: str) -> Optional[str]:
        return self.settings_repo.get_value(key)

    def get_required_decimal(self, key: str) -> Decimal:
        """필수 숫자 설정 - 없거나 숫자가 아니면 ConfigurationError"""
        raw = self.settings_repo.get_value(key)
        if raw is None:
            logger.error(f"Required setting '{key}' is missing")
            raise ConfigurationError(
                f"Required setting '{key}' is not configured", details={"key": key}
            )
        try:
            return Decimal(str(raw).strip())
        except InvalidOperation:
            logger.error(f"Setting '{key}' has non-numeric value: {raw!r}")
            raise ConfigurationError(
                f"Setting '{key}' must be numeric", details={"key": key, "value": raw}
            )

    def get_required_int(self, key: str) -> int:
        return int(self.get_required_decimal(key))

    def get_int(self, key: str, default: int) -> int:
        """선택 정수 설정 - 없으면 기본값"""
        raw = self.settings_repo.get_value(key)
        if raw is None:
            logger.warning(f"Setting '{key}' not found, using default value of {default}")
            return default
        try:
            return int(Decimal(str(raw).strip()))
        except InvalidOperation:
            logger.warning(f"Setting '{key}' is not numeric ({raw!r}), using default {default}")
            return default

    # ------------------------------------------------------------------
    # 관리자 API
    # ------------------------------------------------------------------
    def get_setting(self, key: str) -> SettingResponse:
        setting = self.settings_repo.get_setting(key)
        if setting is None:
            raise NotFoundError(f"Setting '{key}' not found")
        return setting

    def get_settings(self) -> SettingListResponse:
        settings = self.settings_repo.list_settings()
        return SettingListResponse(settings=settings, total_count=len(settings))

    def set_setting(
        self,
        key: str,
        value: str,
        description: Optional[str] = None,
        is_system: bool = False,
    ) -> SettingResponse:
        """설정 생성 또는 갱신 (upsert)"""
        if not key or not key.strip():
            raise ValidationError("Setting key is required", details={"key": "required"})

        try:
            setting = self.settings_repo.upsert(
                key=key.strip(),
                value=str(value).strip(),
                description=description,
                is_system=is_system,
            )
            logger.info(f"Setting '{key}' updated to {value!r}")
            return setting
        except BaseAPIException:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update setting '{key}': {str(e)}")
            raise ValidationError(f"Failed to update setting: {str(e)}")

    def delete_setting(self, key: str) -> bool:
        """설정 논리 삭제 - 시스템 설정은 삭제 불가"""
        setting = self.settings_repo.get_setting_model(key)
        if setting is None:
            raise NotFoundError(f"Setting '{key}' not found")
        if setting.is_system:
            raise BusinessRuleViolation("Cannot delete system settings")

        self.settings_repo.soft_delete(setting)
        logger.info(f"Setting '{key}' deleted")
        return True
