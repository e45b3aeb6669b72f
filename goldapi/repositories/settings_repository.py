from typing import List, Optional

from sqlalchemy.orm import Session

from goldapi.models.settings import Setting as SettingModel
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.settings import SettingResponse


class SettingsRepository(BaseRepository[SettingModel, SettingResponse]):
    """설정 키/값 리포지토리 - 캐시 없이 매 호출마다 조회"""

    def __init__(self, db: Session):
        super().__init__(SettingModel, SettingResponse, db)

    def get_setting_model(
        self, key: str, include_deleted: bool = False
    ) -> Optional[SettingModel]:
        return self._query(include_deleted).filter(SettingModel.key == key).first()

    def get_value(self, key: str) -> Optional[str]:
        """삭제되지 않은 설정 값 (없으면 None)"""
        setting = self.get_setting_model(key)
        return setting.value if setting else None

    def get_setting(self, key: str) -> Optional[SettingResponse]:
        return self._to_schema(self.get_setting_model(key))

    def list_settings(self) -> List[SettingResponse]:
        return self._to_schemas(self._query().order_by(SettingModel.key).all())

    def upsert(
        self,
        key: str,
        value: str,
        description: Optional[str] = None,
        is_system: bool = False,
        commit: bool = True,
    ) -> SettingResponse:
        """키가 있으면 값 갱신 (논리 삭제된 키는 복구), 없으면 생성"""
        setting = self.get_setting_model(key, include_deleted=True)
        if setting is None:
            setting = SettingModel(
                key=key, value=value, description=description, is_system=is_system
            )
            self.db.add(setting)
        else:
            setting.value = value
            setting.is_deleted = False
            setting.is_system = is_system
            if description is not None:
                setting.description = description

        self.db.flush()
        self.db.refresh(setting)
        if commit:
            self.db.commit()
        return self._to_schema(setting)

    def soft_delete(self, setting: SettingModel, commit: bool = True) -> None:
        setting.is_deleted = True
        self._finish(commit)
