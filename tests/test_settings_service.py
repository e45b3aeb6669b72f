from decimal import Decimal

import pytest

from goldapi.core.exceptions import (
    BusinessRuleViolation,
    ConfigurationError,
    NotFoundError,
    ValidationError,
)
from goldapi.services.settings_service import SettingsService


@pytest.fixture
def service(db_session):
    return SettingsService(db_session)


class TestSettingsValues:
    def test_required_decimal(self, service, factory):
        factory.setting("point_conversion_value", " 0.1 ")

        assert service.get_required_decimal("point_conversion_value") == Decimal("0.1")

    def test_missing_required_setting(self, service):
        with pytest.raises(ConfigurationError) as exc_info:
            service.get_required_int("convenience_fee")

        assert exc_info.value.details == {"key": "convenience_fee"}

    def test_non_numeric_required_setting(self, service, factory):
        factory.setting("bonusModValue", "ten")

        with pytest.raises(ConfigurationError):
            service.get_required_int("bonusModValue")

    def test_optional_int_falls_back_to_default(self, service, factory):
        factory.setting("redemptionWindow", "abc")

        assert service.get_int("redemptionWindow", 5) == 5
        assert service.get_int("minimumRedemptionPoints", 100) == 100

    def test_values_are_read_on_every_call(self, service, factory, db_session):
        """설정은 캐시하지 않음 - 변경 즉시 반영"""
        setting = factory.setting("redemptionWindow", "5")
        assert service.get_int("redemptionWindow", 0) == 5

        setting.value = "7"
        db_session.commit()

        assert service.get_int("redemptionWindow", 0) == 7


class TestSettingsAdmin:
    def test_set_setting_creates_and_updates(self, service):
        created = service.set_setting("join_bonus_point", "25", description="join bonus")
        updated = service.set_setting("join_bonus_point", "30")

        assert created.id == updated.id
        assert updated.value == "30"
        assert updated.description == "join bonus"
        assert service.get_settings().total_count == 1

    def test_set_setting_requires_key(self, service):
        with pytest.raises(ValidationError):
            service.set_setting("  ", "1")

    def test_delete_is_soft_and_restorable(self, service, factory):
        factory.setting("join_bonus_point", "25")

        assert service.delete_setting("join_bonus_point") is True
        with pytest.raises(NotFoundError):
            service.get_setting("join_bonus_point")
        assert service.get_value("join_bonus_point") is None

        restored = service.set_setting("join_bonus_point", "40")
        assert restored.value == "40"
        assert service.get_setting("join_bonus_point").value == "40"

    def test_system_setting_cannot_be_deleted(self, service, factory):
        factory.setting("convenience_fee", "10", is_system=True)

        with pytest.raises(BusinessRuleViolation):
            service.delete_setting("convenience_fee")

        assert service.get_value("convenience_fee") == "10"

    def test_delete_unknown_setting(self, service):
        with pytest.raises(NotFoundError):
            service.delete_setting("missing")
