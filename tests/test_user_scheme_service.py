from datetime import date
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from goldapi.core.exceptions import BusinessRuleViolation, ConflictError, NotFoundError
from goldapi.core.security import verify_password
from goldapi.models import RedemptionRequest, Transaction, User
from goldapi.schemas.user import UserRegistration
from goldapi.services.user_scheme_service import UserSchemeService
from goldapi.utils.date_utils import add_months


@pytest.fixture
def notification_service():
    notification = Mock()
    notification.send_welcome_email.return_value = True
    return notification


@pytest.fixture
def service(db_session, notification_service):
    return UserSchemeService(db_session, notification_service)


class TestEnroll:
    def test_enroll_posts_initial_deposit(self, service, factory, db_session):
        """Given 현재 시세 6000, When 10g 상품 가입, Then 60000 입금 거래"""
        # Given
        factory.price(date(2024, 1, 1), 6000)
        user = factory.user()
        scheme = factory.scheme(name="Gold 11", duration_months=11, gold_grams="10")

        # When
        result = service.enroll(user.id, scheme.id, start_date=date(2024, 1, 15))

        # Then
        assert result.status == "ACTIVE"
        assert result.end_date == date(2024, 12, 15)
        assert result.available_points == 0

        deposit = db_session.query(Transaction).one()
        assert deposit.transaction_type == "deposit"
        assert deposit.amount == Decimal("60000")
        assert deposit.gold_grams == Decimal("10")
        assert deposit.description == "Initial deposit for Gold 11 scheme"

    def test_enroll_without_price_records_zero_amount(self, service, factory, db_session):
        user = factory.user()
        scheme = factory.scheme()

        service.enroll(user.id, scheme.id, start_date=date(2024, 1, 15))

        assert db_session.query(Transaction).one().amount == Decimal("0")

    def test_join_bonus_is_awarded(self, service, factory, db_session):
        factory.setting("join_bonus_point", "25")
        user = factory.user()
        scheme = factory.scheme()

        result = service.enroll(user.id, scheme.id, start_date=date(2024, 1, 15))

        assert result.available_points == 25
        assert result.total_points == 25
        bonus = (
            db_session.query(Transaction)
            .filter(Transaction.transaction_type == "points")
            .one()
        )
        assert bonus.points == 25

    def test_duplicate_active_enrollment(self, service, factory):
        user = factory.user()
        scheme = factory.scheme()
        service.enroll(user.id, scheme.id)

        with pytest.raises(BusinessRuleViolation):
            service.enroll(user.id, scheme.id)

    def test_unknown_user_or_scheme(self, service, factory):
        scheme = factory.scheme()
        user = factory.user()

        with pytest.raises(NotFoundError):
            service.enroll(999, scheme.id)
        with pytest.raises(NotFoundError):
            service.enroll(user.id, 999)


class TestRegisterUserWithScheme:
    def _registration(self, email="New.User@Example.com"):
        return UserRegistration(
            name=" New User ",
            email=email,
            mobile="9876543210",
            relation="Spouse",
        )

    def test_creates_user_enrollment_and_sends_email(
        self, service, factory, db_session, notification_service
    ):
        scheme = factory.scheme()

        result = service.register_user_with_scheme(
            self._registration(), scheme.id, start_date=date(2024, 1, 1)
        )

        assert result.welcome_email_sent is True
        assert result.user.email == "new.user@example.com"
        assert result.user.name == "New User"
        assert result.user_scheme.scheme_id == scheme.id

        email, name, password = notification_service.send_welcome_email.call_args[0]
        assert email == "new.user@example.com"
        assert name == "New User"
        stored = db_session.query(User).filter(User.email == email).one()
        assert verify_password(password, stored.password_hash)

    def test_email_failure_keeps_registration(
        self, service, factory, db_session, notification_service
    ):
        notification_service.send_welcome_email.return_value = False
        scheme = factory.scheme()

        result = service.register_user_with_scheme(self._registration(), scheme.id)

        assert result.welcome_email_sent is False
        assert db_session.query(User).count() == 1

    def test_duplicate_email(self, service, factory, notification_service):
        factory.user(email="new.user@example.com")
        scheme = factory.scheme()

        with pytest.raises(ConflictError):
            service.register_user_with_scheme(self._registration(), scheme.id)

        notification_service.send_welcome_email.assert_not_called()

    def test_unknown_scheme_rolls_back_user(self, service, db_session):
        with pytest.raises(NotFoundError):
            service.register_user_with_scheme(self._registration(), 999)

        assert db_session.query(User).count() == 0


class TestWithdraw:
    def test_withdraw_marks_scheme_withdrawn(self, service, factory, db_session):
        user_scheme = factory.user_scheme(scheme=factory.scheme(gold_grams="10"))

        with patch(
            "goldapi.services.user_scheme_service.get_ist_today",
            return_value=date(2024, 6, 1),
        ):
            result = service.withdraw(user_scheme.id, amount=1500, description="closing")

        assert result.status == "WITHDRAWN"
        assert result.end_date == date(2024, 6, 1)
        withdrawal = db_session.query(Transaction).one()
        assert withdrawal.transaction_type == "withdrawal"
        assert withdrawal.amount == Decimal("1500")
        assert withdrawal.gold_grams == Decimal("10")
        assert withdrawal.description == "closing"

    def test_only_active_schemes_can_be_withdrawn(self, service, factory):
        user_scheme = factory.user_scheme(status="COMPLETED")

        with pytest.raises(BusinessRuleViolation):
            service.withdraw(user_scheme.id)

    def test_withdraw_blocked_by_pending_request(self, service, factory, db_session):
        """Given PENDING MATURITY 요청, When 해지, Then 규칙 위반이고 ACTIVE 유지"""
        user_scheme = factory.user_scheme()
        db_session.add(
            RedemptionRequest(
                user_scheme_id=user_scheme.id, type="MATURITY", status="PENDING"
            )
        )
        db_session.commit()

        with pytest.raises(BusinessRuleViolation) as exc_info:
            service.withdraw(user_scheme.id)

        assert exc_info.value.details == {"pending_requests": 1}
        db_session.refresh(user_scheme)
        assert user_scheme.status == "ACTIVE"
        assert db_session.query(Transaction).count() == 0

    def test_withdraw_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.withdraw(999)


class TestUserSchemeQueries:
    def test_get_user_scheme_checks_owner(self, service, factory):
        user_scheme = factory.user_scheme()

        assert service.get_user_scheme(user_scheme.id, user_id=user_scheme.user_id).id == user_scheme.id
        with pytest.raises(NotFoundError):
            service.get_user_scheme(user_scheme.id, user_id=user_scheme.user_id + 100)

    def test_mark_certificate_delivered(self, service, factory):
        user_scheme = factory.user_scheme()

        result = service.mark_certificate_delivered(user_scheme.id)

        assert result.certificate_delivered is True

    def test_list_user_schemes(self, service, factory):
        user = factory.user()
        factory.user_scheme(user=user)
        factory.user_scheme(user=user, start_date=date(2024, 2, 1))
        factory.user_scheme()

        result = service.list_user_schemes(user.id)

        assert result.total_count == 2
        assert result.user_schemes[0].start_date == date(2024, 2, 1)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 11) == date(2025, 10, 15)
