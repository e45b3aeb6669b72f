import asyncio
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from goldapi.config import Settings
from goldapi.core.exceptions import ConfigurationError, NotFoundError
from goldapi.models import RedemptionRequest, Transaction
from goldapi.models.settings import SettingKey
from goldapi.services.accrual_service import AccrualService, convert_points_to_gold
from goldapi.services.maturity_service import MaturityService, maturity_remarks
from goldapi.services.points_recalculation_service import PointsRecalculationService
from goldapi.services.scheduler_service import (
    GOLD_ACCRUAL_JOB,
    MATURITY_REDEMPTION_JOB,
    POINTS_RECALCULATION_JOB,
    GoldJobScheduler,
    accrual_cron,
    accrual_day,
)

TODAY = date(2024, 12, 1)


class TestMaturityJob:
    """만기 상환 요청 자동 생성"""

    def test_running_twice_creates_one_request(self, db_session, factory):
        """Given 만기 도래 가입, When 작업 2회 실행, Then MATURITY 요청은 1건"""
        # Given
        user_scheme = factory.user_scheme(
            scheme=factory.scheme(gold_grams="10"),
            end_date=date(2024, 11, 30),
            accrued_gold="1.5",
        )
        service = MaturityService(db_session)

        # When
        first = service.process_matured_schemes(today=TODAY)
        second = service.process_matured_schemes(today=TODAY)

        # Then
        assert (first.processed, first.created, first.skipped) == (1, 1, 0)
        assert (second.processed, second.created, second.skipped) == (1, 0, 1)

        requests = db_session.query(RedemptionRequest).all()
        assert len(requests) == 1
        assert requests[0].user_scheme_id == user_scheme.id
        assert requests[0].type == "MATURITY"
        assert requests[0].status == "PENDING"
        assert requests[0].points is None
        assert requests[0].remarks == (
            "Automatic maturity redemption for 11.50 grams of gold "
            "(10.00 scheme grams + 1.50 accrued gold)"
        )
        assert first.details[0].total_gold == 11.5

    def test_skips_schemes_not_yet_matured_or_inactive(self, db_session, factory):
        factory.user_scheme(end_date=date(2024, 12, 2))
        factory.user_scheme(end_date=date(2024, 11, 1), status="WITHDRAWN")

        result = MaturityService(db_session).process_matured_schemes(today=TODAY)

        assert result.processed == 0
        assert db_session.query(RedemptionRequest).count() == 0

    def test_end_date_today_is_matured(self, db_session, factory):
        factory.user_scheme(end_date=TODAY)

        result = MaturityService(db_session).process_matured_schemes(today=TODAY)

        assert result.created == 1

    def test_failed_lookup_does_not_abort_batch(self, db_session, factory):
        """Given 2건 중 1건 조회 실패, Then 실패 1건 보고, 나머지는 요청 생성"""
        broken = factory.user_scheme(end_date=date(2024, 11, 30))
        healthy = factory.user_scheme(end_date=date(2024, 11, 30))
        service = MaturityService(db_session)
        maturity_exists = service.redemption_repo.maturity_exists

        def fail_for_broken(user_scheme_id):
            if user_scheme_id == broken.id:
                raise RuntimeError("lookup failed")
            return maturity_exists(user_scheme_id)

        with patch.object(
            service.redemption_repo, "maturity_exists", side_effect=fail_for_broken
        ):
            result = service.process_matured_schemes(today=TODAY)

        assert (result.processed, result.created, result.failed) == (2, 1, 1)
        assert result.details[0].status == "failed"
        assert result.details[0].error == "lookup failed"
        requests = db_session.query(RedemptionRequest).all()
        assert [r.user_scheme_id for r in requests] == [healthy.id]

    def test_failed_insert_is_rolled_back_to_savepoint(self, db_session, factory):
        broken = factory.user_scheme(end_date=date(2024, 11, 30))
        healthy = factory.user_scheme(end_date=date(2024, 11, 30))
        service = MaturityService(db_session)
        add = service.redemption_repo.add

        def fail_for_broken(commit=True, **fields):
            if fields["user_scheme_id"] == broken.id:
                raise RuntimeError("insert failed")
            return add(commit=commit, **fields)

        with patch.object(service.redemption_repo, "add", side_effect=fail_for_broken):
            result = service.process_matured_schemes(today=TODAY)

        assert (result.created, result.failed) == (1, 1)
        assert db_session.query(RedemptionRequest).one().user_scheme_id == healthy.id

        # 다음 실행에서 실패 건만 생성
        retry = service.process_matured_schemes(today=TODAY)
        assert (retry.created, retry.skipped, retry.failed) == (1, 1, 0)

    def test_remarks_format(self):
        assert maturity_remarks(Decimal("22"), Decimal("0")) == (
            "Automatic maturity redemption for 22.00 grams of gold "
            "(22.00 scheme grams + 0.00 accrued gold)"
        )


class TestAccrualJob:
    """포인트 -> 적립 금 전환"""

    def test_conversion_formula(self):
        assert convert_points_to_gold(2500, Decimal("1000"), Decimal("0.1")) == Decimal("0.2500")
        assert convert_points_to_gold(1, Decimal("3"), Decimal("1")) == Decimal("0.3333")

    def test_converts_available_points(self, db_session, factory):
        # Given
        factory.default_settings()
        user_scheme = factory.user_scheme(
            available_points=2500, total_points=4000, accrued_gold="1"
        )
        factory.transaction(user_scheme, points=2500)

        # When
        result = AccrualService(db_session).convert_points_to_accrued_gold()

        # Then
        assert (result.total, result.processed, result.failed) == (1, 1, 0)
        assert result.details[0].points_converted == 2500
        assert result.details[0].gold_grams == 0.25

        db_session.refresh(user_scheme)
        assert user_scheme.available_points == 0
        assert user_scheme.total_points == 4000
        assert user_scheme.accrued_gold == Decimal("1.25")

        conversion = (
            db_session.query(Transaction)
            .filter(Transaction.transaction_type == "converted_to_accrued_gold")
            .one()
        )
        assert conversion.points == -2500
        assert conversion.gold_grams == Decimal("0.25")

    def test_skips_empty_and_inactive_enrollments(self, db_session, factory):
        factory.default_settings()
        factory.user_scheme(available_points=0)
        factory.user_scheme(available_points=500, status="COMPLETED")

        result = AccrualService(db_session).convert_points_to_accrued_gold()

        assert result.total == 0
        assert db_session.query(Transaction).count() == 0

    def test_failed_conversion_keeps_balance(self, db_session, factory):
        """Given 2건 중 1건 실패, Then 실패 건 잔액 유지, 나머지는 전환"""
        # Given
        factory.default_settings()
        broken = factory.user_scheme(available_points=1000)
        factory.transaction(broken, points=1000)
        healthy = factory.user_scheme(available_points=2000)
        factory.transaction(healthy, points=2000)
        service = AccrualService(db_session)
        post_transaction = service.transaction_service.post_transaction

        def fail_for_broken(**kwargs):
            transaction = post_transaction(**kwargs)
            if kwargs["user_scheme_id"] == broken.id:
                raise RuntimeError("ledger write failed")
            return transaction

        # When
        with patch.object(
            service.transaction_service, "post_transaction", side_effect=fail_for_broken
        ):
            result = service.convert_points_to_accrued_gold()

        # Then
        assert (result.total, result.processed, result.failed) == (2, 1, 1)
        db_session.refresh(broken)
        db_session.refresh(healthy)
        assert broken.available_points == 1000
        assert broken.accrued_gold in (None, Decimal("0"))
        assert healthy.available_points == 0
        assert healthy.accrued_gold == Decimal("0.2")
        conversions = (
            db_session.query(Transaction)
            .filter(Transaction.transaction_type == "converted_to_accrued_gold")
            .all()
        )
        assert [t.user_scheme_id for t in conversions] == [healthy.id]

    def test_requires_conversion_settings(self, db_session, factory):
        factory.default_settings(**{SettingKey.POINT_CONVERSION_RATE: None})
        factory.user_scheme(available_points=500)

        with pytest.raises(ConfigurationError):
            AccrualService(db_session).convert_points_to_accrued_gold()

    def test_rejects_non_positive_rate(self, db_session, factory):
        factory.default_settings(**{SettingKey.POINT_CONVERSION_RATE: "0"})

        with pytest.raises(ConfigurationError):
            AccrualService(db_session).convert_points_to_accrued_gold()


class TestPointsRecalculation:
    """available_points 를 원장 합계로 재계산"""

    def test_recalculation_matches_ledger_and_is_idempotent(self, db_session, factory):
        # Given
        user_scheme = factory.user_scheme(available_points=999, total_points=120)
        factory.transaction(user_scheme, points=30)
        factory.transaction(user_scheme, points=50)
        factory.transaction(user_scheme, points=20, is_deleted=True)
        factory.transaction(user_scheme, transaction_type="deposit", amount="60000", gold_grams="10")
        service = PointsRecalculationService(db_session)

        # When
        first = service.recalculate_all()
        db_session.refresh(user_scheme)
        after_first = user_scheme.available_points
        second = service.recalculate_all()
        db_session.refresh(user_scheme)

        # Then
        assert after_first == 80
        assert user_scheme.available_points == 80
        assert user_scheme.total_points == 120
        assert first.details[0].previous_points == 999
        assert second.details[0].previous_points == 80
        assert second.details[0].new_points == 80

    def test_processes_in_batches(self, db_session, factory):
        for points in (10, 20, 30):
            user_scheme = factory.user_scheme(available_points=0)
            factory.transaction(user_scheme, points=points)

        result = PointsRecalculationService(db_session, batch_size=2).recalculate_all()

        assert (result.processed, result.succeeded, result.failed) == (3, 3, 0)
        assert [item.new_points for item in result.details] == [10, 20, 30]

    def test_failed_enrollment_is_reported_and_skipped(self, db_session, factory):
        broken = factory.user_scheme(available_points=7)
        factory.transaction(broken, points=40)
        healthy = factory.user_scheme(available_points=7)
        factory.transaction(healthy, points=40)
        service = PointsRecalculationService(db_session)
        sum_points = service.transaction_repo.sum_points

        def fail_for_broken(user_scheme_id):
            if user_scheme_id == broken.id:
                raise RuntimeError("sum failed")
            return sum_points(user_scheme_id)

        with patch.object(service.transaction_repo, "sum_points", side_effect=fail_for_broken):
            result = service.recalculate_all()

        assert (result.processed, result.succeeded, result.failed) == (2, 1, 1)
        failed_item = result.details[0]
        assert failed_item.success is False
        assert failed_item.error == "sum failed"
        db_session.refresh(broken)
        db_session.refresh(healthy)
        assert broken.available_points == 7
        assert healthy.available_points == 40

    def test_single_enrollment(self, db_session, factory):
        user_scheme = factory.user_scheme(available_points=5)
        factory.transaction(user_scheme, points=-5)
        factory.transaction(user_scheme, points=40)

        item = PointsRecalculationService(db_session).recalculate_user_scheme(user_scheme.id)

        assert item.previous_points == 5
        assert item.new_points == 35

    def test_unknown_enrollment(self, db_session):
        with pytest.raises(NotFoundError):
            PointsRecalculationService(db_session).recalculate_user_scheme(999)


class TestGoldJobScheduler:
    """정기 작업 등록 정보"""

    def test_accrual_day_follows_redemption_window(self):
        assert accrual_day(5) == 6
        assert accrual_day(27) == 28
        assert accrual_day(28) == 1
        assert accrual_cron(5) == "0 3 6 * *"

    def test_job_definitions_read_redemption_window(self, db_session, factory):
        factory.setting(SettingKey.REDEMPTION_WINDOW, "10")

        @contextmanager
        def session_factory():
            yield db_session

        scheduler = GoldJobScheduler(Settings(), session_factory=session_factory)
        crons = {job_id: cron for job_id, cron, _ in scheduler.job_definitions()}

        assert crons == {
            POINTS_RECALCULATION_JOB: "0 2 * * *",
            MATURITY_REDEMPTION_JOB: "0 23 * * *",
            GOLD_ACCRUAL_JOB: "0 3 11 * *",
        }

    def test_accrual_cron_falls_back_to_default(self):
        @contextmanager
        def broken_session_factory():
            raise RuntimeError("database unavailable")
            yield  # pragma: no cover

        scheduler = GoldJobScheduler(Settings(), session_factory=broken_session_factory)

        assert scheduler._resolve_accrual_cron() == "0 3 6 * *"

    def test_status_before_start(self):
        scheduler = GoldJobScheduler(Settings(), session_factory=Mock())

        status = scheduler.status()

        assert status.running is False
        assert status.timezone == "Asia/Kolkata"
        assert status.jobs == []

    def test_run_job_uses_own_session(self):
        db = Mock()

        @contextmanager
        def session_factory():
            yield db

        scheduler = GoldJobScheduler(Settings(), session_factory=session_factory)
        job = Mock(return_value="done")

        assert scheduler.run_job("custom", job) == "done"
        job.assert_called_once_with(db)

    def test_failed_job_is_logged_not_raised(self):
        @contextmanager
        def session_factory():
            yield Mock()

        scheduler = GoldJobScheduler(Settings(), session_factory=session_factory)
        runner = scheduler._wrap_job("custom", Mock(side_effect=RuntimeError("boom")))

        assert asyncio.run(runner()) is None
