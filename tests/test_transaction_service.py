from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest

from goldapi.core.exceptions import NotFoundError, ValidationError
from goldapi.services.transaction_service import CSV_HEADER, TransactionService


@pytest.fixture
def service(db_session):
    return TransactionService(db_session)


class TestPostTransaction:
    def test_post_does_not_touch_cached_points(self, service, factory, db_session):
        user_scheme = factory.user_scheme(available_points=0)

        transaction = service.post_transaction(
            user_scheme_id=user_scheme.id,
            transaction_type="points",
            points=25,
            description="manual",
            commit=True,
        )

        assert transaction.points == 25
        assert transaction.is_deleted is False
        db_session.refresh(user_scheme)
        assert user_scheme.available_points == 0

    def test_rejects_unknown_type(self, service, factory):
        user_scheme = factory.user_scheme()

        with pytest.raises(ValidationError):
            service.post_transaction(user_scheme_id=user_scheme.id, transaction_type="gift")


class TestTransactionQueries:
    def test_summary_ignores_deleted_rows(self, service, factory):
        user_scheme = factory.user_scheme()
        factory.transaction(user_scheme, "deposit", amount="60000", gold_grams="10")
        factory.transaction(user_scheme, "points", points=30)
        factory.transaction(user_scheme, "points", points=99, is_deleted=True)
        factory.transaction(user_scheme, "withdrawal", amount="6000", gold_grams="1")

        summary = service.get_summary(user_scheme.id)

        assert summary.total_amount == 54000.0
        assert summary.total_gold_grams == 9.0
        assert summary.total_points == 30
        assert summary.transaction_count == 3
        assert summary.count_by_type == {"deposit": 1, "points": 1, "withdrawal": 1}

    def test_summary_unknown_enrollment(self, service):
        with pytest.raises(NotFoundError):
            service.get_summary(999)

    def test_list_filters_by_user(self, service, factory):
        mine = factory.user_scheme()
        other = factory.user_scheme()
        factory.transaction(mine, points=10)
        factory.transaction(mine, points=20)
        factory.transaction(other, points=30)

        result = service.list_transactions(user_id=mine.user_id, limit=1)

        assert result.total_count == 2
        assert result.has_next is True
        assert len(result.transactions) == 1
        assert result.transactions[0].user_scheme_id == mine.id

    def test_list_rejects_unknown_type(self, service):
        with pytest.raises(ValidationError):
            service.list_transactions(transaction_type="gift")


class TestCsvExport:
    """거래 내역 CSV"""

    def test_export_contains_rows_and_summaries(self, service, factory):
        # Given
        user = factory.user(name="Asha")
        user_scheme = factory.user_scheme(user=user, scheme=factory.scheme(name="Gold 11"))
        factory.transaction(user_scheme, "deposit", amount="60000", gold_grams="10")
        factory.transaction(user_scheme, "points", points=30)
        factory.transaction(user_scheme, "points", points=50, is_deleted=True)

        # When
        with patch(
            "goldapi.services.transaction_service.get_ist_today",
            return_value=date(2024, 5, 1),
        ):
            filename, content = service.export_transactions_csv()

        # Then
        assert filename == "transactions-2024-05-01.csv"
        lines = content.splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        data_rows = [line for line in lines[1:3]]
        assert all("Asha" in row and "Gold 11" in row for row in data_rows)
        assert "SUMMARY" in lines
        assert "Total Transactions,2" in lines
        assert "Deposits,1" in lines
        assert "Points Transactions,1" in lines
        assert "Total Amount,60000.00" in lines
        assert "Total Gold Grams,10.0000" in lines
        assert "Total Points,30" in lines
        assert "SCHEME-WISE SUMMARY" in lines
        assert "Scheme: Gold 11" in lines

    def test_export_dates_rows_in_ist(self, service, factory, db_session):
        """UTC 20:00 거래는 IST 기준 다음 날짜로 표시"""
        user_scheme = factory.user_scheme()
        transaction = factory.transaction(user_scheme, "points", points=30)
        transaction.created_at = datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc)
        db_session.commit()

        _, content = service.export_transactions_csv()

        row = content.splitlines()[1].split(",")
        assert row[0] == str(transaction.id)
        assert row[1] == "2024-05-02"

    def test_export_period_uses_ist_days(self, service, factory, db_session):
        user_scheme = factory.user_scheme()
        late = factory.transaction(user_scheme, "points", points=30)
        late.created_at = datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc)
        early = factory.transaction(user_scheme, "points", points=10)
        early.created_at = datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)
        db_session.commit()

        _, may_first = service.export_transactions_csv(
            start_date=date(2024, 5, 1), end_date=date(2024, 5, 1)
        )
        _, may_second = service.export_transactions_csv(
            start_date=date(2024, 5, 2), end_date=date(2024, 5, 2)
        )

        assert may_first.splitlines()[1].split(",")[0] == str(early.id)
        assert may_second.splitlines()[1].split(",")[0] == str(late.id)
        assert "Total Transactions,1" in may_second.splitlines()

    def test_export_without_rows_keeps_sections(self, service):
        _, content = service.export_transactions_csv()

        lines = content.splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        assert "Total Transactions,0" in lines
        assert "SCHEME-WISE SUMMARY" in lines

    def test_export_filters_by_type(self, service, factory):
        user_scheme = factory.user_scheme()
        factory.transaction(user_scheme, "deposit", amount="60000", gold_grams="10")
        factory.transaction(user_scheme, "points", points=30)

        _, content = service.export_transactions_csv(transaction_type="points")

        assert "Total Transactions,1" in content.splitlines()

    def test_export_rejects_inverted_range(self, service):
        with pytest.raises(ValidationError):
            service.export_transactions_csv(
                start_date=date(2024, 5, 2), end_date=date(2024, 5, 1)
            )
