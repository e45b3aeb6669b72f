from unittest.mock import Mock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from goldapi.containers import Container
from goldapi.core.exceptions import NotFoundError
from goldapi.main import app
from goldapi.schemas.transaction import TransactionListResponse, TransactionSummary

client = TestClient(app)


@pytest.fixture
def services():
    container: Container = app.container  # type: ignore
    transaction_service = Mock()
    user_scheme_service = Mock()
    container.services.transaction_service.override(providers.Object(transaction_service))
    container.services.user_scheme_service.override(providers.Object(user_scheme_service))
    yield transaction_service, user_scheme_service
    container.services.transaction_service.reset_override()
    container.services.user_scheme_service.reset_override()


def _empty_list():
    return TransactionListResponse(
        transactions=[], total_count=0, has_next=False, limit=50, offset=0
    )


def test_user_listing_is_forced_to_own_transactions(services, user_headers):
    transaction_service, _ = services
    transaction_service.list_transactions.return_value = _empty_list()

    res = client.get("/api/v1/transactions?user_id=42", headers=user_headers)

    assert res.status_code == 200
    assert transaction_service.list_transactions.call_args.kwargs["user_id"] == 1


def test_admin_listing_uses_requested_user(services, admin_headers):
    transaction_service, _ = services
    transaction_service.list_transactions.return_value = _empty_list()

    res = client.get("/api/v1/transactions?user_id=42", headers=admin_headers)

    assert res.status_code == 200
    assert transaction_service.list_transactions.call_args.kwargs["user_id"] == 42


def test_summary_checks_ownership(services, user_headers):
    transaction_service, user_scheme_service = services
    user_scheme_service.get_user_scheme.side_effect = NotFoundError("User scheme 3 not found")

    res = client.get("/api/v1/transactions/summary/3", headers=user_headers)

    assert res.status_code == 404
    transaction_service.get_summary.assert_not_called()


def test_summary_for_owner(services, user_headers):
    transaction_service, user_scheme_service = services
    transaction_service.get_summary.return_value = TransactionSummary(
        user_scheme_id=3,
        total_amount=60000.0,
        total_gold_grams=10.0,
        total_points=30,
        transaction_count=2,
    )

    res = client.get("/api/v1/transactions/summary/3", headers=user_headers)

    assert res.status_code == 200
    assert res.json()["total_points"] == 30
    user_scheme_service.get_user_scheme.assert_called_once_with(3, user_id=1)


def test_export_returns_csv_attachment(services, admin_headers):
    transaction_service, _ = services
    transaction_service.export_transactions_csv.return_value = (
        "transactions-2024-05-01.csv",
        "Transaction ID,Date\n",
    )

    res = client.get(
        "/api/v1/transactions/export?start_date=2024-05-01&end_date=2024-05-31",
        headers=admin_headers,
    )

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert (
        res.headers["content-disposition"]
        == 'attachment; filename="transactions-2024-05-01.csv"'
    )
    assert res.text == "Transaction ID,Date\n"


def test_export_requires_admin(services, user_headers):
    res = client.get("/api/v1/transactions/export", headers=user_headers)

    assert res.status_code == 403
