from datetime import date
from unittest.mock import Mock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from goldapi.containers import Container
from goldapi.core.exceptions import NotFoundError
from goldapi.main import app
from goldapi.schemas.gold_price import (
    BonusCalculationResult,
    GoldPriceResponse,
    GoldPriceSetRequest,
    GoldPriceSetResult,
)

client = TestClient(app)


@pytest.fixture
def gold_price_service():
    container: Container = app.container  # type: ignore
    service = Mock()
    container.services.gold_price_service.override(providers.Object(service))
    yield service
    container.services.gold_price_service.reset_override()


def _price(price_id=1, price_date=date(2024, 3, 2), value=5025.0):
    return GoldPriceResponse(id=price_id, date=price_date, price_per_gram=value)


def test_set_price_as_admin(gold_price_service, admin_headers):
    gold_price_service.set_gold_price.return_value = GoldPriceSetResult(
        price=_price(),
        replaced_price_id=None,
        reversed_transactions=0,
        bonus=BonusCalculationResult(
            bonus_points=30,
            price_difference=25,
            transactions_created=1,
            total_user_schemes=1,
            price_ref_id=1,
        ),
    )

    res = client.post(
        "/api/v1/gold-prices",
        json={"date": "2024-03-02", "price_per_gram": 5025},
        headers=admin_headers,
    )

    assert res.status_code == 200
    assert res.json()["bonus"]["bonus_points"] == 30
    gold_price_service.set_gold_price.assert_called_once_with(date(2024, 3, 2), 5025.0)


def test_set_price_requires_admin(gold_price_service, user_headers):
    res = client.post(
        "/api/v1/gold-prices",
        json={"date": "2024-03-02", "price_per_gram": 5025},
        headers=user_headers,
    )

    assert res.status_code == 403
    gold_price_service.set_gold_price.assert_not_called()


def test_set_price_rejects_non_positive(gold_price_service, admin_headers):
    res = client.post(
        "/api/v1/gold-prices",
        json={"date": "2024-03-02", "price_per_gram": 0},
        headers=admin_headers,
    )

    assert res.status_code == 422


def test_current_price(gold_price_service, user_headers):
    gold_price_service.get_current_price.return_value = _price()

    res = client.get("/api/v1/gold-prices/current", headers=user_headers)

    assert res.status_code == 200
    assert res.json()["price_per_gram"] == 5025.0


def test_price_by_date_not_found(gold_price_service, user_headers):
    gold_price_service.get_price_by_date.side_effect = NotFoundError(
        "Gold price for 2024-01-01 not found"
    )

    res = client.get("/api/v1/gold-prices/2024-01-01", headers=user_headers)

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NOT_FOUND_001"


def test_history_days_bounds(gold_price_service, user_headers):
    res = client.get("/api/v1/gold-prices/history?days=400", headers=user_headers)

    assert res.status_code == 422
    gold_price_service.get_price_history.assert_not_called()


def test_delete_price(gold_price_service, admin_headers):
    gold_price_service.delete_gold_price.return_value = 3

    res = client.delete("/api/v1/gold-prices/1", headers=admin_headers)

    assert res.status_code == 200
    assert res.json()["data"] == {"price_id": 1, "reversed_transactions": 3}


def test_set_request_parses_iso_date():
    request = GoldPriceSetRequest(date="2024-03-02", price_per_gram="5025.50")

    assert request.date == date(2024, 3, 2)
    assert request.price_per_gram == 5025.5
