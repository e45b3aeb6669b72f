from unittest.mock import Mock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from goldapi.containers import Container
from goldapi.core.exceptions import ConflictError, NotFoundError
from goldapi.main import app
from goldapi.schemas.scheme import SchemeCreate, SchemeResponse
from goldapi.services.scheme_service import SchemeService

client = TestClient(app)


@pytest.fixture
def service(db_session):
    return SchemeService(db_session)


def test_create_scheme_strips_name(service):
    scheme = service.create_scheme(
        SchemeCreate(name="  Gold 11 ", duration_months=11, gold_grams=10)
    )

    assert scheme.id is not None
    assert scheme.name == "Gold 11"
    assert scheme.gold_grams == 10.0


def test_duplicate_scheme_name(service, factory):
    factory.scheme(name="Gold 11")

    with pytest.raises(ConflictError):
        service.create_scheme(
            SchemeCreate(name="Gold 11", duration_months=11, gold_grams=10)
        )


def test_list_schemes_ordered_by_duration(service, factory):
    factory.scheme(name="Gold 22", duration_months=22, gold_grams="20")
    factory.scheme(name="Gold 11", duration_months=11, gold_grams="10")

    result = service.list_schemes()

    assert result.total_count == 2
    assert [s.name for s in result.schemes] == ["Gold 11", "Gold 22"]


def test_get_missing_scheme(service):
    with pytest.raises(NotFoundError):
        service.get_scheme(404)


class TestSchemeRouter:
    @pytest.fixture
    def scheme_service(self):
        container: Container = app.container  # type: ignore
        mock = Mock()
        container.services.scheme_service.override(providers.Object(mock))
        yield mock
        container.services.scheme_service.reset_override()

    def test_create_requires_admin(self, scheme_service, user_headers):
        res = client.post(
            "/api/v1/schemes",
            json={"name": "Gold 11", "duration_months": 11, "gold_grams": 10},
            headers=user_headers,
        )

        assert res.status_code == 403
        scheme_service.create_scheme.assert_not_called()

    def test_admin_creates_scheme(self, scheme_service, admin_headers):
        scheme_service.create_scheme.return_value = SchemeResponse(
            id=1, name="Gold 11", duration_months=11, gold_grams=10
        )

        res = client.post(
            "/api/v1/schemes",
            json={"name": "Gold 11", "duration_months": 11, "gold_grams": 10},
            headers=admin_headers,
        )

        assert res.status_code == 201
        assert res.json()["duration_months"] == 11

    def test_conflict_maps_to_bad_request(self, scheme_service, admin_headers):
        scheme_service.create_scheme.side_effect = ConflictError(
            "Scheme 'Gold 11' already exists"
        )

        res = client.post(
            "/api/v1/schemes",
            json={"name": "Gold 11", "duration_months": 11, "gold_grams": 10},
            headers=admin_headers,
        )

        assert res.status_code == 400
        assert res.json()["success"] is False
