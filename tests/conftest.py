import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure project root is on path for `goldapi` imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 설정 로딩 전에 로컬 DB/키 지정
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from goldapi.core.security import hash_password
from goldapi.models import (
    Admin,
    Base,
    GoldPrice,
    Scheme,
    Setting,
    Transaction,
    User,
    UserScheme,
)
from goldapi.models.settings import SettingKey
from goldapi.utils.date_utils import add_months

DEFAULT_TEST_SETTINGS = {
    SettingKey.MINIMUM_REDEMPTION_POINTS: "100",
    SettingKey.REDEMPTION_WINDOW: "5",
    SettingKey.DEFAULT_BONUS_POINTS: "5",
    SettingKey.BONUS_MOD_VALUE: "10",
    SettingKey.CONVENIENCE_FEE: "10",
    SettingKey.POINT_CONVERSION_RATE: "1000",
    SettingKey.POINT_CONVERSION_VALUE: "0.1",
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite 는 SAVEPOINT 를 직접 처리하지 못하므로 BEGIN 을 명시적으로 발행
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transaction(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = Session(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


class ModelFactory:
    """테스트 데이터 생성 헬퍼 - 모든 메서드는 커밋 후 ORM 인스턴스 반환"""

    def __init__(self, db: Session):
        self.db = db
        self._sequence = 0

    def _save(self, instance):
        self.db.add(instance)
        self.db.commit()
        return instance

    def _next(self) -> int:
        self._sequence += 1
        return self._sequence

    def setting(self, key: str, value: str, is_system: bool = False) -> Setting:
        return self._save(Setting(key=key, value=value, is_system=is_system))

    def default_settings(self, **overrides) -> None:
        values = dict(DEFAULT_TEST_SETTINGS)
        values.update(overrides)
        for key, value in values.items():
            if value is not None:
                self.db.add(Setting(key=key, value=value))
        self.db.commit()

    def scheme(self, name=None, duration_months=11, gold_grams="10") -> Scheme:
        return self._save(
            Scheme(
                name=name or f"Gold {self._next()}",
                duration_months=duration_months,
                gold_grams=Decimal(gold_grams),
            )
        )

    def user(self, email=None, name="Test User", password="secret123") -> User:
        return self._save(
            User(
                name=name,
                email=email or f"user{self._next()}@example.com",
                mobile="9876543210",
                password_hash=hash_password(password),
            )
        )

    def admin(self, email=None, password="admin123") -> Admin:
        return self._save(
            Admin(
                name="Admin",
                email=email or f"admin{self._next()}@example.com",
                password_hash=hash_password(password),
            )
        )

    def user_scheme(
        self,
        user=None,
        scheme=None,
        start_date=date(2024, 1, 1),
        end_date=None,
        available_points=0,
        total_points=None,
        status="ACTIVE",
        accrued_gold="0",
    ) -> UserScheme:
        user = user or self.user()
        scheme = scheme or self.scheme()
        return self._save(
            UserScheme(
                user_id=user.id,
                scheme_id=scheme.id,
                start_date=start_date,
                end_date=end_date or add_months(start_date, scheme.duration_months),
                available_points=available_points,
                total_points=available_points if total_points is None else total_points,
                status=status,
                accrued_gold=Decimal(accrued_gold),
            )
        )

    def price(self, price_date: date, price_per_gram) -> GoldPrice:
        return self._save(
            GoldPrice(date=price_date, price_per_gram=Decimal(str(price_per_gram)))
        )

    def transaction(
        self,
        user_scheme,
        transaction_type="points",
        points=0,
        amount="0",
        gold_grams="0",
        price_ref_id=None,
        redemption_request_id=None,
        is_deleted=False,
    ) -> Transaction:
        return self._save(
            Transaction(
                user_scheme_id=user_scheme.id,
                transaction_type=transaction_type,
                points=points,
                amount=Decimal(amount),
                gold_grams=Decimal(gold_grams),
                price_ref_id=price_ref_id,
                redemption_request_id=redemption_request_id,
                is_deleted=is_deleted,
            )
        )


@pytest.fixture
def factory(db_session):
    return ModelFactory(db_session)


def auth_headers(actor_id: int, role: str) -> dict:
    from goldapi.core.security import create_access_token

    token = create_access_token({"user_id": actor_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    return auth_headers(1, "user")


@pytest.fixture
def admin_headers():
    return auth_headers(99, "admin")
