"""
기본 데이터 시드 스크립트
비즈니스 설정 기본값, 관리자 계정, 샘플 상품을 생성
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from decimal import Decimal

from goldapi.core.security import hash_password
from goldapi.database.session import get_db_context
from goldapi.models.scheme import Scheme
from goldapi.models.settings import SettingKey
from goldapi.models.user import Admin
from goldapi.repositories.settings_repository import SettingsRepository

DEFAULT_SETTINGS = [
    (SettingKey.MINIMUM_REDEMPTION_POINTS, "100", "Minimum points per bonus redemption", True),
    (SettingKey.REDEMPTION_WINDOW, "5", "Redemption allowed on days 1..N of each month", True),
    (SettingKey.DEFAULT_BONUS_POINTS, "5", "Bonus points per gram when price does not rise", True),
    (SettingKey.BONUS_MOD_VALUE, "10", "Price step (INR) per bonus point when price rises", True),
    (SettingKey.CONVENIENCE_FEE, "10", "Points charged per approved bonus redemption", True),
    (SettingKey.JOIN_BONUS_POINT, "0", "Points awarded on enrollment", False),
    (SettingKey.POINT_CONVERSION_RATE, "1000", "Points per conversion unit", True),
    (SettingKey.POINT_CONVERSION_VALUE, "0.1", "Gold grams per conversion unit", True),
]

DEFAULT_SCHEMES = [
    ("Gold 11", 11, Decimal("10")),
    ("Gold 22", 22, Decimal("20")),
]


def seed_settings(db) -> None:
    repo = SettingsRepository(db)
    for key, value, description, is_system in DEFAULT_SETTINGS:
        if repo.get_value(key) is None:
            repo.upsert(key, value, description=description, is_system=is_system, commit=False)
            print(f"  setting {key} = {value}")


def seed_admin(db) -> None:
    email = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com").lower()
    password = os.getenv("SEED_ADMIN_PASSWORD")
    if not password:
        print("  SEED_ADMIN_PASSWORD not set, skipping admin account")
        return
    if db.query(Admin).filter(Admin.email == email).first():
        print(f"  admin {email} already exists")
        return
    db.add(Admin(name="Administrator", email=email, password_hash=hash_password(password)))
    print(f"  admin {email} created")


def seed_schemes(db) -> None:
    for name, months, grams in DEFAULT_SCHEMES:
        if db.query(Scheme).filter(Scheme.name == name).first():
            continue
        db.add(Scheme(name=name, duration_months=months, gold_grams=grams))
        print(f"  scheme {name} ({months} months, {grams} g)")


def seed_all():
    try:
        with get_db_context() as db:
            seed_settings(db)
            seed_admin(db)
            seed_schemes(db)
        print("Seed data created")
    except Exception as e:
        print(f"Seed data creation failed: {str(e)}")
        raise


if __name__ == "__main__":
    seed_all()
