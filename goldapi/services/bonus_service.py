"""
금 시세 보너스 포인트 서비스

새 시세가 등록되면 전일 시세와 비교하여 모든 ACTIVE 가입에 points 거래를 1건씩 지급합니다.

- 가격 차이 = floor(신규 시세) - floor(전일 시세) (각각 정수로 버린 뒤 차감)
- 차이 > 0: ceil(차이 / bonusModValue) * 상품 금 그램
- 차이 <= 0: defaultBonusPoints * 상품 금 그램
"""

import logging
import math
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy.orm import Session

from goldapi.core.exceptions import (
    BaseAPIException,
    ConfigurationError,
    PersistenceError,
    ValidationError,
)
from goldapi.models.gold_price import GoldPrice
from goldapi.models.settings import SettingKey
from goldapi.models.transaction import TransactionType
from goldapi.models.user_scheme import UserScheme
from goldapi.repositories.transaction_repository import TransactionRepository
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.gold_price import BonusCalculationResult
from goldapi.services.settings_service import SettingsService
from goldapi.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

INCREASE_DESCRIPTION = "Bonus points awarded for gold price increase"
MAINTENANCE_DESCRIPTION = "Bonus points awarded for gold price maintenance"


def floor_price(price) -> int:
    return int(Decimal(str(price)).to_integral_value(rounding=ROUND_FLOOR))


def calculate_price_difference(new_price, previous_price) -> int:
    """floor(new) - floor(previous) - 소수점은 차감 전에 각각 버림"""
    return floor_price(new_price) - floor_price(previous_price)


def calculate_scheme_points(
    price_difference: int,
    default_bonus_points: int,
    bonus_mod_value: int,
    gold_grams,
) -> int:
    """가입 1건에 지급할 보너스 포인트"""
    grams = Decimal(str(gold_grams))
    if price_difference > 0:
        steps = math.ceil(price_difference / bonus_mod_value)
        points = Decimal(steps) * grams
    else:
        points = Decimal(default_bonus_points) * grams
    return int(points.to_integral_value(rounding=ROUND_HALF_UP))


class BonusService:
    def __init__(self, db: Session):
        self.db = db
        self.settings_service = SettingsService(db)
        self.transaction_service = TransactionService(db)
        self.transaction_repo = TransactionRepository(db)
        self.user_scheme_repo = UserSchemeRepository(db)

    def reverse_price_bonus(self, price_id: int) -> int:
        """시세에 연결된 points 거래를 논리 삭제하고 가입 포인트를 되돌림 (커밋하지 않음)

        Returns:
            int: 무효화된 거래 수
        """
        transactions = self.transaction_repo.find_points_by_price_ref(price_id)
        for transaction in transactions:
            user_scheme = self.user_scheme_repo.get_model(
                transaction.user_scheme_id, include_deleted=True
            )
            if user_scheme is not None:
                self.user_scheme_repo.reverse_points(user_scheme, transaction.points or 0)
        self.transaction_repo.mark_deleted(transactions)

        if transactions:
            logger.info(
                f"Reversed {len(transactions)} bonus transactions referencing gold price {price_id}"
            )
        return len(transactions)

    def _load_bonus_config(self):
        default_bonus_points = self.settings_service.get_required_int(
            SettingKey.DEFAULT_BONUS_POINTS
        )
        bonus_mod_value = self.settings_service.get_required_int(SettingKey.BONUS_MOD_VALUE)
        if bonus_mod_value <= 0:
            raise ConfigurationError(
                f"Setting '{SettingKey.BONUS_MOD_VALUE}' must be positive",
                details={"key": SettingKey.BONUS_MOD_VALUE, "value": bonus_mod_value},
            )
        return default_bonus_points, bonus_mod_value

    def _award(
        self,
        user_scheme: UserScheme,
        points: int,
        new_price: GoldPrice,
        description: str,
    ) -> None:
        self.transaction_service.post_transaction(
            user_scheme_id=user_scheme.id,
            transaction_type=TransactionType.POINTS.value,
            amount=Decimal("0"),
            gold_grams=Decimal("0"),
            points=points,
            price_ref_id=new_price.id,
            description=description,
        )
        self.user_scheme_repo.add_points(user_scheme, points)

    def calculate_and_add_bonus_points(
        self, new_price: GoldPrice, previous_day_price: Optional[GoldPrice]
    ) -> BonusCalculationResult:
        """보너스 포인트 계산 및 지급 (단일 DB 트랜잭션)

        Args:
            new_price: 새로 등록된 시세
            previous_day_price: 전일 시세

        Returns:
            BonusCalculationResult: 지급 합계 및 건수

        Raises:
            ConfigurationError: 보너스 설정 누락 (전체 롤백)
        """
        if previous_day_price is None:
            raise ValidationError("Previous day price is required for bonus calculation")

        try:
            # 같은 날 재실행 대비: 전일 시세 기준 지급분 무효화
            self.reverse_price_bonus(previous_day_price.id)

            default_bonus_points, bonus_mod_value = self._load_bonus_config()
            price_difference = calculate_price_difference(
                new_price.price_per_gram, previous_day_price.price_per_gram
            )
            description = (
                INCREASE_DESCRIPTION if price_difference > 0 else MAINTENANCE_DESCRIPTION
            )

            active_user_schemes = self.user_scheme_repo.find_active()
            total_bonus = 0
            created = 0
            failed = 0

            for user_scheme in active_user_schemes:
                try:
                    with self.db.begin_nested():
                        if user_scheme.scheme is None:
                            raise ValueError(f"Scheme not found for user scheme {user_scheme.id}")
                        points = calculate_scheme_points(
                            price_difference,
                            default_bonus_points,
                            bonus_mod_value,
                            user_scheme.scheme.gold_grams,
                        )
                        self._award(user_scheme, points, new_price, description)
                    total_bonus += points
                    created += 1
                except Exception as e:
                    failed += 1
                    logger.error(
                        f"Failed to create bonus transaction for user scheme {user_scheme.id}: {str(e)}"
                    )

            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Bonus points calculation failed: {str(e)}")
            raise PersistenceError(f"Failed to calculate bonus points: {str(e)}")

        logger.info(
            f"Bonus distribution for gold price {new_price.id}: difference={price_difference}, "
            f"points={total_bonus}, created={created}/{len(active_user_schemes)}, failed={failed}"
        )
        return BonusCalculationResult(
            bonus_points=total_bonus,
            price_difference=price_difference,
            transactions_created=created,
            total_user_schemes=len(active_user_schemes),
            failed=failed,
            price_ref_id=new_price.id,
        )
