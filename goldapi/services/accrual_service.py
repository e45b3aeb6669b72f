"""
월간 포인트 -> 적립 금 전환 작업

gold = available_points / point_conversion_rate * point_conversion_value
전환 후 available_points 는 0, total_points 는 그대로 둡니다.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from goldapi.core.exceptions import BaseAPIException, ConfigurationError, PersistenceError
from goldapi.models.settings import SettingKey
from goldapi.models.transaction import TransactionType
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.batch import AccrualItemResult, AccrualRunResult
from goldapi.services.settings_service import SettingsService
from goldapi.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

GOLD_PRECISION = Decimal("0.0001")


def convert_points_to_gold(points: int, rate: Decimal, value: Decimal) -> Decimal:
    return (Decimal(points) / rate * value).quantize(GOLD_PRECISION, rounding=ROUND_HALF_UP)


class AccrualService:
    def __init__(self, db: Session):
        self.db = db
        self.settings_service = SettingsService(db)
        self.transaction_service = TransactionService(db)
        self.user_scheme_repo = UserSchemeRepository(db)

    def _load_conversion(self):
        rate = self.settings_service.get_required_decimal(SettingKey.POINT_CONVERSION_RATE)
        value = self.settings_service.get_required_decimal(SettingKey.POINT_CONVERSION_VALUE)
        if rate <= 0:
            raise ConfigurationError(
                f"Setting '{SettingKey.POINT_CONVERSION_RATE}' must be positive",
                details={"key": SettingKey.POINT_CONVERSION_RATE, "value": str(rate)},
            )
        return rate, value

    def convert_points_to_accrued_gold(self) -> AccrualRunResult:
        rate, value = self._load_conversion()
        result = AccrualRunResult(total=0, processed=0, failed=0)

        try:
            candidates = [
                us for us in self.user_scheme_repo.find_active() if (us.available_points or 0) > 0
            ]
            result.total = len(candidates)

            for user_scheme in candidates:
                points = user_scheme.available_points
                try:
                    with self.db.begin_nested():
                        gold = convert_points_to_gold(points, rate, value)
                        self.transaction_service.post_transaction(
                            user_scheme_id=user_scheme.id,
                            transaction_type=TransactionType.CONVERTED_TO_ACCRUED_GOLD.value,
                            gold_grams=gold,
                            points=-points,
                            description=f"Converted {points} points to {gold} grams of accrued gold",
                        )
                        user_scheme.accrued_gold = Decimal(str(user_scheme.accrued_gold or 0)) + gold
                        user_scheme.available_points = 0
                        self.db.flush()
                    result.processed += 1
                    result.details.append(
                        AccrualItemResult(
                            user_scheme_id=user_scheme.id,
                            success=True,
                            points_converted=points,
                            gold_grams=float(gold),
                        )
                    )
                except Exception as e:
                    result.failed += 1
                    result.details.append(
                        AccrualItemResult(
                            user_scheme_id=user_scheme.id, success=False, error=str(e)
                        )
                    )
                    logger.error(
                        f"Failed to convert points for user scheme {user_scheme.id}: {str(e)}"
                    )

            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Gold accrual job failed: {str(e)}")
            raise PersistenceError(f"Failed to convert points to accrued gold: {str(e)}")

        logger.info(
            f"Gold accrual finished: total={result.total}, processed={result.processed}, failed={result.failed}"
        )
        return result
