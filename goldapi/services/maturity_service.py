"""
만기 상환 요청 자동 생성 작업

만기일이 지난 ACTIVE 가입마다 PENDING MATURITY 요청을 1건 생성합니다.
이미 (삭제되지 않은) MATURITY 요청이 있으면 건너뛰므로 여러 번 실행해도 결과는 같습니다.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from goldapi.core.exceptions import PersistenceError
from goldapi.models.redemption import RedemptionStatus, RedemptionType
from goldapi.repositories.redemption_repository import RedemptionRepository
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.batch import MaturityItemResult, MaturityRunResult
from goldapi.utils.timezone_utils import get_ist_today

logger = logging.getLogger(__name__)


def maturity_remarks(scheme_grams: Decimal, accrued_gold: Decimal) -> str:
    total = scheme_grams + accrued_gold
    return (
        f"Automatic maturity redemption for {total:.2f} grams of gold "
        f"({scheme_grams:.2f} scheme grams + {accrued_gold:.2f} accrued gold)"
    )


class MaturityService:
    def __init__(self, db: Session):
        self.db = db
        self.user_scheme_repo = UserSchemeRepository(db)
        self.redemption_repo = RedemptionRepository(db)

    def process_matured_schemes(self, today: Optional[date] = None) -> MaturityRunResult:
        today = today or get_ist_today()
        result = MaturityRunResult(processed=0, created=0, skipped=0, failed=0)

        try:
            matured = self.user_scheme_repo.find_matured(today)
            logger.info(f"Found {len(matured)} matured user schemes as of {today}")

            for user_scheme in matured:
                result.processed += 1
                try:
                    if self.redemption_repo.maturity_exists(user_scheme.id):
                        result.skipped += 1
                        result.details.append(
                            MaturityItemResult(user_scheme_id=user_scheme.id, status="skipped")
                        )
                        continue

                    with self.db.begin_nested():
                        scheme_grams = Decimal(str(user_scheme.scheme.gold_grams))
                        accrued = Decimal(str(user_scheme.accrued_gold or 0))
                        request = self.redemption_repo.add(
                            commit=False,
                            user_scheme_id=user_scheme.id,
                            type=RedemptionType.MATURITY.value,
                            points=None,
                            status=RedemptionStatus.PENDING.value,
                            remarks=maturity_remarks(scheme_grams, accrued),
                        )
                    result.created += 1
                    result.details.append(
                        MaturityItemResult(
                            user_scheme_id=user_scheme.id,
                            status="created",
                            redemption_request_id=request.id,
                            total_gold=float(scheme_grams + accrued),
                        )
                    )
                except Exception as e:
                    result.failed += 1
                    result.details.append(
                        MaturityItemResult(
                            user_scheme_id=user_scheme.id, status="failed", error=str(e)
                        )
                    )
                    logger.error(
                        f"Failed to create maturity request for user scheme {user_scheme.id}: {str(e)}"
                    )

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Maturity redemption job failed: {str(e)}")
            raise PersistenceError(f"Failed to process matured schemes: {str(e)}")

        logger.info(
            f"Maturity job finished: processed={result.processed}, created={result.created}, "
            f"skipped={result.skipped}, failed={result.failed}"
        )
        return result
