"""
사용 가능 포인트 재계산 (야간 작업)

available_points 를 삭제되지 않은 거래의 points 합계로 덮어씁니다. total_points 는 건드리지 않습니다.
"""

import logging

from sqlalchemy.orm import Session

from goldapi.config import settings
from goldapi.core.exceptions import NotFoundError, PersistenceError
from goldapi.repositories.transaction_repository import TransactionRepository
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.batch import RecalculationItemResult, RecalculationRunResult

logger = logging.getLogger(__name__)


class PointsRecalculationService:
    def __init__(self, db: Session, batch_size: int = settings.RECALCULATION_BATCH_SIZE):
        self.db = db
        self.batch_size = batch_size
        self.user_scheme_repo = UserSchemeRepository(db)
        self.transaction_repo = TransactionRepository(db)

    def _recalculate(self, user_scheme_id: int) -> RecalculationItemResult:
        user_scheme = self.user_scheme_repo.get_for_update(user_scheme_id)
        if user_scheme is None:
            raise NotFoundError(f"User scheme {user_scheme_id} not found")

        previous = user_scheme.available_points or 0
        ledger_points = self.transaction_repo.sum_points(user_scheme_id)
        if previous != ledger_points:
            user_scheme.available_points = ledger_points
            self.db.flush()
            logger.info(
                f"User scheme {user_scheme_id} available points corrected: {previous} -> {ledger_points}"
            )
        return RecalculationItemResult(
            user_scheme_id=user_scheme_id,
            previous_points=previous,
            new_points=ledger_points,
            success=True,
        )

    def recalculate_user_scheme(self, user_scheme_id: int) -> RecalculationItemResult:
        try:
            item = self._recalculate(user_scheme_id)
            self.db.commit()
            return item
        except NotFoundError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to recalculate points for user scheme {user_scheme_id}: {str(e)}")
            raise PersistenceError(f"Failed to recalculate points: {str(e)}")

    def recalculate_all(self) -> RecalculationRunResult:
        """ACTIVE 가입 전체 재계산 - batch_size 단위로 커밋"""
        result = RecalculationRunResult(processed=0, succeeded=0, failed=0)
        user_scheme_ids = self.user_scheme_repo.find_active_ids()
        logger.info(f"Recalculating available points for {len(user_scheme_ids)} user schemes")

        for start in range(0, len(user_scheme_ids), self.batch_size):
            batch = user_scheme_ids[start : start + self.batch_size]
            try:
                for user_scheme_id in batch:
                    result.processed += 1
                    try:
                        with self.db.begin_nested():
                            item = self._recalculate(user_scheme_id)
                        result.succeeded += 1
                    except Exception as e:
                        item = RecalculationItemResult(
                            user_scheme_id=user_scheme_id,
                            previous_points=0,
                            new_points=0,
                            success=False,
                            error=str(e),
                        )
                        result.failed += 1
                        logger.error(
                            f"Failed to recalculate points for user scheme {user_scheme_id}: {str(e)}"
                        )
                    result.details.append(item)
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                logger.error(f"Points recalculation batch starting at {start} failed: {str(e)}")
                raise PersistenceError(f"Failed to recalculate points: {str(e)}")

        logger.info(
            f"Points recalculation finished: processed={result.processed}, "
            f"succeeded={result.succeeded}, failed={result.failed}"
        )
        return result
