"""
포인트/만기 상환 서비스

상태 전이: PENDING -> APPROVED | REJECTED (종료 상태는 변경 불가)

- BONUS: 가입자가 매월 1일 ~ redemptionWindow 일 사이에 요청, 관리자 승인 시 포인트 차감
- MATURITY: 만기 스케줄러가 자동 생성, 승인 시 가입 COMPLETED + 금 지급(withdrawal) 기록
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from goldapi.config import settings
from goldapi.core.exceptions import (
    BaseAPIException,
    BusinessRuleViolation,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from goldapi.models.redemption import RedemptionRequest, RedemptionStatus, RedemptionType
from goldapi.models.settings import SettingKey
from goldapi.models.transaction import TransactionType
from goldapi.models.user_scheme import UserScheme, UserSchemeStatus
from goldapi.repositories.gold_price_repository import GoldPriceRepository
from goldapi.repositories.redemption_repository import RedemptionRepository
from goldapi.repositories.transaction_repository import TransactionRepository
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.redemption import (
    RedemptionEligibility,
    RedemptionListResponse,
    RedemptionRequestResponse,
)
from goldapi.services.settings_service import SettingsService
from goldapi.services.transaction_service import TransactionService
from goldapi.utils.timezone_utils import get_ist_today

logger = logging.getLogger(__name__)


class RedemptionService:
    def __init__(self, db: Session):
        self.db = db
        self.settings_service = SettingsService(db)
        self.transaction_service = TransactionService(db)
        self.redemption_repo = RedemptionRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.user_scheme_repo = UserSchemeRepository(db)
        self.gold_price_repo = GoldPriceRepository(db)

    # ------------------------------------------------------------------
    # 자격 확인
    # ------------------------------------------------------------------
    def _minimum_points(self) -> int:
        return self.settings_service.get_int(
            SettingKey.MINIMUM_REDEMPTION_POINTS,
            settings.DEFAULT_MINIMUM_REDEMPTION_POINTS,
        )

    def _window_reason(self) -> Optional[str]:
        """상환 가능 기간(매월 1일 ~ N일)이 아니면 사유 반환"""
        window = self.settings_service.get_int(
            SettingKey.REDEMPTION_WINDOW, settings.DEFAULT_REDEMPTION_WINDOW
        )
        if get_ist_today().day > window:
            return f"Redemption requests are only allowed during the first {window} days of the month"
        return None

    def _evaluate(self, user_scheme: UserScheme) -> RedemptionEligibility:
        minimum_points = self._minimum_points()
        available = user_scheme.available_points or 0

        def ineligible(reason: str, points_needed: Optional[int] = None):
            return RedemptionEligibility(
                is_eligible=False,
                reason=reason,
                available_points=available,
                minimum_points=minimum_points,
                points_needed=points_needed,
            )

        window_reason = self._window_reason()
        if window_reason:
            return ineligible(window_reason)

        if user_scheme.status != UserSchemeStatus.ACTIVE.value:
            return ineligible(f"Scheme is not active (current status: {user_scheme.status})")

        if available < minimum_points:
            return ineligible(
                "Insufficient points for redemption", minimum_points - available
            )

        if self.redemption_repo.find_pending_bonus(user_scheme.id):
            return ineligible("There is already a pending redemption request")

        return RedemptionEligibility(
            is_eligible=True,
            available_points=available,
            minimum_points=minimum_points,
        )

    def check_eligibility(
        self, user_scheme_id: int, user_id: Optional[int] = None
    ) -> RedemptionEligibility:
        """상환 가능 여부 - 불가 사유는 예외가 아닌 reason 으로 반환"""
        user_scheme = self.user_scheme_repo.get_model(user_scheme_id)
        if user_scheme is None or (user_id is not None and user_scheme.user_id != user_id):
            raise NotFoundError(f"User scheme {user_scheme_id} not found")
        return self._evaluate(user_scheme)

    # ------------------------------------------------------------------
    # 요청 생성
    # ------------------------------------------------------------------
    def create_redemption_request(
        self, user_scheme_id: int, points: int, user_id: Optional[int] = None
    ) -> RedemptionRequestResponse:
        """BONUS 상환 요청 생성

        자격 확인과 삽입을 같은 트랜잭션에서 수행합니다 (가입 행 잠금).
        """
        try:
            user_scheme = self.user_scheme_repo.get_for_update(user_scheme_id)
            if user_scheme is None or (
                user_id is not None and user_scheme.user_id != user_id
            ):
                raise NotFoundError(f"User scheme {user_scheme_id} not found")

            eligibility = self._evaluate(user_scheme)
            if not eligibility.is_eligible:
                raise BusinessRuleViolation(
                    eligibility.reason,
                    details={"points_needed": eligibility.points_needed}
                    if eligibility.points_needed
                    else None,
                )
            if points > eligibility.available_points:
                raise BusinessRuleViolation(
                    f"Cannot redeem {points} points. Only {eligibility.available_points} points available."
                )
            fee = self.settings_service.get_int(SettingKey.CONVENIENCE_FEE, 0)
            if points + fee > eligibility.available_points:
                raise BusinessRuleViolation(
                    f"Cannot redeem {points} points. {points + fee} points required including "
                    f"convenience fee {fee}, only {eligibility.available_points} available.",
                    details={"convenience_fee": fee},
                )
            if points < eligibility.minimum_points:
                raise BusinessRuleViolation(
                    f"Minimum redemption amount is {eligibility.minimum_points} points."
                )

            request = self.redemption_repo.add(
                commit=False,
                user_scheme_id=user_scheme_id,
                type=RedemptionType.BONUS.value,
                points=points,
                status=RedemptionStatus.PENDING.value,
            )
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create redemption request for {user_scheme_id}: {str(e)}")
            raise PersistenceError(f"Failed to create redemption request: {str(e)}")

        logger.info(
            f"Redemption request {request.id} created for user scheme {user_scheme_id} ({points} points)"
        )
        return RedemptionRequestResponse.model_validate(request)

    # ------------------------------------------------------------------
    # 승인 / 반려
    # ------------------------------------------------------------------
    def approve_redemption(
        self,
        request_id: int,
        admin_id: int,
        remarks: Optional[str],
        status: str,
    ) -> RedemptionRequestResponse:
        """관리자 승인/반려 (단일 트랜잭션)"""
        if status not in (RedemptionStatus.APPROVED.value, RedemptionStatus.REJECTED.value):
            raise ValidationError(
                f"Invalid status: {status}",
                details={"status": "must be APPROVED or REJECTED"},
            )

        try:
            request = self.redemption_repo.get_for_update(request_id)
            if request is None:
                raise NotFoundError(f"Redemption request {request_id} not found")
            if request.status != RedemptionStatus.PENDING.value:
                raise BusinessRuleViolation(
                    f"Can only process pending requests (current status: {request.status})"
                )

            if status == RedemptionStatus.APPROVED.value:
                user_scheme = self.user_scheme_repo.get_for_update(request.user_scheme_id)
                if user_scheme is None:
                    raise NotFoundError(f"User scheme {request.user_scheme_id} not found")
                # 해지/만기 처리된 가입은 승인 불가 (반려만 가능)
                if user_scheme.status != UserSchemeStatus.ACTIVE.value:
                    raise BusinessRuleViolation(
                        f"Cannot approve request for a scheme that is not active "
                        f"(current status: {user_scheme.status})"
                    )
                if request.type == RedemptionType.BONUS.value:
                    self._approve_bonus(request, user_scheme)
                else:
                    self._approve_maturity(request, user_scheme)
            else:
                tagged = self.transaction_repo.find_by_redemption_request(request.id)
                self.transaction_repo.mark_deleted(tagged)

            request.status = status
            request.approved_by = admin_id
            request.approved_at = datetime.now(timezone.utc)
            request.remarks = remarks
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to process redemption request {request_id}: {str(e)}")
            raise PersistenceError(f"Failed to process redemption request: {str(e)}")

        logger.info(f"Redemption request {request_id} {status} by admin {admin_id}")
        return RedemptionRequestResponse.model_validate(request)

    def _approve_bonus(self, request: RedemptionRequest, user_scheme: UserScheme) -> None:
        if not request.points or request.points <= 0:
            raise BusinessRuleViolation("Redemption request has invalid points")

        fee = self.settings_service.get_required_int(SettingKey.CONVENIENCE_FEE)
        required = request.points + fee
        if (user_scheme.available_points or 0) < required:
            raise BusinessRuleViolation(
                f"Insufficient points: {required} required (including convenience fee {fee}), "
                f"{user_scheme.available_points} available"
            )

        self.transaction_service.post_transaction(
            user_scheme_id=user_scheme.id,
            transaction_type=TransactionType.BONUS_WITHDRAWAL.value,
            points=-request.points,
            redemption_request_id=request.id,
            description=f"Bonus redemption of {request.points} points",
        )
        self.transaction_service.post_transaction(
            user_scheme_id=user_scheme.id,
            transaction_type=TransactionType.CONVENIENCE_FEE.value,
            points=-fee,
            redemption_request_id=request.id,
            description=f"Convenience fee for redemption request {request.id}",
        )
        self.user_scheme_repo.deduct_available(user_scheme, required)

    def _approve_maturity(self, request: RedemptionRequest, user_scheme: UserScheme) -> None:
        scheme = user_scheme.scheme
        total_gold = Decimal(str(scheme.gold_grams)) + Decimal(str(user_scheme.accrued_gold or 0))

        current_price = self.gold_price_repo.get_latest()
        if current_price is None:
            raise NotFoundError("Current gold price is required to approve maturity redemption")

        amount = (total_gold * Decimal(str(current_price.price_per_gram))).quantize(
            Decimal("0.01")
        )
        user_scheme.status = UserSchemeStatus.COMPLETED.value
        self.transaction_service.post_transaction(
            user_scheme_id=user_scheme.id,
            transaction_type=TransactionType.WITHDRAWAL.value,
            amount=amount,
            gold_grams=total_gold,
            points=0,
            redemption_request_id=request.id,
            description=f"Maturity redemption of {total_gold:.4f} grams of gold",
        )

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------
    def get_redemption_request(
        self, request_id: int, user_id: Optional[int] = None
    ) -> RedemptionRequestResponse:
        request = self.redemption_repo.get_model(request_id)
        if request is None or (
            user_id is not None and request.user_scheme.user_id != user_id
        ):
            raise NotFoundError(f"Redemption request {request_id} not found")
        return RedemptionRequestResponse.model_validate(request)

    def list_redemption_requests(
        self,
        status: Optional[str] = None,
        request_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> RedemptionListResponse:
        return self._list(status=status, request_type=request_type, limit=limit, offset=offset)

    def list_user_redemption_requests(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> RedemptionListResponse:
        return self._list(user_id=user_id, limit=limit, offset=offset)

    def _list(self, limit: int, offset: int, **filters) -> RedemptionListResponse:
        if limit > 100:
            limit = 100
        requests, total = self.redemption_repo.list_filtered(
            limit=limit, offset=offset, **filters
        )
        return RedemptionListResponse(
            requests=requests,
            total_count=total,
            has_next=offset + len(requests) < total,
            limit=limit,
            offset=offset,
        )
