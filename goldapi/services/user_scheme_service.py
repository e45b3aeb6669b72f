"""
상품 가입(UserScheme) 서비스

가입, 신규 회원 가입+상품 가입, 중도 해지, 증서 전달 표시를 담당합니다.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from goldapi.core.exceptions import (
    BaseAPIException,
    BusinessRuleViolation,
    ConflictError,
    NotFoundError,
    PersistenceError,
)
from goldapi.core.security import generate_password, hash_password
from goldapi.models.settings import SettingKey
from goldapi.models.transaction import TransactionType
from goldapi.models.user_scheme import UserScheme, UserSchemeStatus
from goldapi.repositories.gold_price_repository import GoldPriceRepository
from goldapi.repositories.redemption_repository import RedemptionRepository
from goldapi.repositories.scheme_repository import SchemeRepository
from goldapi.repositories.user_repository import UserRepository
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.user import User as UserSchema, UserRegistration
from goldapi.schemas.user_scheme import (
    NewUserEnrollmentResponse,
    UserSchemeListResponse,
    UserSchemeResponse,
)
from goldapi.services.notification_service import NotificationService
from goldapi.services.settings_service import SettingsService
from goldapi.services.transaction_service import TransactionService
from goldapi.utils.date_utils import add_months
from goldapi.utils.timezone_utils import get_ist_today

logger = logging.getLogger(__name__)


class UserSchemeService:
    def __init__(self, db: Session, notification_service: NotificationService):
        self.db = db
        self.notification_service = notification_service
        self.user_repo = UserRepository(db)
        self.scheme_repo = SchemeRepository(db)
        self.user_scheme_repo = UserSchemeRepository(db)
        self.gold_price_repo = GoldPriceRepository(db)
        self.redemption_repo = RedemptionRepository(db)
        self.settings_service = SettingsService(db)
        self.transaction_service = TransactionService(db)

    def _enroll(
        self, user_id: int, scheme_id: int, start_date: Optional[date] = None
    ) -> UserScheme:
        """가입 생성 + 초기 입금 + 가입 보너스 (커밋하지 않음)"""
        if self.user_repo.get_model(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        scheme = self.scheme_repo.get_model(scheme_id)
        if scheme is None:
            raise NotFoundError(f"Scheme {scheme_id} not found")
        if self.user_scheme_repo.has_active_enrollment(user_id, scheme_id):
            raise BusinessRuleViolation(
                "User already has an active enrollment in this scheme",
                details={"user_id": user_id, "scheme_id": scheme_id},
            )

        start = start_date or get_ist_today()
        user_scheme = self.user_scheme_repo.add(
            commit=False,
            user_id=user_id,
            scheme_id=scheme_id,
            start_date=start,
            end_date=add_months(start, scheme.duration_months),
            total_points=0,
            available_points=0,
            status=UserSchemeStatus.ACTIVE.value,
            accrued_gold=Decimal("0"),
        )

        # 현재 시세가 없으면 금액 0 으로 기록
        gold_grams = Decimal(str(scheme.gold_grams))
        current_price = self.gold_price_repo.get_latest()
        amount = (
            (gold_grams * Decimal(str(current_price.price_per_gram))).quantize(Decimal("0.01"))
            if current_price
            else Decimal("0")
        )
        self.transaction_service.post_transaction(
            user_scheme_id=user_scheme.id,
            transaction_type=TransactionType.DEPOSIT.value,
            amount=amount,
            gold_grams=gold_grams,
            points=0,
            description=f"Initial deposit for {scheme.name} scheme",
        )

        join_bonus = self.settings_service.get_int(SettingKey.JOIN_BONUS_POINT, 0)
        if join_bonus > 0:
            self.transaction_service.post_transaction(
                user_scheme_id=user_scheme.id,
                transaction_type=TransactionType.POINTS.value,
                points=join_bonus,
                description=f"Join bonus points {join_bonus} awarded for joining {scheme.name} scheme",
            )
            self.user_scheme_repo.add_points(user_scheme, join_bonus)

        return user_scheme

    def enroll(
        self, user_id: int, scheme_id: int, start_date: Optional[date] = None
    ) -> UserSchemeResponse:
        """기존 회원의 상품 가입"""
        try:
            user_scheme = self._enroll(user_id, scheme_id, start_date)
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to enroll user {user_id} in scheme {scheme_id}: {str(e)}")
            raise PersistenceError(f"Failed to enroll in scheme: {str(e)}")

        logger.info(f"User {user_id} enrolled in scheme {scheme_id} (user scheme {user_scheme.id})")
        return UserSchemeResponse.model_validate(user_scheme)

    def register_user_with_scheme(
        self,
        registration: UserRegistration,
        scheme_id: int,
        start_date: Optional[date] = None,
    ) -> NewUserEnrollmentResponse:
        """신규 회원 생성 + 상품 가입 후 환영 메일 발송

        메일 발송은 커밋 이후에 수행하며 실패해도 가입은 유지됩니다.
        """
        if self.user_repo.get_model_by_email(registration.email):
            raise ConflictError(f"User already exists with email: {registration.email}")

        password = generate_password()
        try:
            user = self.user_repo.create_user(
                password_hash=hash_password(password),
                commit=False,
                **registration.model_dump(),
            )
            user_scheme = self._enroll(user.id, scheme_id, start_date)
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Duplicate user registration for {registration.email}: {str(e)}")
            raise ConflictError(f"User already exists with email: {registration.email}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to register user {registration.email}: {str(e)}")
            raise PersistenceError(f"Failed to register user: {str(e)}")

        logger.info(f"Registered user {user.id} with scheme {scheme_id}")
        email_sent = self.notification_service.send_welcome_email(
            user.email, user.name, password
        )

        return NewUserEnrollmentResponse(
            user=UserSchema.model_validate(user),
            user_scheme=UserSchemeResponse.model_validate(user_scheme),
            welcome_email_sent=email_sent,
        )

    def withdraw(
        self,
        user_scheme_id: int,
        amount: Optional[float] = None,
        description: Optional[str] = None,
    ) -> UserSchemeResponse:
        """중도 해지 - 상품 금 그램 withdrawal 기록, 종료일은 오늘"""
        user_scheme = self.user_scheme_repo.get_for_update(user_scheme_id)
        if user_scheme is None:
            raise NotFoundError(f"User scheme {user_scheme_id} not found")
        if user_scheme.status != UserSchemeStatus.ACTIVE.value:
            raise BusinessRuleViolation(
                f"Only ACTIVE schemes can be withdrawn (current status: {user_scheme.status})"
            )
        pending = self.redemption_repo.count_pending(user_scheme_id)
        if pending:
            raise BusinessRuleViolation(
                "Cannot withdraw while redemption requests are pending",
                details={"pending_requests": pending},
            )

        scheme = user_scheme.scheme
        try:
            self.transaction_service.post_transaction(
                user_scheme_id=user_scheme.id,
                transaction_type=TransactionType.WITHDRAWAL.value,
                amount=Decimal(str(amount or 0)),
                gold_grams=Decimal(str(scheme.gold_grams)),
                points=0,
                description=description or f"Withdrawal from scheme {scheme.name}",
            )
            user_scheme.status = UserSchemeStatus.WITHDRAWN.value
            user_scheme.end_date = get_ist_today()
            self.db.commit()
        except BaseAPIException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to withdraw user scheme {user_scheme_id}: {str(e)}")
            raise PersistenceError(f"Failed to withdraw from scheme: {str(e)}")

        logger.info(f"User scheme {user_scheme_id} withdrawn")
        return UserSchemeResponse.model_validate(user_scheme)

    def mark_certificate_delivered(
        self, user_scheme_id: int, delivered: bool = True
    ) -> UserSchemeResponse:
        user_scheme = self.user_scheme_repo.update(
            user_scheme_id, certificate_delivered=delivered
        )
        if user_scheme is None:
            raise NotFoundError(f"User scheme {user_scheme_id} not found")
        return user_scheme

    def get_user_scheme(
        self, user_scheme_id: int, user_id: Optional[int] = None
    ) -> UserSchemeResponse:
        """가입 조회 - user_id 가 주어지면 본인 가입만 허용"""
        user_scheme = self.user_scheme_repo.get_by_id(user_scheme_id)
        if user_scheme is None or (user_id is not None and user_scheme.user_id != user_id):
            raise NotFoundError(f"User scheme {user_scheme_id} not found")
        return user_scheme

    def list_user_schemes(self, user_id: int) -> UserSchemeListResponse:
        user_schemes = self.user_scheme_repo.find_by_user(user_id)
        return UserSchemeListResponse(
            user_schemes=user_schemes, total_count=len(user_schemes)
        )
