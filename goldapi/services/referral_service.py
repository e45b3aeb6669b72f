import logging
from typing import Optional

from sqlalchemy.orm import Session

from goldapi.core.exceptions import NotFoundError
from goldapi.models.referral import ReferralStatus
from goldapi.repositories.referral_repository import ReferralRepository
from goldapi.repositories.user_repository import UserRepository
from goldapi.schemas.referral import (
    ReferralCreate,
    ReferralListResponse,
    ReferralResponse,
    ReferralStatusUpdate,
)

logger = logging.getLogger(__name__)


class ReferralService:
    """지인 소개 등록 및 관리자 처리"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.referral_repo = ReferralRepository(db)

    def create_referral(self, user_id: int, data: ReferralCreate) -> ReferralResponse:
        if self.user_repo.get_model(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

        referral = self.referral_repo.create(
            user_id=user_id,
            name=data.name.strip(),
            age=data.age,
            email=data.email.lower(),
            phone=data.phone,
            convenient_datetime=data.convenient_datetime,
            comments=data.comments,
            status=ReferralStatus.PENDING.value,
            is_addressed=False,
        )
        logger.info(f"Referral {referral.id} created by user {user_id}")
        return referral

    def update_referral_status(
        self, referral_id: int, update: ReferralStatusUpdate
    ) -> ReferralResponse:
        """상태 변경 - is_addressed 생략 시 PENDING 이외 상태면 처리 완료"""
        is_addressed = update.is_addressed
        if is_addressed is None:
            is_addressed = update.status != ReferralStatus.PENDING

        changes = {"status": update.status.value, "is_addressed": is_addressed}
        if update.comments is not None:
            changes["comments"] = update.comments

        referral = self.referral_repo.update(referral_id, **changes)
        if referral is None:
            raise NotFoundError(f"Referral {referral_id} not found")
        logger.info(f"Referral {referral_id} set to {update.status.value}")
        return referral

    def get_referral(self, referral_id: int, user_id: Optional[int] = None) -> ReferralResponse:
        referral = self.referral_repo.get_by_id(referral_id)
        if referral is None or (user_id is not None and referral.user_id != user_id):
            raise NotFoundError(f"Referral {referral_id} not found")
        return referral

    def list_referrals(
        self,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        is_addressed: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ReferralListResponse:
        if limit > 100:
            limit = 100
        referrals, total = self.referral_repo.list_filtered(
            user_id=user_id,
            status=status,
            is_addressed=is_addressed,
            limit=limit,
            offset=offset,
        )
        return ReferralListResponse(
            referrals=referrals,
            total_count=total,
            has_next=offset + len(referrals) < total,
            limit=limit,
            offset=offset,
        )
