"""
지인 소개 API

- POST /referrals: 지인 소개 등록 (가입자)
- GET /referrals: 목록 (가입자는 본인 소개, 관리자는 전체 + status/is_addressed 필터)
- GET /referrals/{referral_id}: 상세
- PATCH /referrals/{referral_id}/status: 상태 변경 (관리자)
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query, status

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor, require_admin, require_user
from goldapi.models.referral import ReferralStatus
from goldapi.schemas.referral import (
    ReferralCreate,
    ReferralListResponse,
    ReferralResponse,
    ReferralStatusUpdate,
)
from goldapi.schemas.user import Actor
from goldapi.services.referral_service import ReferralService

router = APIRouter(prefix="/referrals", tags=["referrals"])


@router.post("", response_model=ReferralResponse, status_code=status.HTTP_201_CREATED)
@inject
def create_referral(
    request: ReferralCreate,
    actor: Actor = Depends(require_user),
    service: ReferralService = Depends(Provide[Container.services.referral_service]),
) -> ReferralResponse:
    return service.create_referral(actor.id, request)


@router.get("", response_model=ReferralListResponse)
@inject
def list_referrals(
    referral_status: Optional[ReferralStatus] = Query(None, alias="status"),
    is_addressed: Optional[bool] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    service: ReferralService = Depends(Provide[Container.services.referral_service]),
) -> ReferralListResponse:
    return service.list_referrals(
        user_id=None if actor.is_admin else actor.id,
        status=referral_status.value if referral_status else None,
        is_addressed=is_addressed,
        limit=limit,
        offset=offset,
    )


@router.get("/{referral_id}", response_model=ReferralResponse)
@inject
def get_referral(
    referral_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ReferralService = Depends(Provide[Container.services.referral_service]),
) -> ReferralResponse:
    return service.get_referral(referral_id, user_id=None if actor.is_admin else actor.id)


@router.patch("/{referral_id}/status", response_model=ReferralResponse)
@inject
def update_referral_status(
    referral_id: int,
    update: ReferralStatusUpdate,
    _: Actor = Depends(require_admin),
    service: ReferralService = Depends(Provide[Container.services.referral_service]),
) -> ReferralResponse:
    return service.update_referral_status(referral_id, update)
