"""
포인트 상환 API (가입자)

- GET /redemptions/eligibility/{user_scheme_id}: 상환 가능 여부 (불가 사유 포함)
- POST /redemptions: BONUS 상환 요청
- GET /redemptions/me: 내 상환 요청 목록
- GET /redemptions/{request_id}: 상환 요청 상세
"""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query, status

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor, require_user
from goldapi.schemas.redemption import (
    RedemptionCreateRequest,
    RedemptionEligibility,
    RedemptionListResponse,
    RedemptionRequestResponse,
)
from goldapi.schemas.user import Actor
from goldapi.services.redemption_service import RedemptionService

router = APIRouter(prefix="/redemptions", tags=["redemptions"])


@router.get("/eligibility/{user_scheme_id}", response_model=RedemptionEligibility)
@inject
def check_eligibility(
    user_scheme_id: int,
    actor: Actor = Depends(get_current_actor),
    service: RedemptionService = Depends(Provide[Container.services.redemption_service]),
) -> RedemptionEligibility:
    return service.check_eligibility(
        user_scheme_id, user_id=None if actor.is_admin else actor.id
    )


@router.post(
    "", response_model=RedemptionRequestResponse, status_code=status.HTTP_201_CREATED
)
@inject
def create_redemption_request(
    request: RedemptionCreateRequest,
    actor: Actor = Depends(require_user),
    service: RedemptionService = Depends(Provide[Container.services.redemption_service]),
) -> RedemptionRequestResponse:
    return service.create_redemption_request(
        request.user_scheme_id, request.points, user_id=actor.id
    )


@router.get("/me", response_model=RedemptionListResponse)
@inject
def list_my_requests(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(require_user),
    service: RedemptionService = Depends(Provide[Container.services.redemption_service]),
) -> RedemptionListResponse:
    return service.list_user_redemption_requests(actor.id, limit=limit, offset=offset)


@router.get("/{request_id}", response_model=RedemptionRequestResponse)
@inject
def get_redemption_request(
    request_id: int,
    actor: Actor = Depends(get_current_actor),
    service: RedemptionService = Depends(Provide[Container.services.redemption_service]),
) -> RedemptionRequestResponse:
    return service.get_redemption_request(
        request_id, user_id=None if actor.is_admin else actor.id
    )
