"""
가입 상담 요청 API

- POST /scheme-requests: 상담 요청 등록 (가입자)
- GET /scheme-requests: 목록 (가입자는 본인 요청, 관리자는 전체 + is_addressed 필터)
- GET /scheme-requests/{request_id}: 상세
- PATCH /scheme-requests/{request_id}: 처리 표시/메모 (관리자)
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query, status

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor, require_admin, require_user
from goldapi.schemas.scheme_request import (
    SchemeRequestCreate,
    SchemeRequestListResponse,
    SchemeRequestResponse,
    SchemeRequestUpdate,
)
from goldapi.schemas.user import Actor
from goldapi.services.scheme_request_service import SchemeRequestService

router = APIRouter(prefix="/scheme-requests", tags=["scheme-requests"])


@router.post("", response_model=SchemeRequestResponse, status_code=status.HTTP_201_CREATED)
@inject
def create_scheme_request(
    request: SchemeRequestCreate,
    actor: Actor = Depends(require_user),
    service: SchemeRequestService = Depends(Provide[Container.services.scheme_request_service]),
) -> SchemeRequestResponse:
    return service.create_scheme_request(actor.id, request)


@router.get("", response_model=SchemeRequestListResponse)
@inject
def list_scheme_requests(
    is_addressed: Optional[bool] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    service: SchemeRequestService = Depends(Provide[Container.services.scheme_request_service]),
) -> SchemeRequestListResponse:
    return service.list_scheme_requests(
        user_id=None if actor.is_admin else actor.id,
        is_addressed=is_addressed,
        limit=limit,
        offset=offset,
    )


@router.get("/{request_id}", response_model=SchemeRequestResponse)
@inject
def get_scheme_request(
    request_id: int,
    actor: Actor = Depends(get_current_actor),
    service: SchemeRequestService = Depends(Provide[Container.services.scheme_request_service]),
) -> SchemeRequestResponse:
    return service.get_scheme_request(
        request_id, user_id=None if actor.is_admin else actor.id
    )


@router.patch("/{request_id}", response_model=SchemeRequestResponse)
@inject
def update_scheme_request(
    request_id: int,
    update: SchemeRequestUpdate,
    _: Actor = Depends(require_admin),
    service: SchemeRequestService = Depends(Provide[Container.services.scheme_request_service]),
) -> SchemeRequestResponse:
    return service.update_scheme_request(request_id, update)
