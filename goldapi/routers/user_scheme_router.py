"""
상품 가입 API

가입자:
- GET /user-schemes/me: 내 가입 목록
- POST /user-schemes: 상품 가입
- GET /user-schemes/{user_scheme_id}: 가입 상세 (본인 것만)

관리자:
- POST /user-schemes/admin/enroll: 기존 회원 가입 처리
- POST /user-schemes/admin/register: 신규 회원 생성 + 가입 (환영 메일 발송)
- GET /user-schemes/admin/users/{user_id}: 회원의 가입 목록
- POST /user-schemes/{user_scheme_id}/withdraw: 중도 해지
- PATCH /user-schemes/{user_scheme_id}/certificate: 증서 전달 표시
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, status

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor, require_admin, require_user
from goldapi.schemas.user import Actor
from goldapi.schemas.user_scheme import (
    AdminEnrollmentRequest,
    CertificateUpdateRequest,
    EnrollmentRequest,
    NewUserEnrollmentRequest,
    NewUserEnrollmentResponse,
    UserSchemeListResponse,
    UserSchemeResponse,
    WithdrawRequest,
)
from goldapi.services.user_scheme_service import UserSchemeService

router = APIRouter(prefix="/user-schemes", tags=["user-schemes"])


@router.get("/me", response_model=UserSchemeListResponse)
@inject
def list_my_schemes(
    actor: Actor = Depends(require_user),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> UserSchemeListResponse:
    return service.list_user_schemes(actor.id)


@router.post("", response_model=UserSchemeResponse, status_code=status.HTTP_201_CREATED)
@inject
def enroll(
    request: EnrollmentRequest,
    actor: Actor = Depends(require_user),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> UserSchemeResponse:
    return service.enroll(actor.id, request.scheme_id, request.start_date)


@router.post(
    "/admin/enroll",
    response_model=UserSchemeResponse,
    status_code=status.HTTP_201_CREATED,
)
@inject
def admin_enroll(
    request: AdminEnrollmentRequest,
    _: Actor = Depends(require_admin),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> UserSchemeResponse:
    return service.enroll(request.user_id, request.scheme_id, request.start_date)


@router.post(
    "/admin/register",
    response_model=NewUserEnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
@inject
def register_user_with_scheme(
    request: NewUserEnrollmentRequest,
    _: Actor = Depends(require_admin),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> NewUserEnrollmentResponse:
    return service.register_user_with_scheme(
        request.user, request.scheme_id, request.start_date
    )


@router.get("/admin/users/{user_id}", response_model=UserSchemeListResponse)
@inject
def list_user_schemes(
    user_id: int,
    _: Actor = Depends(require_admin),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> UserSchemeListResponse:
    return service.list_user_schemes(user_id)


@router.get("/{user_scheme_id}", response_model=UserSchemeResponse)
@inject
def get_user_scheme(
    user_scheme_id: int,
    actor: Actor = Depends(get_current_actor),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> UserSchemeResponse:
    return service.get_user_scheme(
        user_scheme_id, user_id=None if actor.is_admin else actor.id
    )


@router.post("/{user_scheme_id}/withdraw", response_model=UserSchemeResponse)
@inject
def withdraw(
    user_scheme_id: int,
    request: Optional[WithdrawRequest] = Body(None),
    _: Actor = Depends(require_admin),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> UserSchemeResponse:
    request = request or WithdrawRequest()
    return service.withdraw(user_scheme_id, request.amount, request.description)


@router.patch("/{user_scheme_id}/certificate", response_model=UserSchemeResponse)
@inject
def update_certificate(
    user_scheme_id: int,
    request: CertificateUpdateRequest,
    _: Actor = Depends(require_admin),
    service: UserSchemeService = Depends(Provide[Container.services.user_scheme_service]),
) -> UserSchemeResponse:
    return service.mark_certificate_delivered(user_scheme_id, request.delivered)
