from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, status

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor, require_admin
from goldapi.schemas.scheme import SchemeCreate, SchemeListResponse, SchemeResponse
from goldapi.schemas.user import Actor
from goldapi.services.scheme_service import SchemeService

router = APIRouter(prefix="/schemes", tags=["schemes"])


@router.get("", response_model=SchemeListResponse)
@inject
def list_schemes(
    _: Actor = Depends(get_current_actor),
    service: SchemeService = Depends(Provide[Container.services.scheme_service]),
) -> SchemeListResponse:
    return service.list_schemes()


@router.get("/{scheme_id}", response_model=SchemeResponse)
@inject
def get_scheme(
    scheme_id: int,
    _: Actor = Depends(get_current_actor),
    service: SchemeService = Depends(Provide[Container.services.scheme_service]),
) -> SchemeResponse:
    return service.get_scheme(scheme_id)


@router.post("", response_model=SchemeResponse, status_code=status.HTTP_201_CREATED)
@inject
def create_scheme(
    request: SchemeCreate,
    _: Actor = Depends(require_admin),
    service: SchemeService = Depends(Provide[Container.services.scheme_service]),
) -> SchemeResponse:
    """상품 생성 (관리자)"""
    return service.create_scheme(request)
