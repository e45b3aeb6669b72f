from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from goldapi.containers import Container
from goldapi.core.auth_middleware import get_current_actor
from goldapi.schemas.auth import LoginRequest, Token
from goldapi.schemas.user import Actor
from goldapi.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
@inject
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(Provide[Container.services.auth_service]),
) -> Token:
    """가입자 로그인"""
    return auth_service.login_user(request)


@router.post("/admin/login", response_model=Token)
@inject
def admin_login(
    request: LoginRequest,
    auth_service: AuthService = Depends(Provide[Container.services.auth_service]),
) -> Token:
    """관리자 로그인"""
    return auth_service.login_admin(request)


@router.get("/me", response_model=Actor)
def whoami(actor: Actor = Depends(get_current_actor)) -> Actor:
    """토큰의 행위자 정보"""
    return actor
