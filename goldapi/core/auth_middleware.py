from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError

from goldapi.core.exceptions import AuthenticationError, AuthorizationError
from goldapi.core.security import decode_access_token
from goldapi.schemas.auth import TokenPayload
from goldapi.schemas.user import Actor

# JWT Bearer 토큰 스킴
security = HTTPBearer(auto_error=False)


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Actor:
    """필수 인증 - 토큰의 {user_id, role} 을 그대로 신뢰"""
    if not credentials:
        raise AuthenticationError("Authentication required")

    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload.model_validate(payload)
    except (JWTError, PydanticValidationError):
        raise AuthenticationError("Invalid or expired token")

    return Actor(id=token_data.user_id, role=token_data.role)


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """관리자 권한이 필요한 엔드포인트용 의존성"""
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")
    return actor


def require_user(actor: Actor = Depends(get_current_actor)) -> Actor:
    """가입자 토큰만 허용"""
    if actor.is_admin:
        raise AuthorizationError("User access required")
    return actor
