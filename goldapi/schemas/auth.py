from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from goldapi.models.user import ActorRole


class BaseResponse(BaseModel):
    success: bool = True
    data: Optional[dict] = None
    meta: Optional[dict] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: ActorRole
    actor_id: int


class TokenPayload(BaseModel):
    """JWT payload - 파이프라인은 이 값을 신뢰하고 재검증하지 않음"""

    user_id: int
    role: ActorRole
