from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from goldapi.models.user import ActorRole


class Actor(BaseModel):
    """토큰에서 복원한 인증 주체 {id, role}"""

    id: int
    role: ActorRole = ActorRole.USER

    @property
    def is_admin(self) -> bool:
        return ActorRole.is_admin(self.role)


class User(BaseModel):
    id: int
    name: str
    email: EmailStr
    mobile: str
    address: Optional[str] = None
    nominee: Optional[str] = None
    relation: Optional[str] = None
    dob: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserRegistration(BaseModel):
    """신규 가입자 정보 (비밀번호는 서버에서 생성)"""

    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    mobile: str = Field(..., min_length=7, max_length=20)
    address: Optional[str] = None
    nominee: Optional[str] = None
    relation: Optional[
        Literal["Father", "Mother", "Son", "Daughter", "Husband", "Spouse", "Other"]
    ] = None
    dob: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("Name cannot be empty")
        return v.strip()


class AdminUser(BaseModel):
    id: int
    name: str
    email: EmailStr
    is_active: bool = True

    class Config:
        from_attributes = True
