import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from goldapi.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

GENERATED_PASSWORD_LENGTH = 10


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict:
    """서명/만료 검증 후 payload 반환 (실패 시 JWTError)"""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def hash_password(password: str) -> str:
    """bcrypt 해시 (salt 포함)"""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """해시 형식을 알 수 없으면 False"""
    if not password_hash or pwd_context.identify(password_hash) is None:
        return False
    return pwd_context.verify(password, password_hash)


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    """신규 가입자용 임시 비밀번호"""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
