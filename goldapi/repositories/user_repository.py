from typing import Optional, Tuple
from sqlalchemy.orm import Session
from datetime import datetime, timezone

from goldapi.models.user import Admin as AdminModel, User as UserModel
from goldapi.schemas.user import AdminUser, User as UserSchema
from goldapi.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserModel, UserSchema]):
    """가입자 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(UserModel, UserSchema, db)

    def get_model_by_email(self, email: str) -> Optional[UserModel]:
        return self._query().filter(UserModel.email == email.lower()).first()

    def create_user(
        self, password_hash: str, commit: bool = True, **profile
    ) -> UserModel:
        """가입자 생성 - 이메일은 소문자로 정규화"""
        profile["email"] = profile["email"].lower()
        return self.add(commit=commit, password_hash=password_hash, is_active=True, **profile)

    def update_last_login(
        self, user_id: int, login_time: Optional[datetime] = None
    ) -> Optional[UserSchema]:
        """마지막 로그인 시간 업데이트"""
        if login_time is None:
            login_time = datetime.now(timezone.utc)

        return self.update(user_id, last_login_at=login_time)

    def count_by_active(self) -> Tuple[int, int]:
        """(활성, 비활성) 가입자 수"""
        active = self.count({"is_active": True})
        inactive = self.count({"is_active": False})
        return active, inactive


class AdminRepository(BaseRepository[AdminModel, AdminUser]):
    """관리자 리포지토리 - 로그인 검증에만 사용하므로 ORM 인스턴스 위주"""

    def __init__(self, db: Session):
        super().__init__(AdminModel, AdminUser, db)

    def get_model_by_email(self, email: str) -> Optional[AdminModel]:
        return self._query().filter(AdminModel.email == email.lower()).first()

    def touch_last_login(self, admin: AdminModel) -> None:
        admin.last_login_at = datetime.now(timezone.utc)
        self.db.commit()
