import logging

from sqlalchemy.orm import Session

from goldapi.config import Settings
from goldapi.core.exceptions import AuthenticationError
from goldapi.core.security import create_access_token, verify_password
from goldapi.models.user import ActorRole
from goldapi.repositories.user_repository import AdminRepository, UserRepository
from goldapi.schemas.auth import LoginRequest, Token

logger = logging.getLogger(__name__)


class AuthService:
    """가입자/관리자 로그인 - JWT 에 {user_id, role} 을 담아 발급"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.user_repo = UserRepository(db)
        self.admin_repo = AdminRepository(db)

    def _issue_token(self, actor_id: int, role: ActorRole) -> Token:
        access_token = create_access_token(
            data={"user_id": actor_id, "role": role.value}
        )
        return Token(access_token=access_token, role=role, actor_id=actor_id)

    def login_user(self, request: LoginRequest) -> Token:
        user = self.user_repo.get_model_by_email(request.email)
        if not user or not verify_password(request.password, user.password_hash):
            logger.warning(f"Failed user login attempt for {request.email}")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is inactive")

        self.user_repo.update_last_login(user.id)
        logger.info(f"User {user.id} logged in")
        return self._issue_token(user.id, ActorRole.USER)

    def login_admin(self, request: LoginRequest) -> Token:
        admin = self.admin_repo.get_model_by_email(request.email)
        if not admin or not verify_password(request.password, admin.password_hash):
            logger.warning(f"Failed admin login attempt for {request.email}")
            raise AuthenticationError("Invalid email or password")
        if not admin.is_active:
            raise AuthenticationError("Account is inactive")

        self.admin_repo.touch_last_login(admin)
        logger.info(f"Admin {admin.id} logged in")
        return self._issue_token(admin.id, ActorRole.ADMIN)
