# backend/services/auth_service.py
import logging

from sqlalchemy.orm import Session

from exceptions import AuthenticationFailedError
from models.users import User, Role
from services.user_service import UserService
from utils.hashing import verify_password
from utils.tokenJWT import create_access_token, token_expiration

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.user_service = UserService(db)

    def login(self, username_or_email, password) -> dict:
        user = (
            self.user_service.get_by_username(username_or_email)
            or self.user_service.get_by_email(username_or_email)
        )
        if user is None or not user.is_active:
            logger.info("Login refused for %r: unknown or inactive account", username_or_email)
            raise AuthenticationFailedError("Invalid credentials or inactive account")
        if not verify_password(password, user.password_hash):
            logger.info("Login refused for %r: bad password", username_or_email)
            raise AuthenticationFailedError("Invalid credentials")
        return self.issue_token(user)

    def register(self, username, email, password) -> dict:
        # Self-registration always yields an Employee; elevated roles are granted by an Admin
        user = self.user_service.create_user(username, email, password, role=Role.EMPLOYEE)
        return self.issue_token(user)

    def issue_token(self, user: User) -> dict:
        access_token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_at": token_expiration(access_token),
            "user": user,
        }
