# backend/services/user_service.py
import logging

from sqlalchemy.orm import Session

from exceptions import ConflictError, InvalidArgumentError, NotFoundError, PreconditionFailedError
from models.stock import StockTransaction
from models.users import User, Role
from repositories.stock import StockTransactionRepository
from repositories.users import UserRepository
from services.base import unit_of_work
from utils.hashing import get_password_hash, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def validate_new_password(password):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidArgumentError("password", f"must be at least {MIN_PASSWORD_LENGTH} characters")


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.transactions = StockTransactionRepository(db)

    # Basic CRUD

    def get_user(self, user_id) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def get_by_username(self, username):
        if not username or not username.strip():
            return None
        return self.users.get_by_username(username)

    def get_by_email(self, email):
        if not email or not email.strip():
            return None
        return self.users.get_by_email(email)

    def list_users(self, role=None, active=None, q=None):
        return self.users.search(term=q, role=Role.parse(role) if role is not None else None, active=active)

    def create_user(self, username, email, password, role=Role.EMPLOYEE, is_active=True) -> User:
        validate_new_password(password)
        self._ensure_unique(username, email)

        user = User.create(username, email, get_password_hash(password), role, is_active)
        with unit_of_work(self.db, "username", user.username):
            self.users.add(user)
        logger.info("Created user %s (%s, %s)", user.id, user.username, user.role.value)
        return user

    def update_user(self, user_id, username, email, role, is_active) -> User:
        user = self.get_user(user_id)
        self._ensure_unique(username, email, exclude_id=user.id)

        with unit_of_work(self.db, "username", username):
            user.update(username, email, role, is_active)
            self.users.update(user)
        logger.info("Updated user %s", user_id)
        return user

    def delete_user(self, user_id) -> None:
        user = self.get_user(user_id)
        if not self.can_delete_user(user_id):
            raise PreconditionFailedError("Cannot delete user with existing stock transactions")
        with unit_of_work(self.db):
            self.users.delete(user)
        logger.info("Deleted user %s", user_id)

    def can_delete_user(self, user_id) -> bool:
        return self.transactions.count(StockTransaction.user_id == user_id) == 0

    # Password management

    def change_password(self, user_id, current_password, new_password) -> None:
        user = self.get_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise InvalidArgumentError("current_password", "is incorrect")
        validate_new_password(new_password)
        with unit_of_work(self.db):
            user.set_password_hash(get_password_hash(new_password))
        logger.info("User %s changed password", user_id)

    def reset_password(self, user_id, new_password) -> None:
        """Admin reset: replaces the hash without checking the old password."""
        user = self.get_user(user_id)
        validate_new_password(new_password)
        with unit_of_work(self.db):
            user.set_password_hash(get_password_hash(new_password))
        logger.info("Password reset for user %s", user_id)

    def validate_password(self, user_id, password) -> bool:
        user = self.users.get(user_id)
        if user is None:
            return False
        return verify_password(password, user.password_hash)

    # Status management

    def activate_user(self, user_id) -> User:
        return self._set_active(user_id, True)

    def deactivate_user(self, user_id) -> User:
        return self._set_active(user_id, False)

    # Statistics and lookups

    def count_users(self, active_only=False) -> int:
        if active_only:
            return self.users.count(User.is_active.is_(True))
        return self.users.count()

    def exists(self, user_id) -> bool:
        return self.users.exists(user_id)

    def username_exists(self, username) -> bool:
        return self.get_by_username(username) is not None

    def email_exists(self, email) -> bool:
        return self.get_by_email(email) is not None

    def _set_active(self, user_id, active):
        user = self.get_user(user_id)
        if user.is_active != active:
            with unit_of_work(self.db):
                user.is_active = active
            logger.info("User %s %s", user_id, "activated" if active else "deactivated")
        return user

    def _ensure_unique(self, username, email, exclude_id=None):
        by_username = self.get_by_username(username)
        if by_username is not None and by_username.id != exclude_id:
            raise ConflictError("username", username.strip(), message=f"Username '{username.strip()}' already exists")
        by_email = self.get_by_email(email)
        if by_email is not None and by_email.id != exclude_id:
            raise ConflictError("email", email.strip().lower(), message=f"Email '{email.strip()}' already exists")
