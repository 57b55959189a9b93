# backend/models/users.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, func
from database import Base
from exceptions import InvalidArgumentError


# System roles; the value is the string stored in the database
class Role(str, enum.Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError("role", f"must be one of {', '.join(r.value for r in cls)}") from None


# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(
        Enum(Role, name="user_role", native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.EMPLOYEE,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @classmethod
    def create(cls, username, email, password_hash, role=Role.EMPLOYEE, is_active=True):
        user = cls(password_hash=password_hash)
        user.update(username, email, role, is_active)
        return user

    def update(self, username, email, role, is_active):
        username = (username or "").strip()
        email = (email or "").strip().lower()
        if not username:
            raise InvalidArgumentError("username", "must not be empty")
        if not email:
            raise InvalidArgumentError("email", "must not be empty")
        self.username = username
        self.email = email
        self.role = Role.parse(role)
        self.is_active = bool(is_active)

    def set_password_hash(self, password_hash):
        if not password_hash:
            raise InvalidArgumentError("password", "must not be empty")
        self.password_hash = password_hash
