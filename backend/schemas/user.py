from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import List, Optional

from models.users import Role

# Shared properties for user models
class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr

# Schema for user authentication credentials (username or email)
class UserLogin(BaseModel):
    username_or_email: str
    password: str

# Schema for self-registration requests
class UserRegister(UserBase):
    password: str = Field(..., min_length=6, max_length=100)

# Schema for admin-created accounts
class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=100)
    role: Role = Role.EMPLOYEE
    is_active: bool = True

# Schema for admin updates of profile, role and status
class UserUpdate(UserBase):
    role: Role
    is_active: bool

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserList(BaseModel):
    items: List[UserResponse]
    total: int

class ChangePassword(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=100)

class ResetPassword(BaseModel):
    new_password: str = Field(..., min_length=6, max_length=100)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse
