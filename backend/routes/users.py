# backend/routes/users.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from exceptions import PreconditionFailedError
from models.users import User, Role
from schemas import user as schemas
from services.user_service import UserService
from utils.audit import write_log, client_ip
from utils.tokenJWT import role_required

router = APIRouter(prefix="/users", tags=["Users"])

admin_only = role_required(Role.ADMIN)


# Retrieve users with optional role / status / text filters (Admin only)
@router.get("", response_model=schemas.UserList)
def list_users(
    q: Optional[str] = Query(None, description="Search by username or email"),
    role: Optional[Role] = Query(None),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    items = UserService(db).list_users(role=role, active=active, q=q)
    return {"items": items, "total": len(items)}


@router.get("/{user_id}", response_model=schemas.UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    return UserService(db).get_user(user_id)


@router.post("", response_model=schemas.UserResponse, status_code=201)
def create_user(
    payload: schemas.UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    user = UserService(db).create_user(
        payload.username, payload.email, payload.password, role=payload.role, is_active=payload.is_active
    )
    write_log(db, user_id=current_user.id, action="USER_CREATE", resource="users",
              resource_id=user.id, ip=client_ip(request), meta={"username": user.username, "role": user.role.value})
    return user


@router.put("/{user_id}", response_model=schemas.UserResponse)
def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    user = UserService(db).update_user(user_id, payload.username, payload.email, payload.role, payload.is_active)
    write_log(db, user_id=current_user.id, action="USER_UPDATE", resource="users",
              resource_id=user_id, ip=client_ip(request), meta={"role": user.role.value, "is_active": user.is_active})
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    # Prevent self-deletion
    if user_id == current_user.id:
        raise PreconditionFailedError("You cannot delete your own account")

    UserService(db).delete_user(user_id)
    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users",
              resource_id=user_id, ip=client_ip(request))


@router.post("/{user_id}/activate", response_model=schemas.UserResponse)
def activate_user(user_id: int, request: Request, db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    user = UserService(db).activate_user(user_id)
    write_log(db, user_id=current_user.id, action="USER_ACTIVATE", resource="users",
              resource_id=user_id, ip=client_ip(request))
    return user


@router.post("/{user_id}/deactivate", response_model=schemas.UserResponse)
def deactivate_user(user_id: int, request: Request, db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    if user_id == current_user.id:
        raise PreconditionFailedError("You cannot deactivate your own account")

    user = UserService(db).deactivate_user(user_id)
    write_log(db, user_id=current_user.id, action="USER_DEACTIVATE", resource="users",
              resource_id=user_id, ip=client_ip(request))
    return user


@router.post("/{user_id}/reset-password", status_code=204)
def reset_password(
    user_id: int,
    payload: schemas.ResetPassword,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    UserService(db).reset_password(user_id, payload.new_password)
    write_log(db, user_id=current_user.id, action="USER_RESET_PASSWORD", resource="users",
              resource_id=user_id, ip=client_ip(request))
