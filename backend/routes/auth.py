# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from exceptions import WarehouseAppError
from models.users import User
from schemas import user as schemas
from services.auth_service import AuthService
from services.user_service import UserService
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user

router = APIRouter(tags=["Auth"])


# Register a new Employee account and sign it in
@router.post("/register", response_model=schemas.Token, status_code=201)
def register(payload: schemas.UserRegister, request: Request, db: Session = Depends(get_db)):
    try:
        result = AuthService(db).register(payload.username, payload.email, payload.password)
    except WarehouseAppError as exc:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email, "reason": exc.code})
        raise

    write_log(db, user_id=result["user"].id, action="REGISTER", resource="auth",
              ip=client_ip(request), meta={"email": result["user"].email})
    return result


# Authenticate by username or email and issue a JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    try:
        result = AuthService(db).login(payload.username_or_email, payload.password)
    except WarehouseAppError:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"login": payload.username_or_email})
        raise

    write_log(db, user_id=result["user"].id, action="LOGIN", resource="auth",
              ip=client_ip(request), meta={"login": payload.username_or_email})
    return result


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# Self-service password change; the current password must verify
@router.post("/me/password", status_code=204)
def change_password(
    payload: schemas.ChangePassword,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    UserService(db).change_password(current_user.id, payload.current_password, payload.new_password)
    write_log(db, user_id=current_user.id, action="CHANGE_PASSWORD", resource="auth", ip=client_ip(request))
