"""
Sign-up, sign-in and the current account
"""
from fastapi import APIRouter, Depends, HTTPException, status, Response
from sqlalchemy.orm import Session
from datetime import timedelta
import logging

from logistik.core.database import get_db
from logistik.core.security import create_access_token, get_current_user
from logistik.core.config import settings
from logistik.schemas import LoginRequest, SignupRequest, Token
from logistik.services.user_service import UserService
from logistik.services.user_admin_service import UserAdminService
from logistik.services.audit_service import AuditService, AuditAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

TOKEN_COOKIE = "access_token"


def _issue_token(user, response: Response) -> str:
    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(data={"sub": user.email}, expires_delta=expires)
    # get_current_user falls back to this cookie
    response.set_cookie(TOKEN_COOKIE, access_token, max_age=int(expires.total_seconds()),
                        httponly=True, samesite="lax", secure=settings.is_production)
    return access_token


@router.post("/signup", response_model=dict)
async def signup(
    signup_data: SignupRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """Register a new user; the account waits for admin approval"""
    try:
        user = UserService(db).create(signup_data.email, signup_data.password, signup_data.full_name)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    AuditService(db).log(AuditAction.SIGNUP, "users", user.id, user=user)
    db.commit()
    logger.info(f"New signup: {user.email}")

    account = {"id": user.id, "email": user.email, "full_name": user.full_name, "approval_status": "pending"}
    return {"access_token": _issue_token(user, response), "token_type": "bearer", "user": account}


@router.post("/login", response_model=Token)
async def login(
    login_data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """Exchange credentials for a bearer token; failures are audited too"""
    user = UserService(db).authenticate(login_data.email, login_data.password)
    if user is None:
        AuditService(db).log(AuditAction.LOGIN_FAILED, "users", status="failure",
                             description=f"Failed login attempt for '{login_data.email}'")
        db.commit()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Email atau password salah")

    AuditService(db).log(AuditAction.LOGIN, "users", user.id, user=user)
    db.commit()

    return {"access_token": _issue_token(user, response), "token_type": "bearer"}


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE)
    return {"message": "Logged out"}


@router.get("/me")
async def get_me(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Current user with roles, menu access and approval status"""
    info = UserAdminService(db).my_roles(current_user)
    info["full_name"] = current_user.full_name
    return info
