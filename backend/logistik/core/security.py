"""
Security - password hashing, session tokens and the access dependencies
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from logistik.core.config import settings
from logistik.core.database import get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Missing headers fall through to the access_token cookie
bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_HEADERS = {"WWW-Authenticate": "Bearer"}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Signed session token; ``sub`` carries the user e-mail"""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def resolve_user_from_token(token: Optional[str], db: Session):
    """Return the active user a token belongs to, or None"""
    from logistik.services.user_service import UserService

    if not token:
        return None
    payload = decode_access_token(token)
    if payload is None or payload.get("sub") is None:
        return None
    user = UserService(db).get_by_email(payload["sub"])
    if user is None or not user.is_active:
        return None
    return user


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    # Authorization header first, then cookie
    if credentials:
        return credentials.credentials
    return request.cookies.get("access_token")


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
):
    """Signed-in user from the bearer header or the access_token cookie (401 otherwise)"""
    token = _extract_token(request, credentials)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Silakan login terlebih dahulu", headers=TOKEN_HEADERS)

    user = resolve_user_from_token(token, db)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Sesi tidak valid atau sudah kedaluwarsa", headers=TOKEN_HEADERS)
    return user


async def get_approved_user(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Approved users and admins only; everyone else gets 403"""
    from logistik.services.user_admin_service import UserAdminService

    if UserAdminService(db).approval_status(current_user) != "approved":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Akun menunggu persetujuan admin"
        )
    return current_user


class MenuAccessChecker:
    """Dependency for checking that the caller may open a navigation section"""

    def __init__(self, menu_key: str):
        self.menu_key = menu_key

    def __call__(self, user = Depends(get_approved_user), db: Session = Depends(get_db)):
        from logistik.services.user_admin_service import UserAdminService

        menu_keys = UserAdminService(db).menu_keys_for(user)
        if self.menu_key not in menu_keys:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Tidak memiliki akses menu: {self.menu_key}"
            )
        return user
