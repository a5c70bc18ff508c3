"""
Accounts: sign-up, sign-in and password storage
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from logistik.models import User, UserApproval
from logistik.core.security import get_password_hash, verify_password


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()

    def create(self, email: str, password: str, full_name: Optional[str] = None) -> User:
        """Register an account together with its pending approval row"""
        if self.get_by_email(email) is not None:
            raise ValueError("Email sudah terdaftar")

        user = User(email=normalize_email(email), hashed_password=get_password_hash(password),
                    full_name=full_name, is_active=True)
        self.db.add(user)
        self.db.flush()
        self.db.add(UserApproval(user_id=user.id, status="pending"))
        self.db.flush()
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """The active account matching the credentials, stamped with the sign-in time"""
        user = self.get_by_email(email)
        if user is None or not user.is_active or not verify_password(password, user.hashed_password):
            return None
        user.last_sign_in_at = datetime.utcnow()
        self.db.flush()
        return user

    def set_password(self, user: User, new_password: str):
        user.hashed_password = get_password_hash(new_password)
        self.db.flush()

    def remove(self, user: User):
        self.db.delete(user)
        self.db.flush()
