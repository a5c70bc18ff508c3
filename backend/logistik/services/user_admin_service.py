"""
User Administration Service - Roles, approval status and menu access

Admin checks always re-read the role table; nothing is cached between calls.
An admin is implicitly approved and sees every menu.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
import logging

from logistik.models import User, UserRole, UserMenuAccess, UserApproval
from logistik.services.audit_service import AuditService, AuditAction
from logistik.services.user_service import UserService

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
VALID_ROLES = ["admin", "moderator", "user"]

# Top-level navigation sections, in sidebar order
MENU_ITEMS = [
    {"key": "dashboard", "label": "Dashboard"},
    {"key": "master-data", "label": "Master Data"},
    {"key": "sales-crm", "label": "Sales & CRM"},
    {"key": "operasional", "label": "Operasional"},
    {"key": "keuangan", "label": "Keuangan"},
    {"key": "laporan", "label": "Laporan"},
]
MENU_KEYS = [item["key"] for item in MENU_ITEMS]

APPROVAL_STATUSES = ("pending", "approved", "rejected")


def _actor_name(actor: Optional[User]) -> str:
    return f"Admin {actor.email}" if actor is not None else "System"


class UserAdminService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== READS ====================

    def roles_of(self, user_id: int) -> List[str]:
        rows = self.db.query(UserRole.role).filter(UserRole.user_id == user_id).order_by(UserRole.role).all()
        return [row[0] for row in rows]

    def is_admin(self, user_id: int) -> bool:
        return self.db.query(UserRole).filter(
            UserRole.user_id == user_id,
            UserRole.role == ADMIN_ROLE
        ).first() is not None

    def stored_menu_keys(self, user_id: int) -> List[str]:
        rows = self.db.query(UserMenuAccess.menu_key).filter(UserMenuAccess.user_id == user_id).all()
        stored = {row[0] for row in rows}
        return [key for key in MENU_KEYS if key in stored]

    def stored_approval_status(self, user_id: int) -> str:
        approval = self.db.query(UserApproval).filter(UserApproval.user_id == user_id).first()
        return approval.status if approval else "pending"

    def approval_status(self, user: User) -> str:
        """Effective status: admins are always approved"""
        if self.is_admin(user.id):
            return "approved"
        return self.stored_approval_status(user.id)

    def menu_keys_for(self, user: User) -> List[str]:
        """Effective menu keys: admins get the full set"""
        if self.is_admin(user.id):
            return list(MENU_KEYS)
        return self.stored_menu_keys(user.id)

    def my_roles(self, user: User) -> Dict[str, Any]:
        is_admin = self.is_admin(user.id)
        return {
            "user_id": user.id,
            "email": user.email,
            "roles": self.roles_of(user.id),
            "isAdmin": is_admin,
            "menu_access": self.stored_menu_keys(user.id),
            "approval_status": self.stored_approval_status(user.id),
            "effective_menu_access": self.menu_keys_for(user),
            "effective_approval_status": "approved" if is_admin else self.stored_approval_status(user.id),
        }

    def list_users(self) -> List[Dict[str, Any]]:
        users = self.db.query(User).order_by(User.created_at, User.id).all()
        return [
            {
                "id": u.id,
                "email": u.email,
                "full_name": u.full_name,
                "created_at": u.created_at.isoformat() if u.created_at else None,
                "last_sign_in_at": u.last_sign_in_at.isoformat() if u.last_sign_in_at else None,
                "roles": self.roles_of(u.id),
                "menu_access": self.stored_menu_keys(u.id),
                "approval_status": self.stored_approval_status(u.id),
            }
            for u in users
        ]

    # ==================== MUTATIONS ====================

    def _require_user(self, user_id) -> User:
        user = UserService(self.db).get_by_id(user_id)
        if user is None:
            raise ValueError("User not found")
        return user

    def assign_role(self, user_id: int, role: str, actor: Optional[User] = None):
        """Idempotent upsert on (user_id, role); admin also grants every menu"""
        if role not in VALID_ROLES:
            raise ValueError("Invalid role")
        self._require_user(user_id)

        existing = self.db.query(UserRole).filter(
            UserRole.user_id == user_id, UserRole.role == role
        ).first()
        if existing is None:
            self.db.add(UserRole(user_id=user_id, role=role))
            self.db.flush()

        if role == ADMIN_ROLE:
            self._grant_all_menus(user_id)

        AuditService(self.db).log(AuditAction.ROLE_ASSIGNED, "users", user_id,
                                  details={"role": role}, user=actor)
        logger.info(f"{_actor_name(actor)} assigned role '{role}' to user {user_id}")

    def remove_role(self, user_id: int, role: str, actor: Optional[User] = None):
        self.db.query(UserRole).filter(
            UserRole.user_id == user_id, UserRole.role == role
        ).delete(synchronize_session=False)
        self.db.flush()
        AuditService(self.db).log(AuditAction.ROLE_REMOVED, "users", user_id,
                                  details={"role": role}, user=actor)
        logger.info(f"{_actor_name(actor)} removed role '{role}' from user {user_id}")

    def setup_first_admin(self, user: User):
        """
        Make the caller the first admin.

        The check and the insert are not atomic: two callers on an admin-less
        system can both succeed.
        """
        if self.db.query(UserRole).filter(UserRole.role == ADMIN_ROLE).first() is not None:
            raise ValueError("Admin sudah ada. Gunakan assign-role untuk menambah admin baru.")

        self.db.add(UserRole(user_id=user.id, role=ADMIN_ROLE))
        self.db.flush()
        self._grant_all_menus(user.id)
        AuditService(self.db).log(AuditAction.FIRST_ADMIN, "users", user.id, user=user)
        logger.info(f"First admin setup: {user.email} ({user.id})")

    def update_menu_access(self, user_id: int, menu_keys: List[str], actor: Optional[User] = None) -> List[str]:
        """Replace the user's menu keys; unknown keys are dropped"""
        self._require_user(user_id)
        requested = {key for key in menu_keys if isinstance(key, str)}
        filtered = [key for key in MENU_KEYS if key in requested]

        self.db.query(UserMenuAccess).filter(
            UserMenuAccess.user_id == user_id
        ).delete(synchronize_session=False)
        for key in filtered:
            self.db.add(UserMenuAccess(user_id=user_id, menu_key=key))
        self.db.flush()

        AuditService(self.db).log(AuditAction.MENU_ACCESS_CHANGED, "users", user_id,
                                  details={"menu_keys": filtered}, user=actor)
        logger.info(f"{_actor_name(actor)} updated menu access for user {user_id}: [{', '.join(filtered)}]")
        return filtered

    def set_approval(self, user_id: int, status: str, reviewer: User):
        """Upsert the approval row; re-approving a rejected user is allowed"""
        if status not in APPROVAL_STATUSES:
            raise ValueError("Invalid status")
        self._require_user(user_id)

        approval = self.db.query(UserApproval).filter(UserApproval.user_id == user_id).first()
        if approval is None:
            approval = UserApproval(user_id=user_id)
            self.db.add(approval)
        approval.status = status
        approval.reviewed_by = reviewer.id
        approval.reviewed_at = datetime.utcnow()
        self.db.flush()

        action = AuditAction.USER_APPROVED if status == "approved" else AuditAction.USER_REJECTED
        AuditService(self.db).log(action, "users", user_id, user=reviewer)
        logger.info(f"Admin {reviewer.email} set user {user_id} to {status}")

    def delete_user(self, user_id: int, actor: User):
        if user_id == actor.id:
            raise ValueError("Tidak dapat menghapus akun sendiri")
        user = self._require_user(user_id)

        for model in (UserMenuAccess, UserRole, UserApproval):
            self.db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
        self.db.flush()
        self.db.expire(user)
        email = user.email
        UserService(self.db).remove(user)

        AuditService(self.db).log(AuditAction.USER_DELETED, "users", user_id,
                                  description=email, user=actor)
        logger.info(f"Admin {actor.email} deleted user {user_id}")

    def reset_password(self, user_id: int, new_password: str, actor: User):
        if len(new_password) < 6:
            raise ValueError("Password minimal 6 karakter")
        user = self._require_user(user_id)
        UserService(self.db).set_password(user, new_password)
        AuditService(self.db).log(AuditAction.PASSWORD_RESET, "users", user_id, user=actor)
        logger.info(f"Admin {actor.email} reset password for user {user_id}")

    def _grant_all_menus(self, user_id: int):
        existing = set(self.stored_menu_keys(user_id))
        for key in MENU_KEYS:
            if key not in existing:
                self.db.add(UserMenuAccess(user_id=user_id, menu_key=key))
        self.db.flush()
