"""
Audit trail for sign-ins, user administration and recycle-bin operations
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, Dict
import json
import logging

from logistik.models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    # Sessions
    SIGNUP = "SIGNUP"
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"

    # Recycle bin
    RESTORE = "RESTORE"
    PERMANENT_DELETE = "PERMANENT_DELETE"
    EMPTY_RECYCLE_BIN = "EMPTY_RECYCLE_BIN"

    # User administration
    FIRST_ADMIN = "FIRST_ADMIN"
    ROLE_ASSIGNED = "ROLE_ASSIGNED"
    ROLE_REMOVED = "ROLE_REMOVED"
    MENU_ACCESS_CHANGED = "MENU_ACCESS_CHANGED"
    USER_APPROVED = "USER_APPROVED"
    USER_REJECTED = "USER_REJECTED"
    USER_DELETED = "USER_DELETED"
    PASSWORD_RESET = "PASSWORD_RESET"


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        action: str,
        resource_type: str,
        resource_id: Optional[int] = None,
        description: Optional[str] = None,
        details: Optional[Dict] = None,
        user=None,
        status: str = "success",
    ) -> Optional[AuditLog]:
        """
        Add an AuditLog row to the caller's transaction.

        ``user`` is the acting account (None for anonymous failures); its id and
        email are copied so the row survives the account being deleted. A
        database error is logged and swallowed so the audited operation
        still completes.
        """
        actor_email = getattr(user, "email", None)
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            description=description,
            details=json.dumps(details, default=str) if details else None,
            user_id=getattr(user, "id", None),
            email=actor_email,
            status=status,
        )
        try:
            self.db.add(entry)
            self.db.flush()
        except SQLAlchemyError:
            logger.exception("Could not record %s on %s %s", action, resource_type, resource_id)
            return None

        logger.info("%s %s/%s by %s (%s)", action, resource_type, resource_id, actor_email or "anonymous", status)
        return entry
