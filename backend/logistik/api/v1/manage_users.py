"""
User Management Endpoint

Single action-dispatched endpoint: ``GET|POST /manage-users?action=<name>``.
Every response is ``{"error": ...}`` on failure so the settings screen can show
the message directly.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session
import logging

from logistik.core.config import settings
from logistik.core.database import get_db
from logistik.core.security import resolve_user_from_token
from logistik.services.user_admin_service import UserAdminService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["User Management"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

OPEN_ACTIONS = ("my-roles", "setup-first-admin")
ADMIN_ACTIONS = (
    "list-users", "assign-role", "remove-role", "approve-user", "reject-user",
    "update-menu-access", "delete-user", "reset-password",
)


class ActionError(Exception):
    """Precondition failure reported as {"error": message}"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _json(content: Dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def _user_id(body: Dict[str, Any], message: str) -> int:
    value = body.get("user_id")
    if value in (None, ""):
        raise ActionError(message)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ActionError("Invalid user_id")


def _bearer_token(request: Request):
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return None


@router.options("/manage-users")
async def manage_users_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.api_route("/manage-users", methods=["GET", "POST"])
async def manage_users(request: Request, action: str = "", db: Session = Depends(get_db)):
    if settings.API_KEY and request.headers.get("apikey") != settings.API_KEY:
        return _json({"error": "Unauthorized"}, 401)

    caller = resolve_user_from_token(_bearer_token(request), db)
    if caller is None:
        return _json({"error": "Unauthorized"}, 401)

    if action not in OPEN_ACTIONS and action not in ADMIN_ACTIONS:
        return _json({"error": "Unknown action"}, 400)

    body: Dict[str, Any] = {}
    if request.method == "POST":
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        body = payload if isinstance(payload, dict) else {}

    admin = UserAdminService(db)
    try:
        if action in ADMIN_ACTIONS and not admin.is_admin(caller.id):
            return _json({"error": "Forbidden: admin only"}, 403)

        result = _dispatch(admin, action, body, caller)
        db.commit()
        return _json(result)

    except ActionError as e:
        db.rollback()
        return _json({"error": e.message}, e.status_code)
    except ValueError as e:
        db.rollback()
        return _json({"error": str(e)}, 400)
    except Exception as e:
        db.rollback()
        logger.error(f"manage-users action '{action}' failed: {e}", exc_info=True)
        return _json({"error": "Internal server error"}, 500)


def _dispatch(admin: UserAdminService, action: str, body: Dict[str, Any], caller) -> Dict[str, Any]:
    if action == "my-roles":
        return admin.my_roles(caller)

    if action == "setup-first-admin":
        admin.setup_first_admin(caller)
        return {"success": True, "message": "Anda sekarang adalah admin"}

    if action == "list-users":
        return {"users": admin.list_users()}

    if action in ("assign-role", "remove-role"):
        role = body.get("role")
        if body.get("user_id") in (None, "") or not role:
            raise ActionError("user_id and role required")
        user_id = _user_id(body, "user_id and role required")
        if action == "assign-role":
            admin.assign_role(user_id, role, actor=caller)
        else:
            admin.remove_role(user_id, role, actor=caller)
        return {"success": True}

    if action in ("approve-user", "reject-user"):
        user_id = _user_id(body, "user_id required")
        new_status = "approved" if action == "approve-user" else "rejected"
        admin.set_approval(user_id, new_status, reviewer=caller)
        return {"success": True}

    if action == "update-menu-access":
        menu_keys = body.get("menu_keys")
        if body.get("user_id") in (None, "") or not isinstance(menu_keys, list) \
                or not all(isinstance(key, str) for key in menu_keys):
            raise ActionError("user_id and menu_keys[] required")
        user_id = _user_id(body, "user_id and menu_keys[] required")
        saved = admin.update_menu_access(user_id, menu_keys, actor=caller)
        return {"success": True, "menu_keys": saved}

    if action == "delete-user":
        admin.delete_user(_user_id(body, "user_id required"), actor=caller)
        return {"success": True}

    # reset-password
    new_password = body.get("new_password")
    if body.get("user_id") in (None, "") or not new_password:
        raise ActionError("user_id and new_password required")
    admin.reset_password(_user_id(body, "user_id and new_password required"), new_password, actor=caller)
    return {"success": True}
