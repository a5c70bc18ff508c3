import pytest

from logistik.models import UserRole, UserMenuAccess, UserApproval, User
from logistik.services.user_admin_service import MENU_KEYS

from conftest import make_user, auth_headers


def call(client, action, headers, body=None):
    if body is None:
        return client.get("/manage-users", params={"action": action}, headers=headers)
    return client.post("/manage-users", params={"action": action}, json=body, headers=headers)


def test_missing_token_is_unauthorized(client):
    response = call(client, "my-roles", {})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_unknown_action(client, staff_headers):
    response = call(client, "drop-tables", staff_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Unknown action"}


def test_preflight(client):
    response = client.options("/manage-users")
    assert response.status_code == 200
    assert "apikey" in response.headers["access-control-allow-headers"]


def test_my_roles_for_a_new_user(client, db):
    user = make_user(db, "baru@mkl.co.id", approved=False)
    body = call(client, "my-roles", auth_headers(user)).json()
    assert body["roles"] == []
    assert body["isAdmin"] is False
    assert body["approval_status"] == "pending"
    assert body["effective_menu_access"] == []


ADMIN_ONLY = ("list-users", "assign-role", "remove-role", "approve-user", "reject-user",
              "update-menu-access", "delete-user", "reset-password")


@pytest.mark.parametrize("action", ADMIN_ONLY)
@pytest.mark.parametrize("body", [None, {}, {"user_id": "bukan-angka", "role": "admin", "menu_keys": [[1]]}, b"\xff\xfe"])
def test_non_admin_is_forbidden_whatever_the_body(client, staff_headers, action, body):
    if isinstance(body, bytes):
        response = client.post("/manage-users", params={"action": action}, content=body,
                               headers={**staff_headers, "Content-Type": "application/json"})
    else:
        response = call(client, action, staff_headers, body=body)
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: admin only"}


def test_first_admin_setup_only_once(client, db):
    first = make_user(db, "pertama@mkl.co.id", approved=False)
    second = make_user(db, "kedua@mkl.co.id", approved=False)

    response = call(client, "setup-first-admin", auth_headers(first), body={})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Anda sekarang adalah admin"}

    roles = call(client, "my-roles", auth_headers(first)).json()
    assert roles["isAdmin"] is True
    assert roles["effective_approval_status"] == "approved"
    assert roles["menu_access"] == MENU_KEYS

    again = call(client, "setup-first-admin", auth_headers(second), body={})
    assert again.status_code == 400
    assert "Admin sudah ada" in again.json()["error"]


def test_list_users(client, admin_headers, staff_user):
    body = call(client, "list-users", admin_headers).json()
    emails = [u["email"] for u in body["users"]]
    assert emails == ["admin@mkl.co.id", "staff@mkl.co.id"]
    staff = body["users"][1]
    assert staff["approval_status"] == "approved"
    assert staff["roles"] == []


def test_assign_role_is_idempotent_and_admin_grants_menus(client, admin_headers, db):
    user = make_user(db, "calon@mkl.co.id", menus=[])
    for _ in range(2):
        response = call(client, "assign-role", admin_headers, body={"user_id": user.id, "role": "admin"})
        assert response.json() == {"success": True}

    db.expire_all()
    assert db.query(UserRole).filter(UserRole.user_id == user.id).count() == 1
    keys = {row.menu_key for row in db.query(UserMenuAccess).filter(UserMenuAccess.user_id == user.id)}
    assert keys == set(MENU_KEYS)

    removed = call(client, "remove-role", admin_headers, body={"user_id": user.id, "role": "admin"})
    assert removed.json() == {"success": True}
    db.expire_all()
    assert db.query(UserRole).filter(UserRole.user_id == user.id).count() == 0


def test_assign_role_validation(client, admin_headers):
    missing = call(client, "assign-role", admin_headers, body={"role": "admin"})
    assert missing.status_code == 400
    assert missing.json() == {"error": "user_id and role required"}

    invalid = call(client, "assign-role", admin_headers, body={"user_id": "abc", "role": "admin"})
    assert invalid.json() == {"error": "Invalid user_id"}

    bad_role = call(client, "assign-role", admin_headers, body={"user_id": 1, "role": "owner"})
    assert bad_role.status_code == 400


def test_approve_and_reject(client, admin_headers, db):
    user = make_user(db, "tunggu@mkl.co.id", approved=False)
    user_id = user.id

    assert call(client, "reject-user", admin_headers, body={"user_id": user_id}).status_code == 200
    db.expire_all()
    assert db.query(UserApproval).filter(UserApproval.user_id == user_id).one().status == "rejected"

    assert call(client, "approve-user", admin_headers, body={"user_id": user_id}).status_code == 200
    db.expire_all()
    approval = db.query(UserApproval).filter(UserApproval.user_id == user_id).one()
    assert approval.status == "approved"
    assert approval.reviewed_by is not None


def test_update_menu_access_drops_unknown_keys(client, admin_headers, staff_user):
    response = call(client, "update-menu-access", admin_headers,
                    body={"user_id": staff_user.id, "menu_keys": ["laporan", "dashboard", "rahasia"]})
    assert response.json() == {"success": True, "menu_keys": ["dashboard", "laporan"]}

    not_a_list = call(client, "update-menu-access", admin_headers,
                      body={"user_id": staff_user.id, "menu_keys": "dashboard"})
    assert not_a_list.json() == {"error": "user_id and menu_keys[] required"}

    nested = call(client, "update-menu-access", admin_headers,
                  body={"user_id": staff_user.id, "menu_keys": [["dashboard"], "laporan"]})
    assert nested.status_code == 400
    assert nested.json() == {"error": "user_id and menu_keys[] required"}


def test_menu_access_is_enforced_on_data_routes(client, db):
    user = make_user(db, "terbatas@mkl.co.id", menus=["dashboard"])
    headers = auth_headers(user)
    assert client.get("/api/v1/dashboard/stats", headers=headers).status_code == 200
    assert client.get("/api/v1/customers", headers=headers).status_code == 403


def test_delete_user(client, admin_headers, admin_user, db):
    user = make_user(db, "keluar@mkl.co.id")
    user_id = user.id

    own = call(client, "delete-user", admin_headers, body={"user_id": admin_user.id})
    assert own.status_code == 400

    response = call(client, "delete-user", admin_headers, body={"user_id": user_id})
    assert response.json() == {"success": True}
    db.expire_all()
    assert db.query(User).filter(User.id == user_id).first() is None
    assert db.query(UserApproval).filter(UserApproval.user_id == user_id).count() == 0


def test_reset_password(client, admin_headers, db):
    user = make_user(db, "lupa@mkl.co.id")

    short = call(client, "reset-password", admin_headers, body={"user_id": user.id, "new_password": "123"})
    assert short.json() == {"error": "Password minimal 6 karakter"}

    response = call(client, "reset-password", admin_headers,
                    body={"user_id": user.id, "new_password": "rahasia-baru"})
    assert response.json() == {"success": True}

    login = client.post("/api/v1/auth/login", json={"email": "lupa@mkl.co.id", "password": "rahasia-baru"})
    assert login.status_code == 200


def test_menu_update_ignores_non_string_keys(db, staff_user):
    from logistik.services.user_admin_service import UserAdminService

    saved = UserAdminService(db).update_menu_access(staff_user.id, [["laporan"], {"k": 1}, "dashboard"])
    assert saved == ["dashboard"]
