"""
Shared fixtures: an in-memory database per test, an API client bound to it,
user factories and a Flask client for the frontend.
"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "False"
os.environ["API_KEY"] = ""
os.environ["SECRET_KEY"] = "test-secret-key-for-the-logistik-test-suite"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from logistik.core.cache import query_cache
from logistik.core.database import Base, get_db, init_db
from logistik.core.security import create_access_token
from logistik.main import app
from logistik.services.user_admin_service import UserAdminService, MENU_KEYS
from logistik.services.user_service import UserService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def clear_query_cache():
    query_cache.clear()
    yield
    query_cache.clear()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email, password="secret123", full_name=None, approved=True, admin=False, menus=None):
    """Create a user directly through the services and commit"""
    user = UserService(db).create(email, password, full_name)
    admin_service = UserAdminService(db)
    if admin:
        admin_service.assign_role(user.id, "admin")
    elif approved:
        admin_service.set_approval(user.id, "approved", reviewer=user)
    if menus is not None:
        admin_service.update_menu_access(user.id, menus)
    db.commit()
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@mkl.co.id", full_name="Admin", admin=True)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def staff_user(db):
    """Approved non-admin with every menu"""
    return make_user(db, "staff@mkl.co.id", full_name="Staff", menus=list(MENU_KEYS))


@pytest.fixture
def staff_headers(staff_user):
    return auth_headers(staff_user)


# ==================== FRONTEND ====================

@pytest.fixture
def web_app():
    from logistik_web import app as flask_app
    flask_app.config.update(TESTING=True, WTF_CSRF_ENABLED=False)
    return flask_app


@pytest.fixture
def web_client(web_app):
    return web_app.test_client()


def web_user(admin=False, approval="approved", menus=None):
    """Session payload shaped like GET /auth/me"""
    menus = list(MENU_KEYS) if menus is None else menus
    return {
        "user_id": 1,
        "email": "user@mkl.co.id",
        "full_name": "User",
        "roles": ["admin"] if admin else [],
        "isAdmin": admin,
        "menu_access": menus,
        "approval_status": approval,
        "effective_menu_access": list(MENU_KEYS) if admin else menus,
        "effective_approval_status": "approved" if admin else approval,
    }


@pytest.fixture
def login_as(web_client):
    """Put a token and cached user into the Flask session"""
    def _login(user):
        with web_client.session_transaction() as sess:
            sess["access_token"] = "test-token"
            sess["user_data"] = user
        return web_client
    return _login
