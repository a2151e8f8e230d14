"""Authentication endpoint tests."""

from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

import pickplay.main as main_module
from pickplay.api.v1.endpoints import auth as auth_endpoints
from pickplay.core.security import get_password_hash
from pickplay.db import session as db_session
from pickplay.db.base import Base
from pickplay.db.seed import ensure_seed_data
from pickplay.main import app
from pickplay.models import User
from pickplay.services.user_service import create_user


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _prepare_db(tmp_path: Path, monkeypatch) -> sessionmaker:
    engine = _build_test_engine(tmp_path / "test_auth.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(main_module, "SessionLocal", testing_session_local)

    with testing_session_local() as db:
        ensure_seed_data(db)
        create_user(db, "stock", get_password_hash("secret123"), "restocker", email="stock@pickplay.test")
    return testing_session_local


def _login(client: TestClient, login: str, password: str = "secret123"):
    return client.post("/api/v1/auth/login", json={"login": login, "password": password})


def test_login_returns_token_for_username_and_email(tmp_path: Path, monkeypatch) -> None:
    """Staff can sign in with either their username or their email."""
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        by_username = _login(client, "stock")
        by_email = _login(client, "stock@pickplay.test")

    for response in (by_username, by_email):
        assert response.status_code == 200
        payload = response.json()
        assert isinstance(payload.get("access_token"), str)
        assert payload.get("token_type") == "bearer"


def test_login_rejects_bad_credentials(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    with session_local() as db:
        user = db.query(User).filter(User.username == "stock").one()
        user.is_active = False
        db.commit()

    with TestClient(app) as client:
        wrong_password = _login(client, "stock", "nope")
        unknown = _login(client, "ghost")
        inactive = _login(client, "stock")

    assert wrong_password.status_code == 401
    assert unknown.status_code == 401
    assert inactive.status_code == 401


def test_login_storage_failure_is_reported_as_server_error(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    def _broken_lookup(db, login):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(auth_endpoints, "get_user_by_login", _broken_lookup)

    with TestClient(app) as client:
        response = _login(client, "stock")

    assert response.status_code == 500
    assert response.json()["detail"] == "Login failed"


def test_me_returns_current_user(tmp_path: Path, monkeypatch) -> None:
    """Authenticated me endpoint should return the logged-in user."""
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        token = _login(client, "stock").json()["access_token"]
        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        anonymous = client.get("/api/v1/auth/me")
        garbage = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert me.status_code == 200
    assert me.json() == {"id": me.json()["id"], "username": "stock", "email": "stock@pickplay.test", "role_name": "restocker"}
    assert anonymous.status_code in (401, 403)
    assert garbage.status_code == 401


def test_permission_check_reports_gate_decision(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        token = _login(client, "stock").json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}
        allowed = client.get("/api/v1/permissions/check", params={"entity": "product", "operation": "update"}, headers=headers)
        denied = client.get("/api/v1/permissions/check", params={"entity": "product", "operation": "delete"}, headers=headers)

    assert allowed.json()["allowed"] is True
    assert denied.json()["allowed"] is False
    assert denied.json()["reason"] == "insufficient_role_permission"
