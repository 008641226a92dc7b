from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SESSION_SECRET"] = "test-session-secret-0123456789abcdef"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["SWEEPER_ENABLED"] = "false"
os.environ["CRON_SECRET"] = "test-cron-secret"

from collections.abc import Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

import aqui.models  # noqa: E402,F401
from aqui.core.deps import get_db  # noqa: E402
from aqui.db.base import Base  # noqa: E402
from aqui.db.session import SessionLocal, engine  # noqa: E402
from aqui.main import app  # noqa: E402
from aqui.models.user import User, UserRole  # noqa: E402
from aqui.models.vendor import Vendor  # noqa: E402
from aqui.services.auth_service import hash_password  # noqa: E402

PASSWORD = "correct-horse-battery"


@pytest.fixture()
def db() -> Iterator[Session]:
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture()
def client(db: Session) -> Iterator[TestClient]:
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db: Session):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.CUSTOMER, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@aqui-test.mx",
            full_name=f"User {counter['n']}",
            password=hash_password(PASSWORD),
            role=role,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def make_vendor(db: Session, make_user):
    def _make(status: str = "approved", business_name: str = "Tacos El Guero") -> Vendor:
        user = make_user(UserRole.VENDOR)
        vendor = Vendor(
            user_id=user.id,
            business_name=business_name,
            description="Street tacos",
            subcategory="mexican",
            status=status,
        )
        db.add(vendor)
        db.commit()
        return vendor

    return _make


def _login(client: TestClient, email: str, password: str = PASSWORD) -> None:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text


@pytest.fixture()
def vendor_client(client: TestClient, make_vendor):
    def _make(status: str = "approved") -> Vendor:
        vendor = make_vendor(status=status)
        _login(client, vendor.user.email)
        return vendor

    return _make


@pytest.fixture()
def admin_client(client: TestClient, make_user) -> TestClient:
    admin = make_user(UserRole.ADMIN, email="admin@aqui-test.mx")
    _login(client, admin.email)
    return client


@pytest.fixture()
def login(client: TestClient):
    def _do(email: str, password: str = PASSWORD) -> None:
        _login(client, email, password)

    return _do
