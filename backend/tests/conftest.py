"""Pytest fixtures for the API tests.

Every test gets a fresh in-memory SQLite database (shared through a
StaticPool so the app and the test see the same data) and a fake warranty
service mounted on ``httpx.MockTransport`` that records outbound requests.
"""

import itertools
import json
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.core.database import Base, get_db
from app.core.identity import get_identity_provider
from app.main import app
from app.models import auth_identity, category, department, user  # noqa: F401
from app.models.asset import Asset
from app.models.category import Category
from app.models.department import Department
from app.services.accounts import create_account_with_profile
from app.services.warranty_client import WarrantyServiceClient, get_warranty_client

WARRANTY_BASE_URL = "http://warranty.test"
CENTRE_USERNAME = "centre"
CENTRE_PASSWORD = "centre-pass-1"
DEFAULT_PASSWORD = "password123"


class FakeWarrantyService:
    """In-process stand-in for the external warranty service."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.devices: list[dict] = []
        self.fail_with: int | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return httpx.Response(self.fail_with, json={"error": "boom"})
        if request.method == "GET" and request.url.path == "/api/devices":
            return httpx.Response(200, json={"data": self.devices, "count": len(self.devices)})
        if request.method == "POST" and request.url.path == "/warranty/register":
            body = json.loads(request.content)
            return httpx.Response(201, json={"id": len(self.requests), **body})
        return httpx.Response(404, json={"error": "not found"})

    def json_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def count_rows(session_factory):
    """Count rows of a model through a fresh session."""

    def _count(model, *criteria) -> int:
        s = session_factory()
        try:
            return s.query(model).filter(*criteria).count()
        finally:
            s.close()

    return _count


@pytest.fixture
def warranty_service():
    return FakeWarrantyService()


@pytest.fixture
def test_settings():
    return Settings(
        warranty_service_url=WARRANTY_BASE_URL,
        warranty_centre_username=CENTRE_USERNAME,
        warranty_centre_password=CENTRE_PASSWORD,
    )


@pytest.fixture
def client(session_factory, warranty_service, test_settings):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def _get_warranty_client():
        return WarrantyServiceClient(
            WARRANTY_BASE_URL,
            transport=httpx.MockTransport(warranty_service.handler),
        )

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_warranty_client] = _get_warranty_client
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create an account + profile and return ``(user, auth headers)``."""
    identity = get_identity_provider()

    def _make(email: str, user_type: str = "user", name: str | None = None, department_id=None):
        u = create_account_with_profile(
            db,
            identity,
            name=name or email.split("@")[0].title(),
            email=email,
            password=DEFAULT_PASSWORD,
            user_type=user_type,
            department_id=department_id,
        )
        token = identity.sign_in(db, email, DEFAULT_PASSWORD).access_token
        profile = SimpleNamespace(id=u.id, email=u.email, name=u.name, user_type=u.user_type)
        return profile, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", "admin", name="Ada Admin")


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", "user", name="Alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", "user", name="Bob")


@pytest.fixture
def make_department(db):
    def _make(name: str) -> Department:
        d = Department(name=name)
        db.add(d)
        db.commit()
        db.refresh(d)
        return d

    return _make


@pytest.fixture
def make_category(db):
    def _make(name: str) -> Category:
        c = Category(name=name)
        db.add(c)
        db.commit()
        db.refresh(c)
        return c

    return _make


@pytest.fixture
def make_asset(db, make_category, make_department):
    seq = itertools.count(1)

    def _make(owner, name: str = "Laptop", category_obj=None, department_obj=None, cost="1200.00"):
        category_obj = category_obj or make_category(f"Category {next(seq)}")
        department_obj = department_obj or make_department(f"Department {next(seq)}")
        a = Asset(
            name=name,
            category_id=category_obj.id,
            department_id=department_obj.id,
            date_purchased=date(2025, 3, 1),
            cost=Decimal(cost),
            created_by=owner.id,
        )
        db.add(a)
        db.commit()
        db.refresh(a)
        return a

    return _make
