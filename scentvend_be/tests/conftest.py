"""Pytest configuration: every test gets a fresh in-memory database."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scentvend.main import app
from scentvend.models.base import Base, get_db
import scentvend.models.product  # noqa: F401
import scentvend.models.order  # noqa: F401
import scentvend.models.slot  # noqa: F401
import scentvend.models.admin_session  # noqa: F401
import scentvend.models.sales  # noqa: F401
from scentvend.services import inventory
from scentvend.utils.payments import PaymentGateway, get_gateway


# One shared in-memory connection so the app's sessions see the test's data
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function", autouse=True)
def setup_database():
    """Create a fresh schema for each test so state never bleeds between tests."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return PaymentGateway()


@pytest.fixture
def client(gateway):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    resp = client.post("/api/admin/login", json={"username": "admin", "password": "admin"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def make_product(db):
    """Factory for products; stock and price fields use column names."""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        data = {"name": f"Scent {counter['n']}", "price": 500}
        data.update(fields)
        return inventory.create_product(db, data)

    return _make


class FakeRazorpayClient:
    """Stands in for ``razorpay.Client``; records every order it is asked to create."""

    def __init__(self, auth=None):
        self.auth = auth
        self.orders = []
        self.order = self

    def create(self, data=None, **kwargs):
        self.orders.append(data)
        return {"id": f"order_live{len(self.orders):04d}", "status": "created", **data}


@pytest.fixture
def razorpay_client(monkeypatch):
    """Patch the SDK client so live-mode gateways never leave the process."""
    client = FakeRazorpayClient()

    def _factory(auth=None):
        client.auth = auth
        return client

    monkeypatch.setattr("scentvend.utils.payments.razorpay.Client", _factory)
    return client
