# tests/conftest.py
import os
import tempfile

# Settings are read at import time, so the environment goes first
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DOCUMENTS_DIR"] = tempfile.mkdtemp(prefix="portal-documents-")

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.core.limiter import limiter
from app.core.redis import get_redis_client
from app.db.session import Base, SessionLocal
from app.main import app
from app.models import client, product, lta, order, price_offer, notification, feedback, document  # noqa: F401
from app.models.client import Client
from app.models.lta import Lta, LtaClient, LtaProduct
from app.models.product import Product, Vendor
from app.services.auth import create_client_token

# In-memory SQLite shared by every session and thread
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
SessionLocal.configure(bind=engine)


class FakeRedis:
    """Dict-backed stand-in for the few redis.asyncio calls the app makes."""
    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed


class BrokenRedis:
    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *keys):
        raise RedisConnectionError("Connection refused")


@pytest.fixture(scope="function")
def db_session() -> Session:
    """A clean database for every test."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def broken_redis() -> BrokenRedis:
    return BrokenRedis()


@pytest_asyncio.fixture
async def client(db_session, fake_redis):
    """HTTP client bound to the app, with Redis swapped for the in-memory fake."""
    app.dependency_overrides[get_redis_client] = lambda: fake_redis
    limiter.reset()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _make_client(db: Session, username: str, is_admin: bool = False) -> Client:
    user = Client(
        username=username,
        name_en=username.title(),
        name_ar=f"عميل {username}",
        email=f"{username}@example.com",
        is_admin=is_admin,
        language="en",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> Client:
    return _make_client(db_session, "acme")


@pytest.fixture
def other_user(db_session) -> Client:
    return _make_client(db_session, "globex")


@pytest.fixture
def admin_user(db_session) -> Client:
    return _make_client(db_session, "admin", is_admin=True)


def auth_headers_for(user: Client) -> dict:
    return {"Authorization": f"Bearer {create_client_token(user.id)}"}


@pytest.fixture
def auth_headers(test_user) -> dict:
    return auth_headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    return auth_headers_for(other_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def catalog(db_session, test_user):
    """An active LTA assigned to test_user with two contract-priced products."""
    vendor = Vendor(vendor_number="V-001", name_en="Office Supply Co", name_ar="شركة اللوازم المكتبية")
    db_session.add(vendor)
    db_session.flush()

    paper = Product(
        sku="PAPER-A4", name_en="A4 Paper", name_ar="ورق A4", category="paper",
        unit="box", stock_quantity=100, vendor_id=vendor.id,
    )
    toner = Product(
        sku="TONER-BK", name_en="Black Toner", name_ar="حبر أسود", category="printing",
        unit="piece", stock_quantity=5, vendor_id=vendor.id,
    )
    lta = Lta(name_en="Office 2026", name_ar="مكتب 2026", status="active")
    db_session.add_all([paper, toner, lta])
    db_session.flush()

    db_session.add_all([
        LtaProduct(lta_id=lta.id, product_id=paper.id, contract_price=Decimal("25.50"), currency="SAR"),
        LtaProduct(lta_id=lta.id, product_id=toner.id, contract_price=Decimal("310.00"), currency="SAR"),
        LtaClient(lta_id=lta.id, client_id=test_user.id),
    ])
    db_session.commit()
    return {"vendor": vendor, "paper": paper, "toner": toner, "lta": lta}
