"""
Centralized Test Configuration.
"""

import pytest
import httpx
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from courier.app.main import app
from courier.app.db.session import get_db, Base
from courier.app.core.jwt import create_access_token
from courier.app.core.redis_client import get_redis
from courier.app.core.reliability import CircuitBreaker
from courier.app.models.enums import UserRole
from courier.app.models.user import User
from courier.app.services.payment_gateway import StripePaymentGateway, get_payment_gateway
import courier.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

ADMIN_EMAIL = "admin@courier.io"
USER_EMAIL = "alice@courier.io"


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


def stripe_handler(request: httpx.Request) -> httpx.Response:
    """Stand-in for the provider's payment_intents endpoint."""
    form = dict(httpx.QueryParams(request.content.decode()))
    amount = int(form["amount"])
    return httpx.Response(
        200,
        json={
            "id": f"pi_{amount}",
            "client_secret": f"pi_{amount}_secret_test",
            "amount": amount,
            "currency": form["currency"],
        },
    )


def auth_headers(email: str = USER_EMAIL, **claims) -> dict:
    """Bearer header for a token carrying ``email``."""
    token = create_access_token(data={"sub": f"uid-{email}", "email": email, **claims})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def redis_client():
    return MockRedis()


@pytest.fixture
def payment_gateway():
    return StripePaymentGateway(
        secret_key="sk_test_key",
        api_base="https://api.stripe.test",
        currency="usd",
        timeout=1.0,
        breaker=CircuitBreaker(failure_threshold=3, reset_timeout=30),
        transport=httpx.MockTransport(stripe_handler),
    )


@pytest.fixture(autouse=True)
def apply_overrides(redis_client, payment_gateway):
    """Point the app at the in-memory database, Redis and provider."""

    # Patch the global redis client used by the health check
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
async def admin_user(db_session):
    admin = User(email=ADMIN_EMAIL, role=UserRole.ADMIN)
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest.fixture
async def regular_user(db_session):
    user = User(email=USER_EMAIL, role=UserRole.USER)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(ADMIN_EMAIL)


@pytest.fixture
def user_headers(regular_user):
    return auth_headers(USER_EMAIL)


def parcel_payload(**overrides) -> dict:
    payload = {
        "name": "Birthday gift",
        "type": "non-document",
        "weight": 2.5,
        "cost": 150,
        "user_email": USER_EMAIL,
        "senderName": "Alice",
        "senderContact": "01700000000",
        "senderRegion": "Dhaka",
        "senderDistrict": "Dhaka",
        "senderAddress": "12 Lake Road",
        "receiverName": "Bob",
        "receiverContact": "01800000000",
        "receiverRegion": "Chattogram",
        "receiverDistrict": "Cox's Bazar",
        "receiverAddress": "4 Beach Lane",
    }
    payload.update(overrides)
    return payload


def rider_payload(**overrides) -> dict:
    payload = {
        "name": "Rahim",
        "email": "rahim@courier.io",
        "age": 27,
        "contact": "01900000000",
        "region": "Dhaka",
        "district": "Dhaka",
        "nationalId": "1990123456",
        "bikeBrand": "Honda",
        "bikeRegistration": "DHA-11-2233",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def active_rider(client, admin_headers):
    """A registered user whose rider application was approved."""
    email = "rahim@courier.io"
    await client.post("/users", json={"email": email})
    created = await client.post("/riders", json=rider_payload(email=email))
    rider_id = created.json()["insertedId"]
    response = await client.patch(
        f"/riders/{rider_id}",
        json={"status": "active", "email": email},
        headers=admin_headers,
    )
    assert response.status_code == 200
    return {"id": rider_id, "email": email, "headers": auth_headers(email)}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def parcel_data():
    return parcel_payload


@pytest.fixture
def rider_data():
    return rider_payload
