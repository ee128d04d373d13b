"""
Pytest configuration and fixtures for Tagfolio tests.
"""

from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from tagfolio.api.dependencies import ServiceContainer
from tagfolio.api.main import create_app
from tagfolio.config import Settings
from tagfolio.identity import IdentityService
from tagfolio.search import QueryEngine
from tagfolio.storage import Database, RecordStore, UserRepository


# =============================================================================
# Test Settings
# =============================================================================

def get_test_settings() -> Settings:
    """Return settings configured for testing."""
    return Settings(
        database_url="sqlite:///:memory:",
        database_echo=False,
        jwt_secret="test-secret",
        # Lowest bcrypt cost keeps the suite fast
        bcrypt_rounds=4,
        environment="test",
        debug=True,
    )


@pytest.fixture
def test_settings() -> Settings:
    return get_test_settings()


# =============================================================================
# Clock
# =============================================================================

class FakeClock:
    """Manually advanced clock for timestamp assertions."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def database(clock):
    """Isolated in-memory database per test."""
    db = Database("sqlite:///:memory:", clock=clock)
    yield db
    db.dispose()


@pytest.fixture
def user_repository(database) -> UserRepository:
    return UserRepository(database)


@pytest.fixture
def record_store(database) -> RecordStore:
    return RecordStore(database)


@pytest.fixture
def query_engine(record_store) -> QueryEngine:
    return QueryEngine(record_store)


@pytest.fixture
def identity_service(user_repository, test_settings) -> IdentityService:
    return IdentityService(user_repository, settings=test_settings)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def app(test_settings):
    """Create FastAPI application for testing."""
    services = ServiceContainer(test_settings)
    application = create_app(settings=test_settings, services=services)

    yield application

    application.dependency_overrides.clear()
    services.close()


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register_user(client: AsyncClient, email: str, password: str = "secret1") -> dict:
    """Register through the API and return token, user and auth headers."""
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data


@pytest.fixture
def register():
    return register_user


@pytest_asyncio.fixture
async def alice(client) -> dict:
    return await register_user(client, "alice@test.com")


@pytest_asyncio.fixture
async def bob(client) -> dict:
    return await register_user(client, "bob@test.com")


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_record_data() -> dict:
    """Sample record payload for testing."""
    return {
        "title": "1967 Mustang Fastback",
        "description": "Highland Green, 390 V8, four-speed",
        "tags": ["classic", "ford"],
        "images": [
            "/uploads/1718000000-front.jpg",
            "/uploads/1718000001-rear.jpg",
        ],
    }


@pytest.fixture
def sample_records_batch() -> list[dict]:
    """Multiple sample records for search testing."""
    return [
        {
            "title": "Porsche 911 Carrera",
            "description": "Guards Red, air-cooled flat six",
            "tags": ["german", "sports", "red"],
        },
        {
            "title": "Land Rover Defender",
            "description": "Expedition build with roof tent",
            "tags": ["offroad", "british"],
        },
        {
            "title": "Mazda MX-5",
            "description": "Roadster, the red one from the track day",
            "tags": ["japanese", "sports"],
        },
    ]
