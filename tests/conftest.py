import os

# Settings are read at import time, configure the environment first
os.environ.setdefault("CURRENT_ENVIRONMENT", "local")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-authcore-unit-tests")
os.environ.setdefault("LOG_TO_FILE", "false")

from unittest.mock import AsyncMock, Mock  # noqa: E402

import pytest  # noqa: E402
from faker import Faker  # noqa: E402
from redis.asyncio import ConnectionPool, Redis  # noqa: E402

from authcore.api.session import SessionBoundary  # noqa: E402
from authcore.schemas import Identity, Role  # noqa: E402
from authcore.services.store import InMemoryRevocationStore  # noqa: E402
from authcore.services.token_service import TokenService  # noqa: E402
from tests.utils import FrozenClock  # noqa: E402

TEST_SECRET = "unit-test-signing-secret"
ACCESS_TTL = 15
REFRESH_TTL = 600


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def faker() -> Faker:
    """Create a Faker instance for generating test data."""
    return Faker()


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at scenario time t=0."""
    return FrozenClock()


@pytest.fixture
def identity(faker: Faker) -> Identity:
    """Create a verified user identity."""
    return Identity(
        user_id=faker.uuid4(),
        email=faker.free_email(),
        display_name=faker.name(),
        role=Role.USER,
    )


@pytest.fixture
def admin_identity(faker: Faker) -> Identity:
    """Create a verified admin identity."""
    return Identity(
        user_id=faker.uuid4(),
        email=faker.free_email(),
        display_name=faker.name(),
        role=Role.ADMIN,
    )


@pytest.fixture
def memory_store(clock: FrozenClock) -> InMemoryRevocationStore:
    """In-memory store sharing the frozen clock."""
    return InMemoryRevocationStore(clock=clock)


@pytest.fixture
def token_service(memory_store: InMemoryRevocationStore, clock: FrozenClock) -> TokenService:
    """Token service with 15s access and 600s refresh lifetimes."""
    return TokenService(
        memory_store,
        secret_key=TEST_SECRET,
        algorithm="HS256",
        access_ttl_seconds=ACCESS_TTL,
        refresh_ttl_seconds=REFRESH_TTL,
        clock=clock,
    )


@pytest.fixture
def session_boundary(token_service: TokenService) -> SessionBoundary:
    return SessionBoundary(token_service)


# ==================== Redis Fixtures ====================


@pytest.fixture
def mock_redis_client() -> Mock:
    """Create a mock Redis client."""
    mock_redis = Mock(spec=Redis)
    mock_redis.ping = AsyncMock(return_value=True)
    mock_redis.get = AsyncMock(return_value=None)
    mock_redis.setex = AsyncMock(return_value=True)
    mock_redis.delete = AsyncMock(return_value=1)
    mock_redis.exists = AsyncMock(return_value=0)
    mock_redis.eval = AsyncMock(return_value=1)
    mock_redis.aclose = AsyncMock()
    return mock_redis


@pytest.fixture
def mock_redis_pool() -> Mock:
    """Create a mock Redis ConnectionPool."""
    mock_pool = Mock(spec=ConnectionPool)
    mock_pool.connection_kwargs = {"protocol": "2"}
    return mock_pool
