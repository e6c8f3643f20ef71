"""
EventQR - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Awaitable, Callable
import pytest
from httpx import AsyncClient, ASGITransport, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from faker import Faker

# Set testing environment before anything reads settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_eventqr.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['SESSION_CLEANUP_INTERVAL_SECONDS'] = '0'
os.environ['LOG_LEVEL'] = 'WARNING'

from eventqr.main import app
from eventqr.core.config import settings
from eventqr.core.database import Base, build_engine, get_db
from eventqr.core.security import get_password_hash
from eventqr.models.user import User, UserRole
from eventqr.services.storage_service import storage_service

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_eventqr.db'
test_engine = build_engine(TEST_DATABASE_URL, production=False)
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

TEST_PASSWORD = 'testpassword123'
ADMIN_PASSWORD = 'adminpassword123'

# Hashing is deliberately slow; one credential per password is enough for tests
_credentials = {}


def credential_for(password: str) -> str:
    if password not in _credentials:
        _credentials[password] = get_password_hash(password)
    return _credentials[password]


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test and a session for direct setup/inspection"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def reset_export_counter():
    storage_service.export_counter.reset()
    yield
    storage_service.export_counter.reset()


@pytest.fixture
def override_db(db_session: AsyncSession):
    """Each request gets its own session, as in production"""
    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.pop(get_db, None)


def _make_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url='http://test')


@pytest.fixture
async def client(override_db) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous test client"""
    async with _make_client() as ac:
        yield ac


async def _create_user(
    db_session: AsyncSession,
    password: str,
    role: UserRole = UserRole.USER,
    banned: bool = False,
) -> User:
    return await storage_service.create_user(
        db_session,
        username=fake.unique.user_name(),
        email=fake.unique.email(),
        password_hash=credential_for(password),
        role=role,
        banned=banned,
    )


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a regular test user"""
    return await _create_user(db_session, TEST_PASSWORD)


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second regular user"""
    return await _create_user(db_session, TEST_PASSWORD)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await _create_user(db_session, ADMIN_PASSWORD, role=UserRole.ADMIN)


@pytest.fixture
async def banned_user(db_session: AsyncSession) -> User:
    """A regular user who is already banned"""
    return await _create_user(db_session, TEST_PASSWORD, banned=True)


@pytest.fixture
def login() -> Callable[[AsyncClient, str, str], Awaitable[Response]]:
    """Log a client in; the session cookie lands in the client's jar"""
    async def _login(ac: AsyncClient, username: str, password: str) -> Response:
        return await ac.post('/api/login', json={'username': username, 'password': password})
    return _login


@pytest.fixture
async def auth_client(override_db, test_user: User, login) -> AsyncGenerator[AsyncClient, None]:
    """Client logged in as test_user"""
    async with _make_client() as ac:
        response = await login(ac, test_user.username, TEST_PASSWORD)
        assert response.status_code == 200
        yield ac


@pytest.fixture
async def other_client(override_db, other_user: User, login) -> AsyncGenerator[AsyncClient, None]:
    """Client logged in as other_user"""
    async with _make_client() as ac:
        response = await login(ac, other_user.username, TEST_PASSWORD)
        assert response.status_code == 200
        yield ac


@pytest.fixture
async def admin_client(override_db, admin_user: User, login) -> AsyncGenerator[AsyncClient, None]:
    """Client logged in as admin_user"""
    async with _make_client() as ac:
        response = await login(ac, admin_user.username, ADMIN_PASSWORD)
        assert response.status_code == 200
        yield ac


@pytest.fixture
def session_cookie_name() -> str:
    return settings.SESSION_COOKIE_NAME


@pytest.fixture
def test_user_data() -> dict:
    """Registration body for a new account"""
    return {
        'username': fake.unique.user_name(),
        'email': fake.unique.email(),
        'password': 'secret1',
    }
