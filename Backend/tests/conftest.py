import os

# Settings are read when the app module is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("COOKIE_SECURE", "false")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.pool import StaticPool
from parity.core.database import Base, get_db
from parity.core.tokens import TokenSettings
from parity.main import app
from parity.api.v1.auth import limiter as auth_limiter

# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PASSWORD = "StrongPass1"


# Fresh schema per test; StaticPool keeps every connection on the same in-memory database
@pytest.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()

# Fixture to provide a database session for each test, with transaction rollback for isolation
@pytest.fixture(scope="function")
async def db_session(db_engine):
    connection = await db_engine.connect()
    # Start a transaction for test isolation
    transaction = await connection.begin()
    
    # Create a new session bound to the connection
    session = AsyncSession(bind=connection, expire_on_commit=False)
    
    yield session
    
    # Rollback transaction and close session after test
    await session.close()
    await transaction.rollback()
    await connection.close()


@pytest.fixture(scope="function")
def setup_app_dependencies(db_session):

    # Override get_db dependency so that it uses the test database session
    async def override_get_db():
        yield db_session
    app.dependency_overrides[get_db] = override_get_db
    
    # Store original limiter states to restore after test
    app_limiter = getattr(app.state, "limiter", None) # A reference to the app-level limiter if it exists
    original_app_limiter_state = app_limiter.enabled if app_limiter else None
    original_auth_limiter = auth_limiter.enabled
    
    # Disable rate limiting for tests to avoid interference
    if original_app_limiter_state:
        app.state.limiter.enabled = False
    auth_limiter.enabled = False
    
    yield 
    
    # Cleanup after test
    app.dependency_overrides.clear()
    if original_app_limiter_state is not None:
        app.state.limiter.enabled = original_app_limiter_state
    auth_limiter.enabled = original_auth_limiter


@pytest.fixture(scope="function")
async def client(setup_app_dependencies):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def token_settings():
    return TokenSettings(
        access_secret="access-secret",
        refresh_secret="refresh-secret",
        access_lifetime=900,
        refresh_lifetime=3600,
    )


@pytest.fixture
def register_and_sign_in(client):
    async def _register_and_sign_in(email: str, password: str = PASSWORD) -> dict:
        await client.post("/api/v1/register", json={"email": email, "password": password})
        response = await client.post("/api/v1/sign-in", data={"username": email, "password": password})
        assert response.status_code == 200
        return response.json()
    return _register_and_sign_in
