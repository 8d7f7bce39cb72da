"""Shared test fixtures: async SQLite in-memory DB + test client."""

import itertools
import os
from collections.abc import AsyncGenerator, Callable

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

# Import all models so metadata is populated
import app.models  # noqa: F401, E402
from app.core.config import Settings  # noqa: E402
from app.core.database import build_engine, build_session_factory, get_session, init_db  # noqa: E402
from app.core.security import create_access_token, hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402
from app.services.directory import UserDirectory  # noqa: E402
from app.services.user_store import UserRepository  # noqa: E402

PASSWORD = "password123"
_PASSWORD_HASH = hash_password(PASSWORD)
_counter = itertools.count()


@pytest.fixture
async def engine():
    """Fresh in-memory database per test (email uniqueness is global)."""
    eng = build_engine(Settings(database_url="sqlite+aiosqlite://"))
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async with build_session_factory(engine)() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
def directory(session) -> UserDirectory:
    return UserDirectory(UserRepository(session))


@pytest.fixture
def make_user(session) -> Callable:
    """Insert a user straight into the store; password is ``PASSWORD``."""

    async def _make(role: UserRole = UserRole.TEAM_MEMBER, **fields) -> User:
        n = next(_counter)
        values = {
            "email": f"user{n}@example.com",
            "password_hash": _PASSWORD_HASH,
            "first_name": "Test",
            "last_name": f"User{n}",
            "role": role,
        }
        values.update(fields)
        user = User(**values)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
