"""Pytest configuration and shared fixtures"""

import os
from typing import AsyncGenerator, Dict

# Settings are read at import time; point them at the test database first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_atelier.db"
os.environ["ENVIRONMENT"] = "test"

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from atelier.main import app
from atelier.config import settings
from atelier.database import Base, get_db
from atelier.models import Project, ProjectStatus, User, UserRole
from atelier.services.auth_service import AuthService
from atelier.services.redis_service import get_redis_service
from atelier.services.session_service import SessionService


TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_atelier.db"

TEST_PASSWORD = "TestPassword123!"


class FakeRedisService:
    """In-memory stand-in for the login attempt counters"""

    def __init__(self):
        self.attempts: Dict[str, int] = {}

    async def ping(self) -> bool:
        return True

    async def increment_login_attempts(self, ip_address: str) -> int:
        self.attempts[ip_address] = self.attempts.get(ip_address, 0) + 1
        return self.attempts[ip_address]

    async def reset_login_attempts(self, ip_address: str):
        self.attempts.pop(ip_address, None)

    async def get_login_attempts(self, ip_address: str) -> int:
        return self.attempts.get(ip_address, 0)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with fresh tables"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for arranging and inspecting test data"""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def fake_redis() -> FakeRedisService:
    return FakeRedisService()


@pytest_asyncio.fixture
async def async_client(session_maker, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """Async test client; every request gets its own database session"""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_service] = lambda: fake_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def create_user(
    db: AsyncSession,
    username: str,
    role: str = UserRole.CLIENT.value,
    verified: bool = True,
    **fields,
) -> User:
    user = User(
        username=username,
        email=fields.pop("email", f"{username}@example.com"),
        password_hash=AuthService.hash_password(fields.pop("password", TEST_PASSWORD)),
        name=fields.pop("name", username.capitalize()),
        role=role,
        verified=verified,
        preferences={},
        **fields,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_project(db: AsyncSession, owner: User, **fields) -> Project:
    project = Project(
        user_id=owner.id,
        name=fields.pop("name", "Company website"),
        type=fields.pop("type", "website"),
        description=fields.pop("description", "A new website for the company"),
        status=fields.pop("status", ProjectStatus.PENDING.value),
        meta_data={},
        **fields,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


async def auth_headers(db: AsyncSession, user: User) -> Dict[str, str]:
    """Cookie header of a fresh session for the user"""
    session = await SessionService.create_session(db, user)
    return {"Cookie": f"{settings.session_cookie_name}={session.id}"}


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession) -> User:
    """A verified client"""
    return await create_user(db_session, "alice", company="Alice Bakery")


@pytest_asyncio.fixture
async def bob(db_session: AsyncSession) -> User:
    """A second verified client"""
    return await create_user(db_session, "bob")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await create_user(db_session, "admin", role=UserRole.ADMIN.value)


@pytest_asyncio.fixture
async def alice_headers(db_session: AsyncSession, alice: User) -> Dict[str, str]:
    return await auth_headers(db_session, alice)


@pytest_asyncio.fixture
async def bob_headers(db_session: AsyncSession, bob: User) -> Dict[str, str]:
    return await auth_headers(db_session, bob)


@pytest_asyncio.fixture
async def admin_headers(db_session: AsyncSession, admin: User) -> Dict[str, str]:
    return await auth_headers(db_session, admin)


@pytest_asyncio.fixture
async def alice_project(db_session: AsyncSession, alice: User) -> Project:
    return await create_project(db_session, alice)
