"""pytest fixtures shared across all tests."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from sqlidentity.core.database import enable_sqlite_savepoints
from sqlidentity.models import Base, IdentityRole, IdentityUser
from sqlidentity.stores import RoleStore, UserStore

# SQLite in-memory, no external database required.
# Each test function gets its own fresh DB to avoid cross-test pollution.
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory SQLite engine per test function."""
    eng = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(eng)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Yield an async session bound to the test engine."""
    factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=True)
    async with factory() as session:
        yield session


@pytest.fixture
def user_store(db_session):
    return UserStore(db_session)


@pytest.fixture
def role_store(db_session):
    return RoleStore(db_session)


def _new_user(name: str = "alice", email: str | None = None) -> IdentityUser:
    email = email or f"{name}@example.com"
    return IdentityUser(
        name,
        normalized_user_name=name.upper(),
        email=email,
        normalized_email=email.upper(),
        security_stamp="stamp-1",
    )


def _new_role(name: str = "Admin") -> IdentityRole:
    return IdentityRole(name, normalized_name=name.upper())


@pytest_asyncio.fixture
async def alice(user_store):
    user = _new_user("alice")
    await user_store.create(user)
    return user


@pytest_asyncio.fixture
async def admin_role(role_store):
    role = _new_role("Admin")
    await role_store.create(role)
    return role


@pytest.fixture
def make_user():
    """Factory for transient users with normalized name/email filled in."""
    return _new_user


@pytest.fixture
def make_role():
    return _new_role
