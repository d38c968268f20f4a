"""
Exam Builder Backend — Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the whole suite.
How:   Service and route tests run against InMemoryUserRepository, so no
       database is needed. Repository tests get a throwaway SQLite file
       through aiosqlite.

Fixture Overview:
    ├── repository:      fresh InMemoryUserRepository per test
    ├── user_service:    UserService over that repository, fixed clock
    ├── test_client:     HTTPX AsyncClient with get_user_service overridden
    ├── db_client:       HTTPX AsyncClient over the real session dependency
    └── sqlite_session:  AsyncSession on an empty SQLite database
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="exambuilder_test_"), "test.db")
)
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.database import Base  # noqa: E402
from app.exceptions import DuplicateEmailError, EmailInUseError  # noqa: E402
from app.models.user import User  # noqa: E402
from app.repositories.user_repository import UserRepository  # noqa: E402
from app.services.user_service import UserService  # noqa: E402

BASE_TIME = datetime(2025, 10, 19, 15, 0, tzinfo=timezone.utc)
UPDATE_TIME = datetime(2025, 10, 20, 9, 30, tzinfo=timezone.utc)


class InMemoryUserRepository(UserRepository):
    """
    Dict-backed UserRepository.

    Ids increase monotonically and are never reused. Each insert gets a
    created_at one second after the previous one, so "newest first" is
    deterministic. Enforces email uniqueness like the real unique index.
    `calls` records method names in order for validation-order tests.
    """

    def __init__(self):
        self.rows: Dict[int, User] = {}
        self.calls: List[str] = []
        self._next_id = 1

    async def find_by_id(self, user_id: int) -> Optional[User]:
        self.calls.append("find_by_id")
        return self.rows.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        self.calls.append("find_by_email")
        return next((u for u in self.rows.values() if u.email == email), None)

    async def find_all(self) -> List[User]:
        self.calls.append("find_all")
        return sorted(self.rows.values(), key=lambda u: (u.created_at, u.id), reverse=True)

    async def insert(self, values: Mapping[str, Any]) -> User:
        self.calls.append("insert")
        if any(u.email == values["email"] for u in self.rows.values()):
            raise DuplicateEmailError(email=values["email"])

        user_id = self._next_id
        self._next_id += 1
        stamp = BASE_TIME + timedelta(seconds=user_id)
        user = User(id=user_id, created_at=stamp, updated_at=stamp, **dict(values))
        self.rows[user_id] = user
        return user

    async def update(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        self.calls.append("update")
        user = self.rows.get(user_id)
        if user is None:
            return None
        email = changes.get("email")
        if email and any(u.email == email and u.id != user_id for u in self.rows.values()):
            raise EmailInUseError(email=email)
        for field, value in changes.items():
            setattr(user, field, value)
        return user

    async def delete(self, user_id: int) -> bool:
        self.calls.append("delete")
        return self.rows.pop(user_id, None) is not None


@pytest.fixture
def repository():
    return InMemoryUserRepository()


@pytest.fixture
def user_service(repository):
    return UserService(repository, clock=lambda: UPDATE_TIME)


@pytest.fixture
def valid_user_data():
    return {"name": "Ana Souza", "email": "ana@escola.com", "password": "secret1"}


@pytest_asyncio.fixture
async def test_client(repository):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    get_user_service is overridden so every request shares `repository`.
    """
    from app.main import app
    from app.routes.users import get_user_service

    app.dependency_overrides[get_user_service] = lambda: UserService(
        repository, clock=lambda: UPDATE_TIME
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def sqlite_session(tmp_path):
    """AsyncSession on a fresh SQLite file with the users table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def db_client():
    """
    HTTPX AsyncClient with no dependency overrides.

    Requests go through get_db_session and SqlAlchemyUserRepository on the
    app engine (the SQLite file set in DATABASE_URL). Tables are created
    before and dropped after each test.
    """
    from app.database import engine
    from app.main import app

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
