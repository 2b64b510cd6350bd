import os
from collections.abc import AsyncGenerator, Callable
from datetime import date

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Settings are read at import time, so the test environment must come first
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-clinic-suite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "console")
load_dotenv()

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import insert  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from clinic.core.security import create_access_token, get_password_hash  # noqa: E402
from clinic.database import get_db  # noqa: E402
from clinic.dependencies import get_cache_manager  # noqa: E402
from clinic.main import app  # noqa: E402
from clinic.models import metadata, patients, procedures, professionals, users  # noqa: E402

TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Create a session on a fresh SQLite database per test."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await test_engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client without Redis."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_manager] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _insert(db: AsyncSession, table, **values) -> dict:
    result = await db.execute(insert(table).values(**values).returning(table))
    await db.commit()
    return dict(result.mappings().one())


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory inserting an active user with the test password."""
    password_hash = get_password_hash(TEST_PASSWORD)

    async def factory(role: str, email: str, name: str = "Test User") -> dict:
        return await _insert(
            db_session,
            users,
            email=email,
            password_hash=password_hash,
            name=name,
            role=role,
            is_active=True,
        )

    return factory


@pytest_asyncio.fixture
async def admin_user(make_user) -> dict:
    return await make_user("admin", "admin@clinic.com", "Alice Admin")


@pytest_asyncio.fixture
async def receptionist_user(make_user) -> dict:
    return await make_user("receptionist", "front@clinic.com", "Rita Reception")


@pytest_asyncio.fixture
async def physician_user(make_user) -> dict:
    return await make_user("physician", "house@clinic.com", "Gregory House")


@pytest_asyncio.fixture
async def other_physician_user(make_user) -> dict:
    return await make_user("physician", "wilson@clinic.com", "James Wilson")


@pytest_asyncio.fixture
async def professional(db_session: AsyncSession, physician_user: dict) -> dict:
    return await _insert(
        db_session,
        professionals,
        user_id=physician_user["id"],
        specialty="Diagnostics",
        commission=30.0,
    )


@pytest_asyncio.fixture
async def other_professional(db_session: AsyncSession, other_physician_user: dict) -> dict:
    return await _insert(
        db_session,
        professionals,
        user_id=other_physician_user["id"],
        specialty="Oncology",
        commission=25.0,
    )


@pytest_asyncio.fixture
async def patient(db_session: AsyncSession, receptionist_user: dict) -> dict:
    return await _insert(
        db_session,
        patients,
        name="Maria Silva",
        phone="+5511999990000",
        birth_date=date(1985, 3, 14),
        gender="female",
        created_by=receptionist_user["id"],
        needs_completion=False,
    )


@pytest_asyncio.fixture
async def consultation(db_session: AsyncSession) -> dict:
    return await _insert(
        db_session,
        procedures,
        name="General consultation",
        type="consultation",
        value=150.0,
    )


@pytest_asyncio.fixture
async def blood_exam(db_session: AsyncSession) -> dict:
    return await _insert(db_session, procedures, name="Blood count", type="exam", value=40.0)


def auth_headers_for(user: dict) -> dict:
    """Bearer headers for a user row."""
    token = create_access_token({"sub": str(user["id"]), "role": user["role"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for() -> Callable[[dict], dict]:
    return auth_headers_for


@pytest.fixture
def admin_headers(admin_user: dict) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def receptionist_headers(receptionist_user: dict) -> dict:
    return auth_headers_for(receptionist_user)


@pytest.fixture
def physician_headers(physician_user: dict, professional: dict) -> dict:
    return auth_headers_for(physician_user)


@pytest.fixture
def other_physician_headers(other_physician_user: dict, other_professional: dict) -> dict:
    return auth_headers_for(other_physician_user)
