"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Every test gets a fresh schema on its own engine (aiosqlite + StaticPool so
all connections share the same in-memory database).
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.models.user import ROLE_SUPERVISOR, ROLE_TENANT, ROLE_WORKER
from app.utils.jwt import create_access_token
from app.utils.password import hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite://"


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """테스트용 UTC 시각 — Aware UTC timestamp shorthand."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 스키마를 새로 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _make_profile(db: AsyncSession, **fields):
    from app.models.user import Profile
    profile = Profile(password_hash=hash_password("secret123!"), **fields)
    db.add(profile)
    await db.flush()
    await db.refresh(profile)
    return profile


@pytest_asyncio.fixture
async def supervisor(db: AsyncSession):
    """감독자 프로필을 생성합니다."""
    return await _make_profile(db, email="boss@test.com", name="Test Supervisor", role=ROLE_SUPERVISOR)


@pytest_asyncio.fixture
async def worker_a(db: AsyncSession):
    """작업자 A (리더 역할로 주로 사용)."""
    return await _make_profile(
        db, email="alice@test.com", name="Alice Worker", role=ROLE_WORKER, mobile="050-111"
    )


@pytest_asyncio.fixture
async def worker_b(db: AsyncSession):
    """작업자 B."""
    return await _make_profile(db, email="bob@test.com", name="Bob Worker", role=ROLE_WORKER)


@pytest_asyncio.fixture
async def tenant(db: AsyncSession):
    """입주자 프로필을 생성합니다."""
    return await _make_profile(
        db,
        email="tenant@test.com",
        name="Test Tenant",
        role=ROLE_TENANT,
        building_name="Marina Tower",
        room_number="1204",
    )


@pytest_asyncio.fixture
async def store(db: AsyncSession):
    """테스트 매장을 생성합니다."""
    from app.models.catalog import Store
    s = Store(name="Main Warehouse")
    db.add(s)
    await db.flush()
    await db.refresh(s)
    return s


@pytest_asyncio.fixture
async def materials(db: AsyncSession):
    """테스트 자재 3종을 생성합니다."""
    from app.models.catalog import Material
    items = [Material(name=name) for name in ("Pipe fitting", "Sealant", "Washer")]
    db.add_all(items)
    await db.flush()
    for item in items:
        await db.refresh(item)
    return items


@pytest_asyncio.fixture
async def complaint_type(db: AsyncSession):
    """민원 유형을 생성합니다."""
    from app.models.complaint import ComplaintType
    t = ComplaintType(name="Plumbing")
    db.add(t)
    await db.flush()
    await db.refresh(t)
    return t


@pytest_asyncio.fixture
async def complaint(db: AsyncSession, tenant, complaint_type):
    """입주자 민원을 생성합니다 (pending)."""
    from app.models.complaint import Complaint
    c = Complaint(
        tenant_id=tenant.id,
        type_id=complaint_type.id,
        description="Kitchen sink is leaking",
    )
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


def make_token(profile) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(profile.id), "role": profile.role})


@pytest_asyncio.fixture
async def supervisor_token(supervisor) -> str:
    return make_token(supervisor)


@pytest_asyncio.fixture
async def worker_a_token(worker_a) -> str:
    return make_token(worker_a)


@pytest_asyncio.fixture
async def worker_b_token(worker_b) -> str:
    return make_token(worker_b)


@pytest_asyncio.fixture
async def tenant_token(tenant) -> str:
    return make_token(tenant)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
