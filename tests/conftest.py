"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — in-memory SQLite (aiosqlite) database, session, and
httpx client fixtures. Every test gets a fresh schema, so no cleanup runs.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from repo_catalog.database import Base, get_db
from repo_catalog.main import app
from repo_catalog.models import *  # noqa: F401,F403 — register all models with metadata
from repo_catalog.models.repository import Owner, RepositoryTopic, TrackedRepository

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 하나의 연결을 공유하는 인메모리 DB에 스키마를 생성합니다."""
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
# 헬퍼: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def make_repository(
    db: AsyncSession,
    full_name: str,
    *,
    language: str | None = None,
    description: str | None = None,
    stars: int = 0,
    owner: Owner | None = None,
    topics: tuple[str, ...] = (),
    created_at: datetime | None = None,
) -> TrackedRepository:
    """레포지토리 한 건을 생성합니다 — Insert one tracked repository."""
    repo = TrackedRepository(
        name=full_name.split("/", 1)[1],
        full_name=full_name,
        language=language,
        description=description,
        stars=stars,
        owner_id=owner.id if owner is not None else None,
        topics=[RepositoryTopic(name=t) for t in topics],
    )
    if created_at is not None:
        repo.created_at = created_at
        repo.updated_at = created_at
    db.add(repo)
    await db.flush()
    await db.refresh(repo)
    return repo


@pytest_asyncio.fixture
async def octocat(db: AsyncSession) -> Owner:
    """테스트 소유자 (User)."""
    owner = Owner(login="octocat", type="User")
    db.add(owner)
    await db.flush()
    await db.refresh(owner)
    return owner


@pytest_asyncio.fixture
async def acme(db: AsyncSession) -> Owner:
    """테스트 소유자 (Organization)."""
    owner = Owner(login="acme-corp", type="Organization")
    db.add(owner)
    await db.flush()
    await db.refresh(owner)
    return owner


@pytest_asyncio.fixture
async def catalog(db: AsyncSession, octocat: Owner, acme: Owner) -> dict[str, TrackedRepository]:
    """생성 시각이 하루씩 다른 5개의 레포지토리 — Five repositories, one day apart."""
    rows = [
        ("octocat/hello-world", "Ruby", "My first repository", 80, octocat, ("demo",)),
        ("octocat/spoon-knife", "HTML", "Fork me", 12, octocat, ("demo", "forking")),
        ("acme-corp/rocket", "TypeScript", "Rocket launcher UI", 300, acme, ("ui", "web")),
        ("acme-corp/anvil", "Python", "Anvil data pipeline", 45, acme, ("data",)),
        ("acme-corp/legacy", None, None, 1, None, ()),
    ]
    repos: dict[str, TrackedRepository] = {}
    for index, (full_name, language, description, stars, owner, topics) in enumerate(rows):
        repo = await make_repository(
            db,
            full_name,
            language=language,
            description=description,
            stars=stars,
            owner=owner,
            topics=topics,
            created_at=BASE_TIME + timedelta(days=index),
        )
        repos[repo.name] = repo
    return repos
