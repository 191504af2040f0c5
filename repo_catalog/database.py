"""카탈로그 DB 연결 — 비동기 엔진, 세션 팩토리, 선언적 베이스.

Catalog database wiring: the async engine built from ``settings``, the
session factory used per request, and the declarative base every catalog
model (and Alembic's autogenerate) hangs off.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from repo_catalog.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    """드라이버별 엔진 옵션을 구성합니다.

    Build driver-specific engine options. Pool sizing only applies to
    server databases; asyncpg gets its prepared statement cache disabled
    so transaction-mode poolers (pgbouncer/Supavisor) keep working.
    """
    options: dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_MAX_OVERFLOW
    if url.startswith("postgresql+asyncpg"):
        options["connect_args"] = {"statement_cache_size": 0}
    return options


# 카탈로그 엔진 — URL의 드라이버에 맞춰 옵션 구성 (Options follow the URL's driver)
engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# 비동기 세션 팩토리 — Async session factory
# expire_on_commit=False: 커밋 후에도 객체 속성 접근 가능 (Allows attribute access after commit without refresh)
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """카탈로그 모델 공통 베이스 — Declarative base shared by the catalog models."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 세션 의존성 — 라우트가 직접 commit 합니다.

    Per-request session dependency. Routes commit explicitly; anything not
    committed is discarded when the session closes.
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
