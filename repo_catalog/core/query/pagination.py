"""페이지네이션 엔진 — 페이지/개수 보정, 오프셋 계산, 결과 봉투 구성.

Pagination engine for SQLAlchemy async queries.
Clamps page and limit, computes the offset, executes the count and the page
fetch over the same predicates, and shapes the result envelope with
navigation flags.
"""

import math
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Generic, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field
from sqlalchemy.ext.asyncio import AsyncSession

if TYPE_CHECKING:
    from repo_catalog.core.query.builder import ExecutableQuery

T = TypeVar("T")

MAX_PAGE: int = 10000  # 최대 페이지 번호 (Highest reachable page)
MAX_LIMIT: int = 100  # 페이지당 최대 항목 수 (Largest page size)
MAX_OFFSET: int = 1_000_000  # 최대 오프셋 (Largest row offset)
DEFAULT_LIMIT: int = 10


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class PaginationSpec(BaseModel):
    """페이지네이션 요청 — 범위를 벗어난 값은 거부하지 않고 보정합니다.

    Pagination request. Out-of-range page/limit values are accepted here and
    clamped by the engine.

    Attributes:
        page: 요청 페이지 번호, 1부터 시작 (Requested page, 1-indexed)
        limit: 페이지당 항목 수 (Items per page)
        sort_by: 정렬 컬럼 (Sort column, optional)
        sort_order: 정렬 방향 (ASC or DESC, default DESC)
    """

    # 생성 후 값을 바꿔도 검증 — Re-validate on assignment
    model_config = ConfigDict(validate_assignment=True)

    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort_by: str | None = Field(default=None, pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    sort_order: SortOrder = SortOrder.DESC


class PaginationResult(BaseModel, Generic[T]):
    """페이지네이션 결과 모델.

    Offset pagination result envelope. Navigation fields are derived from
    ``page``, ``limit`` and ``total`` and cannot drift from them.

    Attributes:
        data: 현재 페이지 항목 목록 (Items for the current page)
        page: 현재 페이지 번호 (Effective page, 1-based)
        limit: 페이지당 항목 수 (Effective page size)
        total: 전체 항목 수 (Total count across all pages)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: list[T]
    page: int
    limit: int
    total: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        # 전체 페이지 수 — ceil(total/limit), total이 0이면 0
        if self.total <= 0 or self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def map(self, fn: Callable[[T], Any]) -> "PaginationResult[Any]":
        """각 항목을 변환한 새 결과를 반환합니다 — Return a copy with each item mapped."""
        return PaginationResult(data=[fn(item) for item in self.data], page=self.page, limit=self.limit, total=self.total)


def clamp_page(page: int | None) -> int:
    """페이지 번호를 [1, MAX_PAGE] 범위로 보정합니다 (None이면 1)."""
    return max(1, min(MAX_PAGE, page or 1))


def clamp_limit(limit: int | None) -> int:
    """페이지 크기를 [1, MAX_LIMIT] 범위로 보정합니다 (None/0이면 기본값)."""
    return max(1, min(MAX_LIMIT, limit or DEFAULT_LIMIT))


def compute_offset(page: int, limit: int) -> int:
    """오프셋 계산 — (page-1)*limit, MAX_OFFSET 이하로 제한."""
    return min(MAX_OFFSET, (page - 1) * limit)


async def fetch_all(db: AsyncSession, query: "ExecutableQuery") -> list[Any]:
    """페이지네이션 없이 쿼리를 실행합니다.

    Execute the compiled query without limit/offset and return a plain list.
    """
    result = await db.execute(query.statement)
    return list(result.scalars().all())


async def paginate(db: AsyncSession, query: "ExecutableQuery", spec: PaginationSpec) -> PaginationResult[Any]:
    """SQLAlchemy 쿼리에 대한 페이지네이션을 수행합니다.

    Execute a paginated query, returning the page of items with its metadata.
    The total ignores limit/offset but honours the same predicates.

    Args:
        db: 비동기 DB 세션 (Async database session)
        query: 조립된 쿼리 (Assembled query)
        spec: 페이지네이션 요청 (Pagination request, clamped here)

    Returns:
        PaginationResult: 페이지 항목과 메타데이터 (Page items and metadata)
    """
    page: int = clamp_page(spec.page)
    limit: int = clamp_limit(spec.limit)
    offset: int = compute_offset(page, limit)

    # 전체 개수 조회 — Count over the same predicates
    total: int = (await db.execute(query.count_statement)).scalar() or 0

    # 페이지 항목 조회 — OFFSET/LIMIT 적용 (Fetch page items with offset/limit)
    result = await db.execute(query.statement.offset(offset).limit(limit))
    items: Sequence[Any] = result.scalars().all()

    return PaginationResult(data=list(items), page=page, limit=limit, total=total)
