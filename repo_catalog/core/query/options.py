"""검색 요청 옵션과 공통 필터 파라미터.

Search request options and the common filter parameters shared by every
list endpoint (free-text term, id set, created/updated date bounds).
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from repo_catalog.core.query.filters import SEARCH_KEY, DateRange
from repo_catalog.core.query.pagination import DEFAULT_LIMIT, PaginationSpec, SortOrder

DEFAULT_SORT_BY: str = "created_at"


class SearchOptions(BaseModel):
    """검색 요청 옵션.

    Search request accepted by ``search()`` and ``count()``.

    Attributes:
        pagination: 페이지네이션 요청 (Pagination and sorting, optional)
        filters: 필터 매핑 (Flat filter mapping: column/relation -> value)
        relations: 즉시 로딩할 관계 (Relations to eager-load, in order)
        select: 조회할 컬럼 (Columns to load; empty loads all)
        with_pagination: 페이지 봉투 반환 여부 (Return a PaginationResult instead of a list)
        include_deleted: 소프트 삭제 레코드 포함 여부 (Include soft-deleted rows)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    pagination: PaginationSpec | None = None
    filters: dict[str, Any] = Field(default_factory=dict)
    relations: list[str] = Field(default_factory=list)
    select: list[str] = Field(default_factory=list)
    with_pagination: bool = False
    include_deleted: bool = False


class FilterParams(BaseModel):
    """공통 목록 필터 파라미터 — 엔티티별 추가 키 허용.

    Common list filters. Accepts snake_case or camelCase names
    (``created_after`` or ``createdAfter``); entity-specific keys pass
    through as extra fields.
    """

    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)

    search: str | None = None
    ids: list[UUID] | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None


def _date_bound(after: datetime | None, before: datetime | None) -> DateRange | str | None:
    # 두 경계가 모두 있으면 닫힌 구간, 하나만 있으면 범위 문자열
    # Both bounds give a closed range; one bound gives a range-tagged string
    if after is not None and before is not None:
        return DateRange(after, before)
    if after is not None:
        return f">={after.isoformat()}"
    if before is not None:
        return f"<={before.isoformat()}"
    return None


def build_filters(params: FilterParams | None) -> dict[str, Any]:
    """공통 필터 파라미터를 필터 매핑으로 변환합니다.

    Translate common filter parameters into a filter mapping:

        search                          -> "search" (free text)
        ids                             -> "id" (membership)
        created_after / created_before  -> "created_at" (range)
        updated_after / updated_before  -> "updated_at" (range)

    Extra keys are copied through unchanged, after the common ones.

    Args:
        params: 필터 파라미터 (Filter parameters, optional)

    Returns:
        dict[str, Any]: 필터 매핑 (Filter mapping)
    """
    if params is None:
        return {}

    filters: dict[str, Any] = {}
    if params.search:
        filters[SEARCH_KEY] = params.search
    if params.ids:
        filters["id"] = list(params.ids)

    created = _date_bound(params.created_after, params.created_before)
    if created is not None:
        filters["created_at"] = created
    updated = _date_bound(params.updated_after, params.updated_before)
    if updated is not None:
        filters["updated_at"] = updated

    for key, value in (params.model_extra or {}).items():
        filters.setdefault(key, value)
    return filters


def build_search_options(
    pagination: PaginationSpec | None = None,
    filters: FilterParams | None = None,
    relations: list[str] | None = None,
    select: list[str] | None = None,
    with_pagination: bool = False,
    include_deleted: bool = False,
) -> SearchOptions:
    """요청 파라미터로 검색 옵션을 구성합니다.

    Build search options with the list defaults: page 1, limit 10, newest
    first (``created_at DESC``).
    """
    spec = pagination or PaginationSpec()
    return SearchOptions(
        pagination=PaginationSpec(
            page=spec.page or 1,
            limit=spec.limit or DEFAULT_LIMIT,
            sort_by=spec.sort_by or DEFAULT_SORT_BY,
            sort_order=spec.sort_order or SortOrder.DESC,
        ),
        filters=build_filters(filters),
        relations=relations or [],
        select=select or [],
        with_pagination=with_pagination,
        include_deleted=include_deleted,
    )
