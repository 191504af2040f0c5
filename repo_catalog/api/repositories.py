"""레포지토리 라우터 — 추적 레포지토리 검색 및 CRUD 엔드포인트.

Repository Router — search and CRUD endpoints for tracked repositories.
List query parameters are translated into ``SearchOptions`` for the
generic query engine.
"""

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from repo_catalog.core.query.options import FilterParams, SearchOptions, build_search_options
from repo_catalog.core.query.pagination import PaginationResult, PaginationSpec, SortOrder
from repo_catalog.database import get_db
from repo_catalog.repositories.tracked_repository_repository import RELATIONS
from repo_catalog.schemas.repository import (
    TrackedRepositoryCreate,
    TrackedRepositoryResponse,
    TrackedRepositoryUpdate,
)
from repo_catalog.services.tracked_repository_service import tracked_repository_service
from repo_catalog.utils.exceptions import BadRequestError

router: APIRouter = APIRouter()


def _filter_params(
    search: Annotated[str | None, Query(description="Free-text term over name, full name and description")] = None,
    ids: Annotated[list[UUID] | None, Query()] = None,
    created_after: datetime | None = None,
    created_before: datetime | None = None,
    updated_after: datetime | None = None,
    updated_before: datetime | None = None,
    language: Annotated[str | None, Query(description="Substring match; '%' switches to a literal pattern")] = None,
    owner_login: Annotated[str | None, Query(description="Substring match on the owner's login")] = None,
    topic: Annotated[str | None, Query(description="Substring match on any topic name")] = None,
) -> FilterParams:
    """목록 쿼리 파라미터를 필터 파라미터로 모읍니다.

    Collect list query parameters into ``FilterParams``; relation filters
    become nested mappings keyed by the relation name.
    """
    extra: dict[str, Any] = {"language": language}
    if owner_login:
        extra["owner"] = {"login": owner_login}
    if topic:
        extra["topics"] = {"name": topic}
    return FilterParams(
        search=search,
        ids=ids,
        created_after=created_after,
        created_before=created_before,
        updated_after=updated_after,
        updated_before=updated_before,
        **extra,
    )


def _search_options(
    filters: Annotated[FilterParams, Depends(_filter_params)],
    page: int = 1,
    limit: int = 10,
    sort_by: Annotated[str | None, Query(pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")] = None,
    sort_order: SortOrder = SortOrder.DESC,
    relations: Annotated[list[str] | None, Query()] = None,
    select: Annotated[list[str] | None, Query()] = None,
    with_pagination: bool = False,
    include_deleted: bool = False,
) -> SearchOptions:
    """검색 옵션을 구성합니다 — Build search options from query parameters."""
    unknown: list[str] = [r for r in relations or [] if r not in RELATIONS]
    if unknown:
        raise BadRequestError(f"Unknown relation(s): {', '.join(unknown)}")
    return build_search_options(
        PaginationSpec(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order),
        filters,
        relations,
        select,
        with_pagination,
        include_deleted,
    )


@router.get(
    "/",
    response_model=list[TrackedRepositoryResponse] | PaginationResult[TrackedRepositoryResponse],
)
async def search_repositories(
    options: Annotated[SearchOptions, Depends(_search_options)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Any:
    """추적 레포지토리를 검색합니다.

    Search tracked repositories. ``with_pagination=true`` wraps the page in
    an envelope with navigation flags; otherwise a plain list is returned.
    """
    return await tracked_repository_service.search(db, options)


@router.get("/count")
async def count_repositories(
    filters: Annotated[FilterParams, Depends(_filter_params)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, int]:
    """조건에 맞는 레포지토리 수를 반환합니다 — Count repositories matching the filters."""
    options: SearchOptions = build_search_options(filters=filters)
    return {"count": await tracked_repository_service.count(db, options.filters)}


@router.get("/{repository_id}", response_model=TrackedRepositoryResponse)
async def get_repository(
    repository_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    include_deleted: bool = False,
) -> TrackedRepositoryResponse:
    """레포지토리 상세 정보를 조회합니다 (소유자/토픽 포함).

    Retrieve repository detail with owner and topics.
    """
    return await tracked_repository_service.get_repository(db, repository_id, include_deleted)


@router.post("/", response_model=TrackedRepositoryResponse, status_code=201)
async def create_repository(
    data: TrackedRepositoryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TrackedRepositoryResponse:
    """새 레포지토리를 추적 대상으로 등록합니다 — Start tracking a repository."""
    result: TrackedRepositoryResponse = await tracked_repository_service.create_repository(db, data)
    await db.commit()
    return result


@router.patch("/{repository_id}", response_model=TrackedRepositoryResponse)
async def update_repository(
    repository_id: UUID,
    data: TrackedRepositoryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TrackedRepositoryResponse:
    """레포지토리 정보를 수정합니다 — Partially update a repository."""
    result: TrackedRepositoryResponse = await tracked_repository_service.update_repository(db, repository_id, data)
    await db.commit()
    return result


@router.delete("/{repository_id}", status_code=204)
async def delete_repository(
    repository_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """레포지토리를 소프트 삭제합니다 — Soft-delete a repository (restorable)."""
    await tracked_repository_service.delete_repository(db, repository_id)
    await db.commit()


@router.delete("/{repository_id}/hard", status_code=204)
async def purge_repository(
    repository_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """레포지토리를 영구 삭제합니다 — Permanently delete a repository."""
    await tracked_repository_service.purge_repository(db, repository_id)
    await db.commit()


@router.post("/{repository_id}/restore", response_model=TrackedRepositoryResponse)
async def restore_repository(
    repository_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TrackedRepositoryResponse:
    """소프트 삭제된 레포지토리를 복원합니다 — Restore a soft-deleted repository."""
    result: TrackedRepositoryResponse = await tracked_repository_service.restore_repository(db, repository_id)
    await db.commit()
    return result
