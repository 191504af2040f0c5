"""제네릭 서비스 계층 — 레포지토리 계약 위의 얇은 조정 계층.

Generic service layer over a ``RepositoryContract``.
Every id-targeted read/update/delete turns an absent result into
``EntityNotFoundError(entity, id)``; everything else passes through.
Storage errors are not caught here.
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from repo_catalog.core.query.options import SearchOptions
from repo_catalog.core.query.pagination import PaginationResult, PaginationSpec, SortOrder
from repo_catalog.repositories.base import RepositoryContract
from repo_catalog.utils.exceptions import EntityNotFoundError

T = TypeVar("T")


class EntityService(Generic[T]):
    """엔티티 독립적인 서비스.

    Entity-agnostic service composed over a repository contract.

    Attributes:
        repository: 레포지토리 계약 구현체 (Repository contract implementation)
        entity_name: 오류 메시지에 쓰이는 엔티티 종류 (Entity kind used in errors)
    """

    def __init__(self, repository: RepositoryContract[T], entity_name: str) -> None:
        self.repository: RepositoryContract[T] = repository
        self.entity_name: str = entity_name

    def _not_found(self, record_id: UUID) -> EntityNotFoundError:
        return EntityNotFoundError(self.entity_name, record_id)

    async def create(self, db: AsyncSession, data: dict[str, Any]) -> T:
        return await self.repository.create(db, data)

    async def get(self, db: AsyncSession, record_id: UUID, include_deleted: bool = False) -> T:
        """ID로 엔티티를 조회합니다.

        Retrieve an entity by id.

        Raises:
            EntityNotFoundError: 엔티티가 없을 때 (Entity not found)
        """
        entity: T | None = await self.repository.get_by_id(db, record_id, include_deleted)
        if entity is None:
            raise self._not_found(record_id)
        return entity

    async def update(self, db: AsyncSession, record_id: UUID, data: dict[str, Any]) -> T:
        """엔티티를 수정합니다.

        Update an entity and return it as re-read from storage.

        Raises:
            EntityNotFoundError: 엔티티가 없을 때 (Entity not found)
        """
        entity: T | None = await self.repository.update(db, record_id, data)
        if entity is None:
            raise self._not_found(record_id)
        return entity

    async def delete(self, db: AsyncSession, record_id: UUID) -> None:
        """엔티티를 (소프트) 삭제합니다 — Soft-delete an entity."""
        if not await self.repository.delete(db, record_id):
            raise self._not_found(record_id)

    async def hard_delete(self, db: AsyncSession, record_id: UUID) -> None:
        """엔티티를 영구 삭제합니다 — Permanently delete an entity."""
        if not await self.repository.hard_delete(db, record_id):
            raise self._not_found(record_id)

    async def restore(self, db: AsyncSession, record_id: UUID) -> T:
        """소프트 삭제된 엔티티를 복원합니다.

        Restore a soft-deleted entity.

        Raises:
            EntityNotFoundError: 복원할 엔티티가 없을 때 (Nothing to restore)
        """
        entity: T | None = await self.repository.restore(db, record_id)
        if entity is None:
            raise self._not_found(record_id)
        return entity

    async def search(self, db: AsyncSession, options: SearchOptions | None = None) -> list[T] | PaginationResult[T]:
        return await self.repository.search(db, options)

    async def count(self, db: AsyncSession, filters: dict[str, Any] | None = None) -> int:
        return await self.repository.count(db, filters)

    async def search_with_pagination(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.DESC,
        filters: dict[str, Any] | None = None,
        relations: list[str] | None = None,
    ) -> PaginationResult[T]:
        """페이지네이션 검색 — Paginated search with sorting."""
        options = SearchOptions(
            pagination=PaginationSpec(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order),
            filters=filters or {},
            relations=relations or [],
            with_pagination=True,
        )
        return await self.repository.search(db, options)

    async def search_with_filters(
        self,
        db: AsyncSession,
        filters: dict[str, Any],
        relations: list[str] | None = None,
        select: list[str] | None = None,
    ) -> list[T]:
        """필터 검색 (페이지네이션 없음) — Unpaginated filtered search."""
        options = SearchOptions(filters=filters, relations=relations or [], select=select or [])
        return await self.repository.search(db, options)

    async def search_with_relations(
        self,
        db: AsyncSession,
        relations: list[str],
        filters: dict[str, Any] | None = None,
        select: list[str] | None = None,
    ) -> list[T]:
        """관계를 함께 로드하는 검색 (페이지네이션 없음) — Unpaginated search loading relations."""
        options = SearchOptions(filters=filters or {}, relations=relations, select=select or [])
        return await self.repository.search(db, options)

    async def find_all(
        self,
        db: AsyncSession,
        relations: list[str] | None = None,
        select: list[str] | None = None,
        include_deleted: bool = False,
    ) -> list[T]:
        """전체 조회 — Every row (live rows only unless include_deleted)."""
        options = SearchOptions(relations=relations or [], select=select or [], include_deleted=include_deleted)
        return await self.repository.search(db, options)

    async def find_all_including_deleted(
        self,
        db: AsyncSession,
        relations: list[str] | None = None,
        select: list[str] | None = None,
    ) -> list[T]:
        return await self.find_all(db, relations, select, include_deleted=True)
