"""기본 CRUD 레포지토리 — 엔티티 독립적인 CRUD + 검색 계약과 SQLAlchemy 어댑터.

Generic repository contract and its SQLAlchemy adapter.
Provides Create, Read, Update, soft/hard Delete, Restore, Search and Count
for any mapped entity. Search and count are delegated to a ``QueryAssembler``
the adapter is composed with, so concrete repositories only declare their
allow-lists instead of overriding query code.

Usage:
    tracked_repository_repository = SqlAlchemyRepository(
        TrackedRepository,
        QueryAssembler(TrackedRepository, searchable_fields=("name", "description")),
    )
"""

from typing import Any, Generic, Protocol, TypeVar
from uuid import UUID

from sqlalchemy import Select, delete, select, update
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from repo_catalog.core.query.builder import ExecutableQuery, QueryAssembler
from repo_catalog.core.query.options import SearchOptions
from repo_catalog.core.query.pagination import PaginationResult, PaginationSpec, SortOrder, fetch_all, paginate
from repo_catalog.database import Base
from repo_catalog.models.base import utc_now

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class RepositoryContract(Protocol[ModelType]):
    """레포지토리 계약 — 서비스 계층이 의존하는 엔티티 독립적 인터페이스.

    Entity-agnostic CRUD + search surface the service layer depends on.
    """

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType: ...

    async def get_by_id(self, db: AsyncSession, record_id: UUID, include_deleted: bool = False) -> ModelType | None: ...

    async def update(self, db: AsyncSession, record_id: UUID, update_data: dict[str, Any]) -> ModelType | None: ...

    async def delete(self, db: AsyncSession, record_id: UUID) -> bool: ...

    async def hard_delete(self, db: AsyncSession, record_id: UUID) -> bool: ...

    async def restore(self, db: AsyncSession, record_id: UUID) -> ModelType | None: ...

    async def search(
        self, db: AsyncSession, options: SearchOptions | None = None
    ) -> list[ModelType] | PaginationResult[ModelType]: ...

    async def count(
        self, db: AsyncSession, filters: dict[str, Any] | None = None, include_deleted: bool = False
    ) -> int: ...

    async def exists(
        self, db: AsyncSession, filters: dict[str, Any] | None = None, include_deleted: bool = False
    ) -> bool: ...


class SqlAlchemyRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic repository adapter implementing ``RepositoryContract`` on top of
    an ``AsyncSession``. Soft delete applies when the model mixes in
    ``SoftDeleteMixin``; otherwise ``delete`` removes the row.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
        assembler: 검색 쿼리 조립기 (Query assembler used by search/count)
    """

    def __init__(self, model: type[ModelType], assembler: QueryAssembler | None = None) -> None:
        """레포지토리를 초기화합니다.

        Initialize the repository with a model class and its query assembler.

        Args:
            model: 이 레포지토리가 관리할 SQLAlchemy 모델 클래스
                   (SQLAlchemy model class this repository manages)
            assembler: 쿼리 조립기, 없으면 기본 허용 목록으로 생성
                       (Query assembler; defaults to the model's mapped columns)
        """
        self.model: type[ModelType] = model
        self.assembler: QueryAssembler = assembler or QueryAssembler(model)
        self._pk = sa_inspect(model).primary_key[0]

    @property
    def soft_delete(self) -> bool:
        return self.assembler.soft_delete

    def _by_id(self, record_id: UUID) -> Any:
        return self._pk == record_id

    def _live(self) -> Any:
        return self.model.deleted_at.is_(None)

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        include_deleted: bool = False,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID. Absence is a normal outcome.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)
            include_deleted: 소프트 삭제된 레코드도 조회할지 여부
                             (Also return a soft-deleted record)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self._by_id(record_id))
        if self.soft_delete and not include_deleted:
            query = query.where(self._live())

        # 세션에 캐시된 객체도 저장소 값으로 갱신 — Refresh identity-mapped objects from storage
        result = await db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다.

        Create a new record and return it as stored (defaults applied).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            obj_data: 생성할 레코드의 데이터 딕셔너리
                      (Dictionary of data for the new record)

        Returns:
            ModelType: 생성된 레코드 (The created record)
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """기존 레코드를 업데이트합니다.

        Update a live record. The returned record is re-read from storage,
        so server-computed columns (``updated_at``) are reflected.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 업데이트할 레코드의 UUID (UUID of the record to update)
            update_data: 업데이트할 필드와 값의 딕셔너리
                         (Dictionary of fields and values to update)

        Returns:
            ModelType | None: 업데이트된 레코드 또는 None (Updated record or None)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> bool:
        """레코드를 소프트 삭제합니다.

        Soft-delete a live record by stamping ``deleted_at``; the row stays.
        Entities without the soft-delete capability are removed instead.

        Returns:
            bool: 삭제된 행이 있는지 여부 (Whether a row was affected)
        """
        if not self.soft_delete:
            return await self.hard_delete(db, record_id)

        # updated_at은 그대로 유지 — 복원 시 삭제 전 상태와 동일해야 함
        # Keep updated_at so a restore yields the pre-deletion state
        stmt = (
            update(self.model)
            .where(self._by_id(record_id), self._live())
            .values(deleted_at=utc_now(), updated_at=self.model.updated_at)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount > 0

    async def hard_delete(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> bool:
        """레코드를 영구 삭제합니다.

        Permanently remove a row, soft-deleted or not.

        Returns:
            bool: 삭제 성공 여부 (Whether a row was removed)
        """
        stmt = delete(self.model).where(self._by_id(record_id)).execution_options(synchronize_session=False)
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount > 0

    async def restore(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> ModelType | None:
        """소프트 삭제된 레코드를 복원합니다.

        Clear the soft-delete marker of a deleted record.

        Returns:
            ModelType | None: 복원된 레코드, 복원 대상이 없으면 None
                              (Restored record, or None when nothing was restored)
        """
        if not self.soft_delete:
            return None

        stmt = (
            update(self.model)
            .where(self._by_id(record_id), self.model.deleted_at.is_not(None))
            .values(deleted_at=None, updated_at=self.model.updated_at)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.flush()
        if result.rowcount == 0:
            return None
        return await self.get_by_id(db, record_id)

    def build_query(self, options: SearchOptions) -> ExecutableQuery:
        """검색 옵션으로 쿼리를 조립합니다 — Assemble the query for a search request."""
        spec: PaginationSpec | None = options.pagination
        return self.assembler.assemble(
            options.filters,
            relations=options.relations,
            projection=options.select,
            include_deleted=options.include_deleted,
            sort_by=spec.sort_by if spec else None,
            sort_order=spec.sort_order if spec else SortOrder.DESC,
            stable=options.with_pagination,
        )

    async def search(
        self,
        db: AsyncSession,
        options: SearchOptions | None = None,
    ) -> list[ModelType] | PaginationResult[ModelType]:
        """필터/관계/프로젝션/페이지네이션이 적용된 검색을 수행합니다.

        Search with filters, relations, projection and optional pagination.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            options: 검색 옵션 (Search options; None returns every live row)

        Returns:
            list[ModelType] | PaginationResult[ModelType]:
                with_pagination이면 페이지 봉투, 아니면 목록
                (Page envelope when with_pagination is set, else a plain list)
        """
        options = options or SearchOptions()
        query: ExecutableQuery = self.build_query(options)

        if options.with_pagination:
            return await paginate(db, query, options.pagination or PaginationSpec())
        return await fetch_all(db, query)

    async def count(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        include_deleted: bool = False,
    ) -> int:
        """조건에 맞는 레코드 수를 셉니다.

        Count records matching the filters (same compilation as search).
        """
        count_query: Select = self.assembler.assemble_count(filters, include_deleted=include_deleted)
        return (await db.execute(count_query)).scalar() or 0

    async def exists(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        include_deleted: bool = False,
    ) -> bool:
        """조건에 맞는 레코드가 하나라도 있는지 확인합니다.

        Return whether at least one record matches the filters.
        """
        query: ExecutableQuery = self.assembler.assemble(filters, include_deleted=include_deleted)
        result = await db.execute(query.statement.limit(1))
        return result.scalars().first() is not None
