"""추적 레포지토리 서비스 — 레포지토리 카탈로그 비즈니스 로직.

Tracked Repository Service — catalog operations for tracked repositories.
Composes the generic ``EntityService`` for not-found semantics and maps ORM
rows to response schemas without triggering lazy loads.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from repo_catalog.core.query.options import SearchOptions
from repo_catalog.core.query.pagination import PaginationResult
from repo_catalog.models.repository import RepositoryTopic, TrackedRepository
from repo_catalog.repositories.owner_repository import owner_repository
from repo_catalog.repositories.tracked_repository_repository import tracked_repository_repository
from repo_catalog.schemas.repository import (
    OwnerResponse,
    TopicResponse,
    TrackedRepositoryCreate,
    TrackedRepositoryResponse,
    TrackedRepositoryUpdate,
)
from repo_catalog.services.base import EntityService
from repo_catalog.utils.exceptions import DuplicateError, EntityNotFoundError

# 응답에 포함되는 컬럼 — Column attributes copied into responses
_COLUMNS: tuple[str, ...] = (
    "id", "name", "full_name", "description", "language", "stars", "html_url",
    "owner_id", "created_at", "updated_at", "deleted_at",
)
# 상세 응답에서 로드하는 관계 — Relations loaded for single-entity responses
_DETAIL_RELATIONS: list[str] = ["owner", "topics"]


class TrackedRepositoryService:
    """추적 레포지토리 관련 비즈니스 로직을 처리하는 서비스.

    Service handling tracked repository business logic.
    """

    def __init__(self) -> None:
        self.entities: EntityService[TrackedRepository] = EntityService(
            tracked_repository_repository, "TrackedRepository"
        )

    def _to_response(self, repo: TrackedRepository) -> TrackedRepositoryResponse:
        """ORM 객체를 응답 스키마로 변환합니다.

        Convert a TrackedRepository row to its response schema. Attributes that
        were not loaded (projection, relations not requested) are left None.

        Args:
            repo: 레포지토리 모델 (TrackedRepository instance)

        Returns:
            TrackedRepositoryResponse: 레포지토리 응답 (Repository response)
        """
        unloaded: set[str] = set(sa_inspect(repo).unloaded)
        data: dict[str, Any] = {key: getattr(repo, key) for key in _COLUMNS if key not in unloaded}

        if "owner" not in unloaded:
            data["owner"] = OwnerResponse.model_validate(repo.owner) if repo.owner is not None else None
        if "topics" not in unloaded:
            data["topics"] = [TopicResponse.model_validate(t) for t in repo.topics]
        return TrackedRepositoryResponse(**data)

    async def _detail(self, db: AsyncSession, repo: TrackedRepository) -> TrackedRepositoryResponse:
        await db.refresh(repo, _DETAIL_RELATIONS)
        return self._to_response(repo)

    async def search(
        self,
        db: AsyncSession,
        options: SearchOptions,
    ) -> list[TrackedRepositoryResponse] | PaginationResult[TrackedRepositoryResponse]:
        """레포지토리를 검색합니다.

        Search tracked repositories; the result shape follows
        ``options.with_pagination``.
        """
        result = await self.entities.search(db, options)
        if isinstance(result, PaginationResult):
            return result.map(self._to_response)
        return [self._to_response(r) for r in result]

    async def count(self, db: AsyncSession, filters: dict[str, Any]) -> int:
        return await self.entities.count(db, filters)

    async def get_repository(
        self,
        db: AsyncSession,
        repository_id: UUID,
        include_deleted: bool = False,
    ) -> TrackedRepositoryResponse:
        """레포지토리 상세 정보를 소유자/토픽과 함께 조회합니다.

        Retrieve a repository with its owner and topics.

        Raises:
            EntityNotFoundError: 레포지토리를 찾을 수 없을 때 (Repository not found)
        """
        repo: TrackedRepository = await self.entities.get(db, repository_id, include_deleted)
        return await self._detail(db, repo)

    async def create_repository(
        self,
        db: AsyncSession,
        data: TrackedRepositoryCreate,
    ) -> TrackedRepositoryResponse:
        """새 레포지토리를 추적 대상으로 등록합니다.

        Start tracking a repository.

        Raises:
            EntityNotFoundError: 지정한 소유자가 없을 때 (Referenced owner not found)
            DuplicateError: 같은 전체 이름이 이미 추적 중일 때 (Full name already tracked)
        """
        if await tracked_repository_repository.exists(db, {"full_name": [data.full_name]}, include_deleted=True):
            raise DuplicateError("TrackedRepository", "full_name", data.full_name)
        if data.owner_id is not None and await owner_repository.get_by_id(db, data.owner_id) is None:
            raise EntityNotFoundError("Owner", data.owner_id)

        repo: TrackedRepository = await self.entities.create(
            db,
            {
                "name": data.name,
                "full_name": data.full_name,
                "description": data.description,
                "language": data.language,
                "stars": data.stars,
                "html_url": data.html_url,
                "owner_id": data.owner_id,
                # 중복 토픽 제거, 입력 순서 유지 — Drop duplicate topics, keep order
                "topics": [RepositoryTopic(name=name) for name in dict.fromkeys(data.topics)],
            },
        )
        return await self._detail(db, repo)

    async def update_repository(
        self,
        db: AsyncSession,
        repository_id: UUID,
        data: TrackedRepositoryUpdate,
    ) -> TrackedRepositoryResponse:
        """레포지토리 정보를 수정합니다 (부분 업데이트).

        Update a repository; only fields sent by the client are applied.

        Raises:
            EntityNotFoundError: 레포지토리를 찾을 수 없을 때 (Repository not found)
        """
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        repo: TrackedRepository = await self.entities.update(db, repository_id, update_data)
        return await self._detail(db, repo)

    async def delete_repository(self, db: AsyncSession, repository_id: UUID) -> None:
        """레포지토리를 소프트 삭제합니다 — Soft-delete a repository."""
        await self.entities.delete(db, repository_id)

    async def purge_repository(self, db: AsyncSession, repository_id: UUID) -> None:
        """레포지토리를 영구 삭제합니다 — Permanently delete a repository."""
        await self.entities.hard_delete(db, repository_id)

    async def restore_repository(self, db: AsyncSession, repository_id: UUID) -> TrackedRepositoryResponse:
        """소프트 삭제된 레포지토리를 복원합니다 — Restore a soft-deleted repository."""
        repo: TrackedRepository = await self.entities.restore(db, repository_id)
        return await self._detail(db, repo)


# 싱글턴 인스턴스 — Singleton instance
tracked_repository_service: TrackedRepositoryService = TrackedRepositoryService()
