"""소유자 서비스 — 레포지토리 소유자 등록/조회.

Owner Service — registration and lookup of repository owners.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from repo_catalog.core.query.options import SearchOptions
from repo_catalog.core.query.pagination import PaginationSpec, SortOrder
from repo_catalog.models.repository import Owner
from repo_catalog.repositories.owner_repository import owner_repository
from repo_catalog.schemas.repository import OwnerCreate, OwnerResponse
from repo_catalog.services.base import EntityService
from repo_catalog.utils.exceptions import DuplicateError


class OwnerService:
    """소유자 관련 비즈니스 로직을 처리하는 서비스 — Owner business logic."""

    def __init__(self) -> None:
        self.entities: EntityService[Owner] = EntityService(owner_repository, "Owner")

    async def list_owners(self, db: AsyncSession, search: str | None = None) -> list[OwnerResponse]:
        """소유자 목록을 login 순으로 조회합니다 — List owners, optionally matching a login term."""
        options = SearchOptions(
            pagination=PaginationSpec(sort_by="login", sort_order=SortOrder.ASC),
            filters={"search": search},
        )
        owners = await self.entities.search(db, options)
        return [OwnerResponse.model_validate(o) for o in owners]

    async def get_owner(self, db: AsyncSession, owner_id: UUID) -> OwnerResponse:
        owner: Owner = await self.entities.get(db, owner_id)
        return OwnerResponse.model_validate(owner)

    async def create_owner(self, db: AsyncSession, data: OwnerCreate) -> OwnerResponse:
        """소유자를 등록합니다.

        Register an owner.

        Raises:
            DuplicateError: 같은 login이 이미 있을 때 (Login already registered)
        """
        # 목록 값은 정확히 일치 — A list value matches exactly (IN), not as a substring
        if await owner_repository.exists(db, {"login": [data.login]}):
            raise DuplicateError("Owner", "login", data.login)
        owner: Owner = await self.entities.create(db, data.model_dump())
        return OwnerResponse.model_validate(owner)

    async def delete_owner(self, db: AsyncSession, owner_id: UUID) -> None:
        """소유자를 삭제합니다 (소프트 삭제 미지원 → 영구 삭제).

        Delete an owner. Owners are not soft-deletable, so the row is removed
        and its repositories keep running with ``owner_id`` set to NULL.
        """
        await self.entities.delete(db, owner_id)


# 싱글턴 인스턴스 — Singleton instance
owner_service: OwnerService = OwnerService()
