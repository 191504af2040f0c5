"""소유자 라우터 — 레포지토리 소유자 엔드포인트.

Owner Router — endpoints for repository owners.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repo_catalog.database import get_db
from repo_catalog.schemas.repository import OwnerCreate, OwnerResponse
from repo_catalog.services.owner_service import owner_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[OwnerResponse])
async def list_owners(
    db: Annotated[AsyncSession, Depends(get_db)],
    search: str | None = None,
) -> list[OwnerResponse]:
    """소유자 목록을 조회합니다 — List owners, optionally matching a login term."""
    return await owner_service.list_owners(db, search)


@router.get("/{owner_id}", response_model=OwnerResponse)
async def get_owner(
    owner_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OwnerResponse:
    return await owner_service.get_owner(db, owner_id)


@router.post("/", response_model=OwnerResponse, status_code=201)
async def create_owner(
    data: OwnerCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OwnerResponse:
    """새 소유자를 등록합니다 — Register an owner."""
    result: OwnerResponse = await owner_service.create_owner(db, data)
    await db.commit()
    return result


@router.delete("/{owner_id}", status_code=204)
async def delete_owner(
    owner_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    await owner_service.delete_owner(db, owner_id)
    await db.commit()
