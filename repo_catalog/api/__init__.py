"""API 라우터 패키지 — 모든 v1 엔드포인트 통합.

API Router package — aggregates the v1 endpoints into a single router.

Included routers:
    - repositories: 추적 레포지토리 검색/CRUD (Tracked repository search and CRUD)
    - owners: 소유자 등록/조회 (Owner registration and lookup)
"""

from fastapi import APIRouter

from repo_catalog.api.owners import router as owners_router
from repo_catalog.api.repositories import router as repositories_router

api_router: APIRouter = APIRouter()
api_router.include_router(repositories_router, prefix="/repositories", tags=["Repositories"])
api_router.include_router(owners_router, prefix="/owners", tags=["Owners"])
