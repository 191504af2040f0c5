"""소유자 레포지토리 — GitHub 계정(소유자) DB 쿼리.

Owner Repository — database access for repository owners.
Owners are not soft-deletable, so ``delete`` removes the row.
"""

from repo_catalog.core.query.builder import QueryAssembler
from repo_catalog.models.repository import Owner
from repo_catalog.repositories.base import SqlAlchemyRepository

# 소유자 레포지토리 싱글턴 — login으로 전문 검색, 관계 필터는 repositories만 허용
owner_repository: SqlAlchemyRepository[Owner] = SqlAlchemyRepository(
    Owner,
    QueryAssembler(
        Owner,
        filterable_fields=("id", "login", "type", "created_at", "updated_at"),
        searchable_fields=("login",),
        relations={"repositories": ("name", "full_name", "language", "stars")},
    ),
)
