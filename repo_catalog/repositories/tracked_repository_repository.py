"""추적 레포지토리 레포지토리 — 추적 중인 GitHub 레포지토리 DB 쿼리.

Tracked Repository Repository — database access for tracked GitHub repositories.
Wires the generic adapter with the filter allow-lists and free-text search
fields of the tracked_repositories table.
"""

from repo_catalog.core.query.builder import QueryAssembler
from repo_catalog.models.repository import TrackedRepository
from repo_catalog.repositories.base import SqlAlchemyRepository

# 필터 허용 컬럼 — Columns a search may filter on
FILTERABLE_FIELDS: tuple[str, ...] = (
    "id", "owner_id", "name", "full_name", "description", "language", "stars",
    "html_url", "created_at", "updated_at", "deleted_at",
)
# 전문 검색 대상 컬럼 — Columns matched by the "search" term
SEARCHABLE_FIELDS: tuple[str, ...] = ("name", "full_name", "description")
# 관계별 필터 허용 필드 — Joinable relations and their filterable fields
RELATIONS: dict[str, tuple[str, ...]] = {
    "owner": ("id", "login", "type"),
    "topics": ("name",),
}

# 싱글턴 인스턴스 — Singleton instance
tracked_repository_repository: SqlAlchemyRepository[TrackedRepository] = SqlAlchemyRepository(
    TrackedRepository,
    QueryAssembler(
        TrackedRepository,
        filterable_fields=FILTERABLE_FIELDS,
        searchable_fields=SEARCHABLE_FIELDS,
        relations=RELATIONS,
    ),
)
