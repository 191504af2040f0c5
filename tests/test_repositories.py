"""제네릭 레포지토리 테스트 — CRUD, 소프트 삭제, 검색.

Generic repository tests against a real (SQLite) database: CRUD, soft
delete and restore, and search with filters, relations, projection,
sorting and pagination.
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repo_catalog.core.query.filters import DateRange
from repo_catalog.core.query.options import SearchOptions
from repo_catalog.core.query.pagination import PaginationResult, PaginationSpec, SortOrder
from repo_catalog.repositories.owner_repository import owner_repository
from repo_catalog.repositories.tracked_repository_repository import tracked_repository_repository as repos

_COLUMNS = ("id", "name", "full_name", "description", "language", "stars", "owner_id", "created_at", "updated_at")


def _snapshot(row) -> dict:
    return {column: getattr(row, column) for column in _COLUMNS}


def _names(rows) -> list[str]:
    return [row.name for row in rows]


def _by_name(filters: dict | None = None, **options) -> SearchOptions:
    """이름 오름차순 검색 옵션 — Search options sorted by name ascending."""
    return SearchOptions(
        pagination=PaginationSpec(sort_by="name", sort_order=SortOrder.ASC),
        filters=filters or {},
        **options,
    )


class TestCrud:
    """생성/조회/수정 테스트."""

    async def test_create_applies_defaults(self, db: AsyncSession):
        """생성 시 기본값이 적용된 레코드를 반환."""
        repo = await repos.create(db, {"name": "cli", "full_name": "octocat/cli"})
        assert repo.id is not None
        assert repo.stars == 0
        assert repo.created_at is not None
        assert repo.deleted_at is None

    async def test_get_by_id(self, db: AsyncSession, catalog):
        found = await repos.get_by_id(db, catalog["rocket"].id)
        assert found.full_name == "acme-corp/rocket"

    async def test_get_missing_returns_none(self, db: AsyncSession):
        """없는 ID 조회는 None (예외 아님)."""
        assert await repos.get_by_id(db, uuid4()) is None

    async def test_update_returns_stored_state(self, db: AsyncSession, catalog):
        """수정 결과는 저장소에서 다시 읽은 값."""
        before = catalog["anvil"].updated_at
        updated = await repos.update(db, catalog["anvil"].id, {"language": "Rust", "stars": 46})
        assert updated.language == "Rust"
        assert updated.stars == 46
        assert updated.updated_at > before

    async def test_update_missing_returns_none(self, db: AsyncSession):
        assert await repos.update(db, uuid4(), {"stars": 1}) is None

    async def test_update_skips_soft_deleted(self, db: AsyncSession, catalog):
        await repos.delete(db, catalog["legacy"].id)
        assert await repos.update(db, catalog["legacy"].id, {"stars": 2}) is None


class TestSoftDelete:
    """소프트 삭제 / 복원 테스트."""

    async def test_delete_hides_row(self, db: AsyncSession, catalog):
        repo_id = catalog["rocket"].id
        assert await repos.delete(db, repo_id) is True
        assert await repos.get_by_id(db, repo_id) is None

        deleted = await repos.get_by_id(db, repo_id, include_deleted=True)
        assert deleted is not None
        assert deleted.deleted_at is not None

    async def test_delete_twice(self, db: AsyncSession, catalog):
        """이미 삭제된 레코드는 다시 삭제되지 않음."""
        repo_id = catalog["rocket"].id
        assert await repos.delete(db, repo_id) is True
        assert await repos.delete(db, repo_id) is False

    async def test_delete_missing(self, db: AsyncSession):
        assert await repos.delete(db, uuid4()) is False

    async def test_restore_round_trip(self, db: AsyncSession, catalog):
        """삭제 후 복원하면 삭제 전 상태와 동일."""
        repo_id = catalog["hello-world"].id
        before = _snapshot(await repos.get_by_id(db, repo_id))

        await repos.delete(db, repo_id)
        restored = await repos.restore(db, repo_id)

        assert restored is not None
        assert restored.deleted_at is None
        assert _snapshot(restored) == before

    async def test_restore_live_row(self, db: AsyncSession, catalog):
        """삭제되지 않은 레코드는 복원 대상이 아님."""
        assert await repos.restore(db, catalog["rocket"].id) is None

    async def test_restore_missing(self, db: AsyncSession):
        assert await repos.restore(db, uuid4()) is None

    async def test_hard_delete(self, db: AsyncSession, catalog):
        """영구 삭제는 삭제된 레코드 조회로도 찾을 수 없음."""
        repo_id = catalog["legacy"].id
        await repos.delete(db, repo_id)
        assert await repos.hard_delete(db, repo_id) is True
        assert await repos.get_by_id(db, repo_id, include_deleted=True) is None
        assert await repos.hard_delete(db, repo_id) is False

    async def test_delete_without_soft_delete_removes_row(self, db: AsyncSession, octocat):
        """소프트 삭제를 지원하지 않는 엔티티는 영구 삭제."""
        assert owner_repository.soft_delete is False
        assert await owner_repository.delete(db, octocat.id) is True
        assert await owner_repository.get_by_id(db, octocat.id) is None

    async def test_restore_without_soft_delete(self, db: AsyncSession, octocat):
        assert await owner_repository.restore(db, octocat.id) is None


class TestSearchFilters:
    """검색 필터 테스트."""

    async def test_search_without_options(self, db: AsyncSession, catalog):
        rows = await repos.search(db)
        assert isinstance(rows, list)
        assert len(rows) == 5

    async def test_deleted_rows_excluded_by_default(self, db: AsyncSession, catalog):
        await repos.delete(db, catalog["legacy"].id)
        assert "legacy" not in _names(await repos.search(db, _by_name()))
        assert "legacy" in _names(await repos.search(db, _by_name(include_deleted=True)))

    async def test_substring_is_case_insensitive(self, db: AsyncSession, catalog):
        assert _names(await repos.search(db, _by_name({"language": "script"}))) == ["rocket"]

    async def test_literal_wildcard(self, db: AsyncSession, catalog):
        """'%'가 있으면 접두사 일치로 동작."""
        assert _names(await repos.search(db, _by_name({"name": "s%"}))) == ["spoon-knife"]

    async def test_equality(self, db: AsyncSession, catalog):
        assert _names(await repos.search(db, _by_name({"stars": 300}))) == ["rocket"]

    async def test_membership(self, db: AsyncSession, catalog):
        rows = await repos.search(db, _by_name({"name": ["anvil", "legacy", "missing"]}))
        assert _names(rows) == ["anvil", "legacy"]

    async def test_empty_membership_matches_nothing(self, db: AsyncSession, catalog):
        assert await repos.search(db, _by_name({"name": []})) == []
        assert await repos.count(db, {"name": []}) == 0

    async def test_date_range(self, db: AsyncSession, catalog):
        jan_2 = datetime(2024, 1, 2, tzinfo=timezone.utc)
        jan_3 = datetime(2024, 1, 3, tzinfo=timezone.utc)
        rows = await repos.search(db, _by_name({"created_at": DateRange(jan_2, jan_3)}))
        assert _names(rows) == ["rocket", "spoon-knife"]

    async def test_lower_bound(self, db: AsyncSession, catalog):
        rows = await repos.search(db, _by_name({"created_at": ">=2024-01-04"}))
        assert _names(rows) == ["anvil", "legacy"]

    async def test_malformed_range_is_ignored(self, db: AsyncSession, catalog):
        """파싱할 수 없는 범위 값은 조건 없이 무시."""
        rows = await repos.search(db, _by_name({"created_at": ">=not-a-date"}))
        assert len(rows) == 5

    async def test_unknown_filter_key_is_ignored(self, db: AsyncSession, catalog):
        assert len(await repos.search(db, _by_name({"secret": "x"}))) == 5

    async def test_free_text_search(self, db: AsyncSession, catalog):
        """이름/전체 이름/설명 중 하나라도 일치하면 결과에 포함."""
        assert _names(await repos.search(db, _by_name({"search": "PIPELINE"}))) == ["anvil"]
        assert _names(await repos.search(db, _by_name({"search": "acme"}))) == ["anvil", "legacy", "rocket"]

    async def test_search_combined_with_filter(self, db: AsyncSession, catalog):
        rows = await repos.search(db, _by_name({"search": "acme", "language": "python"}))
        assert _names(rows) == ["anvil"]

    async def test_owner_relation_filter(self, db: AsyncSession, catalog):
        """관계 필터는 관계를 조인하여 적용."""
        rows = await repos.search(db, _by_name({"owner": {"login": "octo"}}))
        assert _names(rows) == ["hello-world", "spoon-knife"]

    async def test_topic_relation_filter_has_no_duplicates(self, db: AsyncSession, catalog):
        rows = await repos.search(db, _by_name({"topics": {"name": ["demo", "forking"]}}))
        assert _names(rows) == ["hello-world", "spoon-knife"]
        assert await repos.count(db, {"topics": {"name": ["demo", "forking"]}}) == 2

    async def test_exists(self, db: AsyncSession, catalog):
        """목록 값은 정확히 일치하는 레코드만 찾음."""
        assert await repos.exists(db, {"full_name": ["acme-corp/rocket"]}) is True
        assert await repos.exists(db, {"full_name": ["acme-corp/rock"]}) is False
        await repos.delete(db, catalog["rocket"].id)
        assert await repos.exists(db, {"full_name": ["acme-corp/rocket"]}) is False
        assert await repos.exists(db, {"full_name": ["acme-corp/rocket"]}, include_deleted=True) is True

    async def test_count(self, db: AsyncSession, catalog):
        assert await repos.count(db) == 5
        assert await repos.count(db, {"owner": {"login": "acme"}}) == 2
        await repos.delete(db, catalog["rocket"].id)
        assert await repos.count(db) == 4
        assert await repos.count(db, include_deleted=True) == 5


class TestSearchLoading:
    """관계 로딩 / 프로젝션 / 정렬 테스트."""

    async def test_relations_are_loaded(self, db: AsyncSession, catalog):
        db.expunge_all()
        rows = await repos.search(db, _by_name({"name": ["rocket"]}, relations=["owner", "topics"]))
        assert rows[0].owner.login == "acme-corp"
        assert sorted(t.name for t in rows[0].topics) == ["ui", "web"]

    async def test_unrequested_relations_stay_unloaded(self, db: AsyncSession, catalog):
        db.expunge_all()
        rows = await repos.search(db, _by_name({"owner": {"login": "acme"}}))
        assert {"owner", "topics"} <= sa_inspect(rows[0]).unloaded

    async def test_projection(self, db: AsyncSession, catalog):
        """select로 지정한 컬럼만 로드."""
        db.expunge_all()
        rows = await repos.search(db, _by_name(select=["name"]))
        unloaded = sa_inspect(rows[0]).unloaded
        assert "stars" in unloaded
        assert "name" not in unloaded

    async def test_sort_descending(self, db: AsyncSession, catalog):
        options = SearchOptions(pagination=PaginationSpec(sort_by="stars", sort_order=SortOrder.DESC))
        assert _names(await repos.search(db, options)) == ["rocket", "hello-world", "anvil", "spoon-knife", "legacy"]

    async def test_unknown_sort_column_fails_in_storage(self, db: AsyncSession, catalog):
        """존재하지 않는 정렬 컬럼은 저장소 오류."""
        options = SearchOptions(pagination=PaginationSpec(sort_by="popularity"))
        with pytest.raises(SQLAlchemyError):
            await repos.search(db, options)


class TestSearchPagination:
    """페이지네이션 검색 테스트."""

    async def test_membership_second_page(self, db: AsyncSession, catalog):
        """3건 중 2페이지 (limit 2) → 1건, 이전 페이지만 존재."""
        options = _by_name(
            {"name": ["hello-world", "spoon-knife", "rocket"]},
            with_pagination=True,
        )
        options.pagination.page = 2
        options.pagination.limit = 2

        result = await repos.search(db, options)
        assert isinstance(result, PaginationResult)
        assert _names(result.data) == ["spoon-knife"]
        assert result.total == 3
        assert result.total_pages == 2
        assert result.has_next is False
        assert result.has_prev is True

    async def test_clamped_request(self, db: AsyncSession, catalog):
        """범위를 벗어난 페이지/개수는 보정되어 반영."""
        options = SearchOptions(pagination=PaginationSpec(page=-5, limit=500), with_pagination=True)
        result = await repos.search(db, options)
        assert (result.page, result.limit, result.total) == (1, 100, 5)
        assert len(result.data) == 5

    async def test_default_pagination(self, db: AsyncSession, catalog):
        result = await repos.search(db, SearchOptions(with_pagination=True))
        assert (result.page, result.limit, result.total, result.total_pages) == (1, 10, 5, 1)

    async def test_page_past_the_end(self, db: AsyncSession, catalog):
        options = SearchOptions(pagination=PaginationSpec(page=4, limit=2), with_pagination=True)
        result = await repos.search(db, options)
        assert result.data == []
        assert result.total == 5
        assert result.has_next is False

    async def test_pages_do_not_overlap(self, db: AsyncSession, catalog):
        """같은 정렬 값이 있어도 페이지 간 중복 없음."""
        seen: list[str] = []
        for page in (1, 2, 3):
            options = SearchOptions(
                pagination=PaginationSpec(page=page, limit=2, sort_by="owner_id"),
                with_pagination=True,
            )
            seen.extend(_names((await repos.search(db, options)).data))
        assert sorted(seen) == sorted(catalog)

    async def test_projection_with_topics_and_sort(self, db: AsyncSession, catalog):
        """토픽 필터 + 프로젝션 + 정렬 조합."""
        db.expunge_all()
        options = SearchOptions(
            pagination=PaginationSpec(limit=1, sort_by="created_at", sort_order=SortOrder.DESC),
            filters={"topics": {"name": "demo"}},
            relations=["topics"],
            select=["name"],
            with_pagination=True,
        )
        result = await repos.search(db, options)
        assert result.total == 2
        assert _names(result.data) == ["spoon-knife"]
        assert "stars" in sa_inspect(result.data[0]).unloaded
        assert sorted(t.name for t in result.data[0].topics) == ["demo", "forking"]

    async def test_paginated_relation_filter_counts_entities(self, db: AsyncSession, catalog):
        options = _by_name({"topics": {"name": "demo"}}, relations=["topics"], with_pagination=True)
        result = await repos.search(db, options)
        assert result.total == 2
        assert _names(result.data) == ["hello-world", "spoon-knife"]
