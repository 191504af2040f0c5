"""쿼리 엔진 패키지 — 필터 분류, 술어 컴파일, 쿼리 조립, 페이지네이션.

Generic query engine: filter classification, predicate compilation, query
assembly and offset pagination, shared by every data-backed entity.
"""

from repo_catalog.core.query.builder import ExecutableQuery, QueryAssembler
from repo_catalog.core.query.filters import DateRange, classify
from repo_catalog.core.query.options import FilterParams, SearchOptions, build_filters, build_search_options
from repo_catalog.core.query.pagination import (
    PaginationResult,
    PaginationSpec,
    SortOrder,
    fetch_all,
    paginate,
)
from repo_catalog.core.query.predicates import CompiledPredicate, compile_filters

__all__ = [
    "CompiledPredicate", "DateRange", "ExecutableQuery", "FilterParams", "PaginationResult",
    "PaginationSpec", "QueryAssembler", "SearchOptions", "SortOrder", "build_filters",
    "build_search_options", "classify", "compile_filters", "fetch_all", "paginate",
]
