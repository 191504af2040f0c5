"""쿼리 조립기 — 기본 엔티티 조회, 관계 조인, 프로젝션, 소프트 삭제, 술어를 하나의 쿼리로 합칩니다.

Query assembler.
Composes, in order:

    (a) the base entity bound to its alias (lower-cased class name),
    (b) one LEFT OUTER JOIN per requested relation, aliased by relation name
        and eager-loaded; with a one-to-many join the filtering moves into a
        primary-key subquery so the outer SELECT never needs DISTINCT,
    (c) an optional column projection on the base alias,
    (d) ``deleted_at IS NULL`` for soft-deletable entities unless deleted
        rows were requested,
    (e) every compiled predicate, AND-ed in filter insertion order,

followed by optional sorting. The result is an ``ExecutableQuery`` holding
both the row statement and a count statement sharing the same predicates.
"""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, func, literal_column, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import aliased, contains_eager, load_only, selectinload

from repo_catalog.core.query.filters import RelationFilter, classify
from repo_catalog.core.query.pagination import SortOrder
from repo_catalog.core.query.predicates import CompileContext, CompiledPredicate, RelationTarget, compile_filters
from repo_catalog.models.base import supports_soft_delete

logger = logging.getLogger(__name__)

# 정렬 컬럼 이름 — Sort columns must be plain identifiers
SORT_IDENTIFIER: re.Pattern[str] = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class ExecutableQuery:
    """실행 가능한 쿼리 — 행 조회 쿼리와 같은 조건의 개수 쿼리.

    Row statement plus a count statement restricted by the same predicates.

    Attributes:
        statement: 엔티티 행 조회 SELECT (Entity row SELECT)
        count_statement: 전체 개수 SELECT (COUNT over the same predicates)
        predicates: 적용된 술어 목록 (Compiled predicates, insertion order)
    """

    statement: Select
    count_statement: Select
    predicates: tuple[CompiledPredicate, ...] = ()

    @property
    def parameters(self) -> dict[str, Any]:
        """모든 술어의 매개변수 — Bound parameters of every predicate."""
        merged: dict[str, Any] = {}
        for predicate in self.predicates:
            merged.update(predicate.parameters)
        return merged


def _column_names(model: type) -> frozenset[str]:
    return frozenset(attr.key for attr in sa_inspect(model).column_attrs)


class QueryAssembler:
    """엔티티 하나에 대한 쿼리 조립기.

    Query assembler bound to one entity type and its static allow-lists.

    Attributes:
        model: SQLAlchemy 모델 클래스 (Entity model class)
        alias: 기본 엔티티 별칭 (Base alias, lower-cased class name)
        filterable_fields: 필터 허용 컬럼 (Columns allowed in filters)
        searchable_fields: 전문 검색 컬럼 (Columns used by free-text search)
        relations: 조인 허용 관계 → 필터 허용 필드 (Joinable relations and their filterable fields)
        soft_delete: 소프트 삭제 지원 여부 (Soft-delete capability flag)
    """

    def __init__(
        self,
        model: type,
        *,
        filterable_fields: Iterable[str] | None = None,
        searchable_fields: Sequence[str] = (),
        relations: Mapping[str, Iterable[str] | None] | None = None,
    ) -> None:
        mapper = sa_inspect(model)
        columns: frozenset[str] = _column_names(model)

        self.model: type = model
        self.alias: str = model.__name__.lower()
        self.filterable_fields: frozenset[str] = (
            columns if filterable_fields is None else frozenset(filterable_fields) & columns
        )
        self.searchable_fields: tuple[str, ...] = tuple(f for f in searchable_fields if f in columns)
        self.soft_delete: bool = supports_soft_delete(model)

        # 관계 허용 목록 — 필드 목록이 None이면 관계 대상의 모든 컬럼 허용
        # Relation allow-list; None means every column of the related entity
        declared = relations if relations is not None else {name: None for name in mapper.relationships.keys()}
        self.relations: dict[str, frozenset[str]] = {}
        for name, fields in declared.items():
            if name not in mapper.relationships:
                raise ValueError(f"{model.__name__} has no relationship named {name!r}")
            related: type = mapper.relationships[name].mapper.class_
            related_columns = _column_names(related)
            self.relations[name] = related_columns if fields is None else frozenset(fields) & related_columns

    def _relation_filter_names(self, filters: Mapping[str, Any]) -> list[str]:
        names: list[str] = []
        for key, raw in filters.items():
            if isinstance(classify(key, raw), RelationFilter) and key in self.relations:
                names.append(key)
        return names

    def _filtered(
        self,
        base: Any,
        columns: Sequence[Any],
        joins: Mapping[str, Any],
        predicates: Sequence[CompiledPredicate],
        include_deleted: bool,
    ) -> Select:
        """조인, 소프트 삭제 조건, 술어가 적용된 SELECT를 만듭니다."""
        query: Select = select(*columns)
        for name, target in joins.items():
            query = query.outerjoin(target, getattr(base, name))

        if self.soft_delete and not include_deleted:
            query = query.where(base.deleted_at.is_(None))

        for predicate in predicates:
            query = query.where(predicate.clause)
        return query

    def _sort_column(self, base: Any, sort_by: str) -> Any:
        if sort_by in _column_names(self.model):
            return getattr(base, sort_by)
        if not SORT_IDENTIFIER.fullmatch(sort_by):
            raise ValueError(f"Invalid sort column: {sort_by!r}")
        # 존재하지 않는 컬럼은 실행 시점에 저장소 오류로 드러남
        # Unknown columns surface as a storage error at execution time
        return literal_column(f"{self.alias}.{sort_by}")

    def assemble(
        self,
        filters: Mapping[str, Any] | None = None,
        relations: Sequence[str] = (),
        projection: Sequence[str] = (),
        include_deleted: bool = False,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.DESC,
        stable: bool = False,
    ) -> ExecutableQuery:
        """검색 요청을 실행 가능한 쿼리로 조립합니다.

        Assemble a search request into an executable query.

        Args:
            filters: 필터 매핑 (Filter mapping)
            relations: 즉시 로딩할 관계 목록 (Relations to eager-load)
            projection: 조회할 컬럼 목록, 비어 있으면 전체 (Columns to load; empty loads all)
            include_deleted: 소프트 삭제 레코드 포함 여부 (Include soft-deleted rows)
            sort_by: 정렬 컬럼 (Sort column on the base alias)
            sort_order: 정렬 방향 (ASC or DESC)
            stable: 기본 키로 순서를 고정할지 여부 (Append the primary key as a final ordering key)

        Returns:
            ExecutableQuery: 행 쿼리와 개수 쿼리 (Row and count statements)
        """
        filters = filters or {}
        base = aliased(self.model, name=self.alias)
        mapper = sa_inspect(self.model)
        primary_key = getattr(base, mapper.primary_key[0].key)

        # 요청된 관계 + 관계 필터가 참조하는 관계 — 관계 이름과 같은 별칭으로 조인
        # Requested relations plus relations referenced by a relation filter
        eager: list[str] = []
        for name in relations:
            if name not in self.relations:
                logger.debug("Ignoring unknown relation %r on %s", name, self.model.__name__)
            elif name not in eager:
                eager.append(name)
        join_names: list[str] = eager + [n for n in self._relation_filter_names(filters) if n not in eager]

        joins: dict[str, Any] = {}
        targets: dict[str, RelationTarget] = {}
        for name in join_names:
            related = mapper.relationships[name].mapper.class_
            joins[name] = aliased(related, name=name)
            targets[name] = RelationTarget(joins[name], self.relations[name])

        context = CompileContext(
            entity=base,
            fields=self.filterable_fields,
            searchable_fields=self.searchable_fields,
            relations=targets,
        )
        predicates: list[CompiledPredicate] = compile_filters(filters, context)

        if any(mapper.relationships[name].uselist for name in joins):
            # 컬렉션 조인은 기본 행을 중복시킴 — 조건은 기본 키 서브쿼리에서 평가
            # Collection joins duplicate base rows; filter through a primary-key subquery
            ids: Select = self._filtered(base, [primary_key], joins, predicates, include_deleted).correlate(None)
            scalar_joins = {
                name: target
                for name, target in joins.items()
                if name in eager and not mapper.relationships[name].uselist
            }
            statement: Select = self._filtered(base, [base], scalar_joins, [], include_deleted=True).where(
                primary_key.in_(ids)
            )
        else:
            statement = self._filtered(base, [base], joins, predicates, include_deleted)

        for name in eager:
            attribute = getattr(base, name)
            if mapper.relationships[name].uselist:
                statement = statement.options(selectinload(attribute))
            else:
                statement = statement.options(contains_eager(attribute.of_type(joins[name])))

        fields: list[str] = [f for f in projection if f in _column_names(self.model)]
        if fields:
            statement = statement.options(load_only(*[getattr(base, f) for f in fields]))

        if sort_by:
            column = self._sort_column(base, sort_by)
            statement = statement.order_by(column.asc() if sort_order == SortOrder.ASC else column.desc())
        if sort_by or stable:
            statement = statement.order_by(primary_key)

        id_query: Select = self._filtered(base, [primary_key], joins, predicates, include_deleted).distinct()
        count_statement: Select = select(func.count()).select_from(id_query.subquery())

        return ExecutableQuery(statement, count_statement, tuple(predicates))

    def assemble_count(self, filters: Mapping[str, Any] | None = None, include_deleted: bool = False) -> Select:
        """개수 쿼리만 조립합니다 — Assemble only the COUNT statement."""
        return self.assemble(filters, include_deleted=include_deleted).count_statement
