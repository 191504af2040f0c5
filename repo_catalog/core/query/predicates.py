"""술어 컴파일러 — 분류된 필터를 매개변수화된 SQL 조건으로 변환합니다.

Predicate compiler.
Turns a classified filter entry into a SQLAlchemy boolean clause plus its
bound parameters. Every parameter name is suffixed with the entry's ordinal
(and, for relation filters, the field's ordinal), so names never collide
within one compiled query:

    language_0              direct column
    owner_login_1           relation "owner", field "login", field ordinal 1
    search_0, search_1 ...  free-text search fan-out

Compilation is pure: no session access, no I/O. Entries that reference a
column outside the entity's allow-list compile to nothing.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import ColumnElement, and_, bindparam, or_
from sqlalchemy.dialects import postgresql

from repo_catalog.core.query.filters import (
    WILDCARD,
    DateBetween,
    Equality,
    FieldFilter,
    FilterValue,
    FreeTextSearch,
    Membership,
    RangeDate,
    RelationFilter,
    Substring,
    classify,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledPredicate:
    """컴파일된 술어 — 조건식과 바인딩된 매개변수.

    A compiled predicate: the boolean clause and the parameters bound into it.

    Attributes:
        clause: SQLAlchemy 조건식 (Boolean clause, ready for ``Select.where``)
        parameters: 매개변수 이름 → 값 (Bound parameter name to value)
    """

    clause: ColumnElement[bool]
    parameters: dict[str, Any]

    @property
    def fragment(self) -> str:
        """PostgreSQL 방언으로 렌더링된 조건 텍스트 (placeholders, not values)."""
        return str(self.clause.compile(dialect=postgresql.dialect()))


@dataclass(frozen=True)
class RelationTarget:
    """조인된 관계 — 관계 이름과 같은 별칭으로 조인된 엔티티.

    A relation joined under an alias equal to its name, with the fields
    that may be filtered on.
    """

    entity: Any
    fields: frozenset[str]


@dataclass(frozen=True)
class CompileContext:
    """컴파일 컨텍스트 — 한 쿼리 안에서 공유되는 정적 설정.

    Per-query compilation context.

    Attributes:
        entity: 기본 엔티티 별칭 (Aliased base entity)
        fields: 필터 허용 컬럼 (Filterable columns of the base entity)
        searchable_fields: 전문 검색 대상 컬럼 (Free-text search columns)
        relations: 관계 이름 → 조인 대상 (Relation name to joined target)
    """

    entity: Any
    fields: frozenset[str]
    searchable_fields: tuple[str, ...] = ()
    relations: Mapping[str, RelationTarget] = field(default_factory=dict)


def _bind(name: str, value: Any, column: Any, expanding: bool = False) -> Any:
    return bindparam(name, value, type_=column.expression.type, expanding=expanding)


def compile_field(column: Any, kind: FieldFilter, name: str) -> CompiledPredicate:
    """단일 컬럼에 대한 술어를 만듭니다.

    Build the predicate for one column from a non-relation filter kind.

    Args:
        column: ORM 컬럼 속성 (Column attribute of an aliased entity)
        kind: 분류된 필터 (Classified filter)
        name: 매개변수 이름 (Bound parameter name)

    Returns:
        CompiledPredicate: 조건식과 매개변수 (Clause and parameters)
    """
    if isinstance(kind, Equality):
        return CompiledPredicate(column == _bind(name, kind.value, column), {name: kind.value})

    if isinstance(kind, Membership):
        # 빈 목록은 항상 거짓인 IN 조건이 됨 — Empty list renders a never-true IN
        values: list[Any] = list(kind.values)
        return CompiledPredicate(column.in_(_bind(name, values, column, expanding=True)), {name: values})

    if isinstance(kind, Substring):
        return CompiledPredicate(column.ilike(_bind(name, kind.pattern, column)), {name: kind.pattern})

    if isinstance(kind, RangeDate):
        param = _bind(name, kind.instant, column)
        clause = column >= param if kind.operator == ">=" else column <= param
        return CompiledPredicate(clause, {name: kind.instant})

    if isinstance(kind, DateBetween):
        lower, upper = f"{name}_from", f"{name}_to"
        clause = and_(column >= _bind(lower, kind.start, column), column <= _bind(upper, kind.end, column))
        return CompiledPredicate(clause, {lower: kind.start, upper: kind.end})

    raise TypeError(f"Unsupported filter kind: {type(kind).__name__}")


def compile_relation(kind: RelationFilter, context: CompileContext) -> CompiledPredicate | None:
    """관계 필터를 관계 별칭 기준의 조건으로 컴파일합니다.

    Compile a relation filter against the relation's own alias. Fields are
    AND-ed; unknown relations and fields are dropped.
    """
    target: RelationTarget | None = context.relations.get(kind.relation)
    if target is None:
        logger.debug("Dropping filter on unknown relation %r", kind.relation)
        return None

    clauses: list[ColumnElement[bool]] = []
    parameters: dict[str, Any] = {}
    for ordinal, field_name, field_kind in kind.entries:
        if field_name not in target.fields:
            logger.debug("Dropping filter on unknown field %s.%s", kind.relation, field_name)
            continue
        compiled = compile_field(
            getattr(target.entity, field_name), field_kind, f"{kind.relation}_{field_name}_{ordinal}"
        )
        clauses.append(compiled.clause)
        parameters.update(compiled.parameters)

    if not clauses:
        return None
    return CompiledPredicate(and_(*clauses), parameters)


def compile_search(term: str, context: CompileContext) -> CompiledPredicate | None:
    """전문 검색어를 검색 대상 컬럼들에 대한 OR 조건으로 컴파일합니다.

    Fan a free-text term out over the searchable fields as one OR group.
    No searchable fields means no restriction at all.
    """
    pattern: str = f"{WILDCARD}{term}{WILDCARD}"
    clauses: list[ColumnElement[bool]] = []
    parameters: dict[str, Any] = {}
    for ordinal, field_name in enumerate(context.searchable_fields):
        name = f"search_{ordinal}"
        column = getattr(context.entity, field_name)
        clauses.append(column.ilike(_bind(name, pattern, column)))
        parameters[name] = pattern

    if not clauses:
        return None
    return CompiledPredicate(or_(*clauses).self_group(), parameters)


def compile_predicate(
    key: str,
    kind: FilterValue,
    ordinal: int,
    context: CompileContext,
) -> CompiledPredicate | None:
    """분류된 필터 항목 하나를 컴파일합니다.

    Compile one classified filter entry.

    Args:
        key: 필터 키 (Filter key: column name or relation alias)
        kind: 분류 결과 (Classified filter value)
        ordinal: 필터 매핑 안에서의 순번 (Ordinal of the entry in the mapping)
        context: 컴파일 컨텍스트 (Compile context)

    Returns:
        CompiledPredicate | None: 술어, 생략 대상이면 None (None when omitted)
    """
    if isinstance(kind, FreeTextSearch):
        return compile_search(kind.term, context)

    if isinstance(kind, RelationFilter):
        return compile_relation(kind, context)

    if key not in context.fields:
        logger.debug("Dropping filter on unknown column %r", key)
        return None

    return compile_field(getattr(context.entity, key), kind, f"{key}_{ordinal}")


def compile_filters(filters: Mapping[str, Any], context: CompileContext) -> list[CompiledPredicate]:
    """필터 매핑 전체를 삽입 순서대로 컴파일합니다.

    Classify and compile every entry of a filter mapping, in insertion order.
    """
    predicates: list[CompiledPredicate] = []
    for ordinal, (key, raw) in enumerate(filters.items()):
        kind = classify(key, raw)
        if kind is None:
            continue
        compiled = compile_predicate(key, kind, ordinal, context)
        if compiled is not None:
            predicates.append(compiled)
    return predicates
