"""필터 분류기 — 필터 값의 형태로 술어 종류를 결정합니다.

Filter classifier.
Inspects one ``(key, raw value)`` entry of a filter mapping and decides which
predicate family applies. Classification is derived from the value's shape
and lexical markers, decided once per entry, first match wins:

    1. None / ""                          -> skipped
    2. key "search" with a str value      -> FreeTextSearch
    3. mapping                            -> RelationFilter
    4. ">=..." / "<=..." str, DateRange   -> RangeDate / DateBetween
    5. list / tuple / set                 -> Membership
    6. str                                -> Substring
    7. anything else                      -> Equality

Values that cannot be parsed (e.g. ``">=not-a-date"``) are dropped, never raised.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Union

logger = logging.getLogger(__name__)

# 예약된 전문 검색 키 — Reserved free-text search key
SEARCH_KEY: str = "search"
# 저장소의 와일드카드 표식 — Store wildcard marker (SQL LIKE)
WILDCARD: str = "%"
RANGE_OPERATORS: tuple[str, ...] = (">=", "<=")


@dataclass(frozen=True)
class DateRange:
    """닫힌 날짜 구간 필터 값.

    Closed (or half-open when one side is None) date interval, used as a raw
    filter value when both an "after" and a "before" bound target one column.
    """

    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class Equality:
    value: Any


@dataclass(frozen=True)
class Membership:
    values: tuple[Any, ...]


@dataclass(frozen=True)
class RangeDate:
    operator: str  # ">=" 또는 "<="
    instant: datetime


@dataclass(frozen=True)
class DateBetween:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Substring:
    pattern: str  # 이미 와일드카드가 적용된 패턴 (Pattern with wildcards applied)
    literal_wildcard: bool


@dataclass(frozen=True)
class RelationFilter:
    relation: str
    # (필드 순번, 필드명, 종류) — (field ordinal, field name, kind)
    entries: tuple[tuple[int, str, "FieldFilter"], ...]


@dataclass(frozen=True)
class FreeTextSearch:
    term: str


# 관계 내부 필드에 허용되는 종류 — Kinds allowed inside a relation filter
FieldFilter = Union[Equality, Membership, RangeDate, DateBetween, Substring]
FilterValue = Union[Equality, Membership, RangeDate, DateBetween, Substring, RelationFilter, FreeTextSearch]


def _as_utc(value: datetime) -> datetime:
    """타임존 없는 시각은 UTC로 간주합니다 — Naive instants are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_instant(text: str) -> datetime | None:
    """ISO-8601 문자열을 UTC 시각으로 파싱합니다.

    Parse an ISO-8601 date or datetime. Date-only strings mean midnight UTC.

    Returns:
        datetime | None: 파싱된 시각, 실패 시 None (Parsed instant or None)
    """
    text = text.strip()
    if not text:
        return None
    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def parse_range_value(value: str) -> tuple[str, datetime] | None:
    """범위 필터 문자열(">=2024-01-01")을 연산자와 시각으로 분리합니다.

    Split a range-tagged string into its operator and instant.

    Args:
        value: ">=" 또는 "<=" 로 시작하는 문자열 (String starting with ">=" or "<=")

    Returns:
        tuple[str, datetime] | None: (연산자, 시각) 또는 None (None if malformed)
    """
    operator: str = value[:2]
    if operator not in RANGE_OPERATORS:
        return None
    instant: datetime | None = parse_instant(value[2:])
    if instant is None:
        return None
    return operator, instant


def is_blank(value: Any) -> bool:
    """필터에서 제외되는 값인지 확인합니다 — None and "" are never compiled."""
    return value is None or (isinstance(value, str) and value == "")


def is_range_string(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(RANGE_OPERATORS)


def _classify_range(key: str, value: Any) -> RangeDate | DateBetween | None:
    if isinstance(value, DateRange):
        start = _as_utc(value.start) if value.start is not None else None
        end = _as_utc(value.end) if value.end is not None else None
        if start is not None and end is not None:
            return DateBetween(start, end)
        if start is not None:
            return RangeDate(">=", start)
        if end is not None:
            return RangeDate("<=", end)
        return None

    parsed = parse_range_value(value)
    if parsed is None:
        logger.debug("Dropping malformed range filter %s=%r", key, value)
        return None
    return RangeDate(*parsed)


def _classify_field(key: str, value: Any) -> FieldFilter | None:
    """스칼라/배열/범위/문자열 값을 분류합니다 (관계 내부와 최상위 공통).

    Classify a value that is not a relation or free-text search.
    """
    if is_range_string(value) or isinstance(value, DateRange):
        return _classify_range(key, value)

    if isinstance(value, (list, tuple, set, frozenset)):
        return Membership(tuple(value))

    if isinstance(value, str):
        if WILDCARD in value:
            return Substring(value, literal_wildcard=True)
        return Substring(f"{WILDCARD}{value}{WILDCARD}", literal_wildcard=False)

    if isinstance(value, Mapping):
        # 관계 필터는 한 단계만 허용 — Relation filters nest one level only
        logger.debug("Dropping nested mapping filter %s", key)
        return None

    return Equality(value)


def classify(key: str, value: Any) -> FilterValue | None:
    """필터 항목 하나를 분류합니다.

    Classify a single filter entry.

    Args:
        key: 컬럼 이름 또는 관계 별칭 (Column name or relation alias)
        value: 원시 필터 값 (Raw filter value)

    Returns:
        FilterValue | None: 분류 결과, 제외 대상이면 None (None when skipped)
    """
    if is_blank(value):
        return None

    if key == SEARCH_KEY and isinstance(value, str):
        return FreeTextSearch(value)

    if isinstance(value, Mapping):
        entries: list[tuple[int, str, FieldFilter]] = []
        for ordinal, (field, raw) in enumerate(value.items()):
            if is_blank(raw):
                continue
            kind = _classify_field(f"{key}.{field}", raw)
            if kind is not None:
                entries.append((ordinal, field, kind))
        return RelationFilter(key, tuple(entries))

    return _classify_field(key, value)
