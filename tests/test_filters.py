"""필터 분류기 테스트.

Filter classifier tests — one entry in, one predicate family out.
"""

from datetime import datetime, timezone

from repo_catalog.core.query.filters import (
    DateBetween,
    DateRange,
    Equality,
    FreeTextSearch,
    Membership,
    RangeDate,
    RelationFilter,
    Substring,
    classify,
    parse_instant,
    parse_range_value,
)

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
JAN_31 = datetime(2024, 1, 31, tzinfo=timezone.utc)


class TestSkipped:
    """제외되는 값 테스트."""

    def test_none_is_skipped(self):
        """None 값은 분류하지 않음."""
        assert classify("language", None) is None

    def test_empty_string_is_skipped(self):
        """빈 문자열은 분류하지 않음."""
        assert classify("language", "") is None

    def test_falsy_values_are_not_skipped(self):
        """0과 False는 등호 조건으로 유지."""
        assert classify("stars", 0) == Equality(0)
        assert classify("archived", False) == Equality(False)


class TestFreeTextSearch:
    """전문 검색 키 테스트."""

    def test_search_key_with_string(self):
        assert classify("search", "rocket") == FreeTextSearch("rocket")

    def test_search_key_wins_over_range_marker(self):
        """search 키는 범위 표식보다 우선."""
        assert classify("search", ">=2024-01-01") == FreeTextSearch(">=2024-01-01")

    def test_search_key_with_non_string_is_equality(self):
        assert classify("search", 5) == Equality(5)


class TestRelationFilter:
    """관계 필터 테스트."""

    def test_mapping_becomes_relation_filter(self):
        kind = classify("owner", {"login": "octocat"})
        assert isinstance(kind, RelationFilter)
        assert kind.relation == "owner"
        assert kind.entries == ((0, "login", Substring("%octocat%", literal_wildcard=False)),)

    def test_nested_kinds_are_classified(self):
        """관계 내부 필드도 같은 규칙으로 분류."""
        kind = classify("owner", {"type": ["User", "Organization"], "created_at": ">=2024-01-01"})
        assert kind.entries == (
            (0, "type", Membership(("User", "Organization"))),
            (1, "created_at", RangeDate(">=", JAN_1)),
        )

    def test_blank_nested_fields_keep_ordinals(self):
        """빈 필드를 건너뛰어도 이후 필드의 순번은 유지."""
        kind = classify("owner", {"login": "", "type": "User"})
        assert kind.entries == ((1, "type", Substring("%User%", literal_wildcard=False)),)

    def test_nested_mapping_is_dropped(self):
        """관계 필터는 한 단계만 허용."""
        kind = classify("owner", {"repositories": {"name": "x"}})
        assert kind == RelationFilter("owner", ())


class TestRange:
    """날짜 범위 필터 테스트."""

    def test_lower_bound(self):
        assert classify("created_at", ">=2024-01-01") == RangeDate(">=", JAN_1)

    def test_upper_bound_with_time(self):
        assert classify("created_at", "<=2024-01-31T00:00:00Z") == RangeDate("<=", JAN_31)

    def test_offset_is_preserved(self):
        kind = classify("created_at", ">=2024-01-01T09:00:00+09:00")
        assert kind.instant == JAN_1

    def test_malformed_range_is_dropped(self):
        """파싱할 수 없는 범위 값은 예외 없이 제외."""
        assert classify("created_at", ">=not-a-date") is None
        assert classify("created_at", "<=") is None

    def test_closed_range(self):
        assert classify("created_at", DateRange(JAN_1, JAN_31)) == DateBetween(JAN_1, JAN_31)

    def test_half_open_date_range(self):
        assert classify("created_at", DateRange(start=JAN_1)) == RangeDate(">=", JAN_1)
        assert classify("created_at", DateRange(end=JAN_31)) == RangeDate("<=", JAN_31)

    def test_empty_date_range_is_dropped(self):
        assert classify("created_at", DateRange()) is None

    def test_naive_instant_is_utc(self):
        naive = DateRange(datetime(2024, 1, 1), datetime(2024, 1, 31))
        assert classify("created_at", naive) == DateBetween(JAN_1, JAN_31)


class TestMembership:
    """목록 필터 테스트."""

    def test_list_becomes_membership(self):
        assert classify("name", ["a", "b", "c"]) == Membership(("a", "b", "c"))

    def test_empty_list_is_kept(self):
        """빈 목록은 제외하지 않음 (항상 거짓인 조건)."""
        assert classify("name", []) == Membership(())

    def test_tuple_becomes_membership(self):
        assert classify("stars", (1, 2)) == Membership((1, 2))


class TestSubstringAndEquality:
    """부분 문자열 / 등호 필터 테스트."""

    def test_plain_string_is_wrapped(self):
        assert classify("language", "typescript") == Substring("%typescript%", literal_wildcard=False)

    def test_wildcard_string_is_literal(self):
        """'%'가 포함되면 사용자가 지정한 패턴을 그대로 사용."""
        assert classify("name", "rock%") == Substring("rock%", literal_wildcard=True)

    def test_number_is_equality(self):
        assert classify("stars", 300) == Equality(300)


class TestParsing:
    """시각 파싱 헬퍼 테스트."""

    def test_parse_date_only(self):
        assert parse_instant("2024-01-01") == JAN_1

    def test_parse_invalid(self):
        assert parse_instant("yesterday") is None
        assert parse_instant("   ") is None

    def test_parse_range_value(self):
        assert parse_range_value("<=2024-01-31") == ("<=", JAN_31)
        assert parse_range_value("==2024-01-31") is None
