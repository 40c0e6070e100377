"""
core/utils/months.py 테스트

월 키 검증과 청구일 보정 테스트
"""

from datetime import date

import pytest

from core.utils.months import (
    InvalidMonthError,
    days_in_month,
    is_valid_billing_day,
    normalize_month,
    parse_month,
    resolve_occurrence_date,
)


class TestParseMonth:
    """parse_month 함수 테스트"""

    def test_valid(self) -> None:
        assert parse_month("2024-02") == (2024, 2)

    def test_strips_whitespace(self) -> None:
        assert normalize_month(" 2024-12 ") == "2024-12"

    @pytest.mark.parametrize(
        "raw",
        ["2024-13", "2024-00", "24-02", "2024-2", "2024/02", "2024-02-01", "", "abcd-ef", None],
    )
    def test_invalid(self, raw: str | None) -> None:
        with pytest.raises(InvalidMonthError):
            parse_month(raw)

    def test_invalid_month_is_value_error(self) -> None:
        """InvalidMonthError는 ValueError 하위 클래스"""
        with pytest.raises(ValueError):
            parse_month("2024-13")


class TestBillingDay:
    """청구일 검증 테스트"""

    @pytest.mark.parametrize("day", [1, 15, 31])
    def test_valid(self, day: int) -> None:
        assert is_valid_billing_day(day) is True

    @pytest.mark.parametrize("day", [0, 32, -1, None, True, "5"])
    def test_invalid(self, day) -> None:
        assert is_valid_billing_day(day) is False


class TestResolveOccurrenceDate:
    """resolve_occurrence_date 함수 테스트"""

    def test_regular_day(self) -> None:
        assert resolve_occurrence_date("2024-02", 25) == date(2024, 2, 25)

    def test_clamp_30_day_month(self) -> None:
        """31일 → 30일 월의 말일"""
        assert resolve_occurrence_date("2024-04", 31) == date(2024, 4, 30)

    def test_clamp_non_leap_february(self) -> None:
        """29일 → 평년 2월 28일"""
        assert resolve_occurrence_date("2023-02", 29) == date(2023, 2, 28)

    def test_leap_february(self) -> None:
        """윤년 2월은 29일까지"""
        assert resolve_occurrence_date("2024-02", 31) == date(2024, 2, 29)

    def test_invalid_billing_day(self) -> None:
        with pytest.raises(ValueError, match="billing_day"):
            resolve_occurrence_date("2024-02", 0)


class TestHelpers:
    def test_days_in_month(self) -> None:
        assert days_in_month(2023, 2) == 28
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2024, 12) == 31
