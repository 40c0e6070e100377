"""
월 키 유틸리티

월마감 대상 월("YYYY-MM") 검증과 청구일 보정.
"""

import calendar
import re
from datetime import date

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")

MIN_BILLING_DAY = 1
MAX_BILLING_DAY = 31


class InvalidMonthError(ValueError):
    """잘못된 월 키"""
    pass


def parse_month(raw: str | None) -> tuple[int, int]:
    """월 키를 (연, 월)로 파싱
    
    Args:
        raw: "YYYY-MM" 형식 문자열
        
    Returns:
        (year, month) 튜플
        
    Raises:
        InvalidMonthError: 형식이 틀리거나 월이 1~12 범위를 벗어난 경우
    """
    if not isinstance(raw, str):
        raise InvalidMonthError(f"Invalid month: {raw!r}")
    
    candidate = raw.strip()
    if not MONTH_PATTERN.match(candidate):
        raise InvalidMonthError(f"Invalid month: {raw!r} (expected YYYY-MM)")
    
    year = int(candidate[:4])
    month = int(candidate[5:])
    if not 1 <= month <= 12 or year < 1:
        raise InvalidMonthError(f"Invalid month: {raw!r}")
    
    return year, month


def normalize_month(raw: str | None) -> str:
    """검증 후 정규화된 월 키 반환 (앞뒤 공백 제거)"""
    year, month = parse_month(raw)
    return f"{year:04d}-{month:02d}"


def days_in_month(year: int, month: int) -> int:
    """해당 월의 일 수"""
    return calendar.monthrange(year, month)[1]


def is_valid_billing_day(billing_day: int | None) -> bool:
    """청구일 유효성 (1~31)"""
    return (
        isinstance(billing_day, int)
        and not isinstance(billing_day, bool)
        and MIN_BILLING_DAY <= billing_day <= MAX_BILLING_DAY
    )


def resolve_occurrence_date(month_key: str, billing_day: int) -> date:
    """청구일을 대상 월의 실제 날짜로 변환
    
    청구일이 해당 월의 마지막 날보다 크면 마지막 날로 보정한다.
    
    Example:
        >>> resolve_occurrence_date("2024-04", 31)
        datetime.date(2024, 4, 30)
        >>> resolve_occurrence_date("2023-02", 29)
        datetime.date(2023, 2, 28)
    """
    year, month = parse_month(month_key)
    if not is_valid_billing_day(billing_day):
        raise ValueError(f"Invalid billing_day: {billing_day!r}")
    
    day = min(billing_day, days_in_month(year, month))
    return date(year, month, day)

