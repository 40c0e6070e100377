"""
유틸리티 패키지

dedup_key 생성, 월 키 처리, 타임존 처리 등 공통 유틸리티
"""

from core.utils.timezone import (
    KST,
    to_kst,
    now_kst,
    today_kst,
    utc_now_iso,
    month_key_kst,
)
from core.utils.months import (
    InvalidMonthError,
    parse_month,
    normalize_month,
    resolve_occurrence_date,
)
from core.utils.idempotency import (
    make_auto_entry_dedup_key,
    make_settlement_key,
)

__all__ = [
    "KST",
    "to_kst",
    "today_kst",
    "utc_now_iso",
    "now_kst",
    "month_key_kst",
    "InvalidMonthError",
    "parse_month",
    "normalize_month",
    "resolve_occurrence_date",
    "make_auto_entry_dedup_key",
    "make_settlement_key",
]
