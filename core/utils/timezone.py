"""
타임존 유틸리티

저장 시각(created_at/updated_at)은 UTC, 월마감 기준 날짜와 월 키는 KST.
"""

from datetime import date, datetime, timedelta, timezone

# KST 타임존 (UTC+9)
KST = timezone(timedelta(hours=9))


def to_kst(dt: datetime) -> datetime:
    """datetime을 KST로 변환 (naive면 UTC로 간주)

    Example:
        >>> to_kst(datetime(2024, 2, 25, 15, 0, tzinfo=timezone.utc)).day
        26
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(KST)


def now_kst() -> datetime:
    """현재 KST 시각"""
    return datetime.now(KST)


def today_kst() -> date:
    """오늘 날짜 (KST)

    자산 평가일 갱신 기준.
    """
    return now_kst().date()


def utc_now_iso() -> str:
    """현재 UTC 시각 ISO 문자열 (DB 저장용)"""
    return datetime.now(timezone.utc).isoformat()


def month_key_kst(dt: datetime | None = None) -> str:
    """KST 기준 "YYYY-MM" 월 키

    월 미지정 요청의 기본값과 배치 대상 월에 사용한다.

    Args:
        dt: 기준 시각 (None이면 현재 시각)

    Example:
        >>> month_key_kst(datetime(2024, 1, 31, 16, 0, tzinfo=timezone.utc))
        '2024-02'
    """
    kst_dt = to_kst(dt) if dt is not None else now_kst()
    return f"{kst_dt.year:04d}-{kst_dt.month:02d}"
