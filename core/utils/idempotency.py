"""
Idempotency 유틸리티

월마감 자동 항목의 dedup_key와 정산 키 생성.
규칙:
- 자동 항목: auto:{ledger_type}:{template_id}:{month}
- 정산 키:   {user_id}:{ledger_type}:{month}
"""

from core.types import LedgerType

# 자동 생성 원장 항목 dedup_key 접두사
AUTO_ENTRY_PREFIX: str = "auto"


def make_auto_entry_dedup_key(
    ledger_type: str,
    template_id: str,
    month: str,
) -> str:
    """결정적 자동 항목 dedup_key 생성

    같은 템플릿이 같은 월에 두 번 생성되지 않도록 ledger_entry.dedup_key에
    UNIQUE 제약으로 저장된다.

    Args:
        ledger_type: income 또는 expense
        template_id: 반복 템플릿 ID
        month: 대상 월 (YYYY-MM)

    Returns:
        dedup_key: auto:{ledger_type}:{template_id}:{month}

    Example:
        >>> make_auto_entry_dedup_key("income", "tpl-1", "2024-02")
        'auto:income:tpl-1:2024-02'
    """
    if not template_id:
        raise ValueError("template_id는 비어 있을 수 없습니다")
    if not month:
        raise ValueError("month는 비어 있을 수 없습니다")

    return f"{AUTO_ENTRY_PREFIX}:{LedgerType(ledger_type).value}:{template_id}:{month}"


def is_auto_entry_key(dedup_key: str | None) -> bool:
    """월마감이 생성한 항목의 dedup_key인지 확인

    Example:
        >>> is_auto_entry_key("auto:expense:tpl-9:2024-03")
        True
        >>> is_auto_entry_key(None)
        False
    """
    if not dedup_key:
        return False

    return dedup_key.startswith(f"{AUTO_ENTRY_PREFIX}:")


def make_settlement_key(user_id: str, ledger_type: str, month: str) -> str:
    """정산 키 (로그/진단용)

    Example:
        >>> make_settlement_key("u1", "expense", "2024-02")
        'u1:expense:2024-02'
    """
    return f"{user_id}:{LedgerType(ledger_type).value}:{month}"
