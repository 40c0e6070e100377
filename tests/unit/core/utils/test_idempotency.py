"""
core/utils/idempotency.py 테스트

자동 항목 dedup_key, 정산 키 생성 테스트
"""

import pytest

from core.types import LedgerType
from core.utils.idempotency import (
    AUTO_ENTRY_PREFIX,
    is_auto_entry_key,
    make_auto_entry_dedup_key,
    make_settlement_key,
)


class TestMakeAutoEntryDedupKey:
    """make_auto_entry_dedup_key 함수 테스트"""

    def test_basic_generation(self) -> None:
        """기본 생성"""
        result = make_auto_entry_dedup_key("income", "tpl-1", "2024-02")
        assert result == "auto:income:tpl-1:2024-02"

    def test_enum_ledger_type(self) -> None:
        """Enum 입력도 값으로 직렬화"""
        result = make_auto_entry_dedup_key(LedgerType.EXPENSE, "tpl-9", "2024-03")
        assert result == "auto:expense:tpl-9:2024-03"

    def test_deterministic(self) -> None:
        """동일 입력 → 동일 출력 (결정적)"""
        assert make_auto_entry_dedup_key("income", "t", "2024-01") == make_auto_entry_dedup_key(
            "income", "t", "2024-01"
        )

    def test_month_distinguishes(self) -> None:
        """다른 월 → 다른 키"""
        assert make_auto_entry_dedup_key("income", "t", "2024-01") != make_auto_entry_dedup_key(
            "income", "t", "2024-02"
        )

    def test_empty_template_id_raises(self) -> None:
        with pytest.raises(ValueError, match="template_id"):
            make_auto_entry_dedup_key("income", "", "2024-02")

    def test_empty_month_raises(self) -> None:
        with pytest.raises(ValueError, match="month"):
            make_auto_entry_dedup_key("income", "tpl-1", "")

    def test_invalid_ledger_type_raises(self) -> None:
        with pytest.raises(ValueError):
            make_auto_entry_dedup_key("transfer", "tpl-1", "2024-02")


class TestIsAutoEntryKey:
    """is_auto_entry_key 함수 테스트"""

    def test_auto_key(self) -> None:
        assert is_auto_entry_key(make_auto_entry_dedup_key("expense", "tpl", "2024-02")) is True

    def test_prefix(self) -> None:
        assert AUTO_ENTRY_PREFIX == "auto"

    @pytest.mark.parametrize("value", [None, "", "manual:123", "automatic"])
    def test_non_auto_key(self, value: str | None) -> None:
        assert is_auto_entry_key(value) is False


class TestMakeSettlementKey:
    """make_settlement_key 함수 테스트"""

    def test_format(self) -> None:
        assert make_settlement_key("u1", LedgerType.EXPENSE, "2024-02") == "u1:expense:2024-02"
