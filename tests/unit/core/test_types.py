"""
core/types.py 테스트

모든 Enum이 문자열 직렬화 가능한지 확인
"""

import pytest

from core.types import (
    LIQUID_ASSET_CATEGORIES,
    AppMode,
    AssetCategory,
    BillingCycle,
    EntrySource,
    LedgerType,
    SettlementStatus,
)


class TestEnums:
    """Enum 값 테스트"""

    def test_app_mode(self) -> None:
        assert AppMode("production") == AppMode.PRODUCTION
        assert AppMode.DEVELOPMENT.value == "development"

    def test_ledger_type(self) -> None:
        assert [t.value for t in LedgerType] == ["income", "expense"]

    def test_billing_cycle(self) -> None:
        assert BillingCycle.MONTHLY == "monthly"

    def test_entry_source(self) -> None:
        assert EntrySource.AUTO_SETTLEMENT.value == "auto_settlement"

    def test_settlement_status(self) -> None:
        assert {s.value for s in SettlementStatus} == {"settled", "rolled_back"}

    @pytest.mark.parametrize(
        "enum_value",
        [AppMode.PRODUCTION, LedgerType.INCOME, BillingCycle.YEARLY, EntrySource.MANUAL],
    )
    def test_str_subclass(self, enum_value) -> None:
        """str 상속 (JSON 직렬화 가능)"""
        assert isinstance(enum_value, str)


class TestLiquidAssetCategories:
    def test_values(self) -> None:
        assert LIQUID_ASSET_CATEGORIES == (AssetCategory.CASH.value, AssetCategory.DEPOSIT.value)
