"""SettlementRecordStore 통합 테스트 (version compare-and-swap)"""

from decimal import Decimal

import pytest

from core.domain.models import AppliedDelta
from core.storage.settlement_store import SettlementRecordStore, VersionConflictError
from core.types import LedgerType, SettlementStatus


class TestSettlementRecordStore:

    @pytest.mark.asyncio
    async def test_insert_settled(self, record_store: SettlementRecordStore) -> None:
        record = await record_store.insert_settled(
            "user-1",
            LedgerType.INCOME,
            "2024-02",
            ["e-1", "e-2"],
            [AppliedDelta("a-1", Decimal("3000000"))],
        )

        assert record.status == SettlementStatus.SETTLED
        assert record.version == 1
        assert record.generated_entry_ids == ["e-1", "e-2"]
        assert record.applied_deltas == [AppliedDelta("a-1", Decimal("3000000"))]

    @pytest.mark.asyncio
    async def test_get_missing(self, record_store: SettlementRecordStore) -> None:
        assert await record_store.get("user-1", LedgerType.INCOME, "2024-02") is None

    @pytest.mark.asyncio
    async def test_insert_duplicate_conflicts(self, record_store: SettlementRecordStore) -> None:
        await record_store.insert_settled("user-1", LedgerType.INCOME, "2024-02", [], [])

        with pytest.raises(VersionConflictError):
            await record_store.insert_settled("user-1", LedgerType.INCOME, "2024-02", [], [])

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, record_store: SettlementRecordStore) -> None:
        await record_store.insert_settled("user-1", LedgerType.INCOME, "2024-02", [], [])
        await record_store.insert_settled("user-1", LedgerType.EXPENSE, "2024-02", [], [])
        await record_store.insert_settled("user-1", LedgerType.INCOME, "2024-03", [], [])
        await record_store.insert_settled("user-2", LedgerType.INCOME, "2024-02", [], [])

        record = await record_store.get("user-2", LedgerType.INCOME, "2024-02")
        assert record.version == 1

    @pytest.mark.asyncio
    async def test_transitions_increment_version(self, record_store: SettlementRecordStore) -> None:
        await record_store.insert_settled("user-1", LedgerType.EXPENSE, "2024-02", ["e-1"], [])

        await record_store.mark_rolled_back("user-1", LedgerType.EXPENSE, "2024-02", expected_version=1)
        rolled_back = await record_store.get("user-1", LedgerType.EXPENSE, "2024-02")

        assert rolled_back.status == SettlementStatus.ROLLED_BACK
        assert rolled_back.version == 2

        resettled = await record_store.mark_settled(
            "user-1", LedgerType.EXPENSE, "2024-02",
            expected_version=2,
            generated_entry_ids=["e-9"],
            applied_deltas=[AppliedDelta("a-1", Decimal("-10"))],
        )

        assert resettled.status == SettlementStatus.SETTLED
        assert resettled.version == 3
        assert resettled.generated_entry_ids == ["e-9"]

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, record_store: SettlementRecordStore) -> None:
        await record_store.insert_settled("user-1", LedgerType.EXPENSE, "2024-02", [], [])
        await record_store.mark_rolled_back("user-1", LedgerType.EXPENSE, "2024-02", expected_version=1)

        with pytest.raises(VersionConflictError):
            await record_store.mark_settled(
                "user-1", LedgerType.EXPENSE, "2024-02",
                expected_version=1, generated_entry_ids=[], applied_deltas=[],
            )

    @pytest.mark.asyncio
    async def test_wrong_state_conflicts(self, record_store: SettlementRecordStore) -> None:
        """settled 상태에서 mark_settled 불가"""
        await record_store.insert_settled("user-1", LedgerType.EXPENSE, "2024-02", [], [])

        with pytest.raises(VersionConflictError):
            await record_store.mark_settled(
                "user-1", LedgerType.EXPENSE, "2024-02",
                expected_version=1, generated_entry_ids=[], applied_deltas=[],
            )

        await record_store.db.rollback()

    @pytest.mark.asyncio
    async def test_delete(self, record_store: SettlementRecordStore) -> None:
        await record_store.insert_settled("user-1", LedgerType.EXPENSE, "2024-02", [], [])

        assert await record_store.delete("user-1", LedgerType.EXPENSE, "2024-02") is True
        assert await record_store.get("user-1", LedgerType.EXPENSE, "2024-02") is None
