"""SettlementBatch 통합 테스트"""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import aiosqlite
import pytest

from core.settlement.batch import SKIP_REASON_NOT_SETTLEMENT_DAY, SettlementBatch
from core.settlement.engine import SettlementEngine
from core.settlement.errors import SettlementValidationError
from core.storage.settlement_store import SettlementRecordStore
from core.storage.template_store import TemplateStore
from core.types import LedgerType
from core.utils.timezone import KST

# 2024-02-26 KST
SETTLEMENT_DAY = datetime(2024, 2, 26, 6, 0, tzinfo=KST)


async def _rent(template_store: TemplateStore, user_id: str, amount: str = "500000"):
    return await template_store.create(
        user_id, LedgerType.EXPENSE, "월세", Decimal(amount), billing_day=5
    )


class TestSettlementDay:

    def test_is_settlement_day(self, engine: SettlementEngine) -> None:
        batch = SettlementBatch(engine, batch_day=26, now=lambda: SETTLEMENT_DAY)

        assert batch.is_settlement_day() is True

    def test_kst_boundary(self, engine: SettlementEngine) -> None:
        """UTC 25일 15시 = KST 26일 0시"""
        utc_now = datetime(2024, 2, 25, 15, 0, tzinfo=timezone.utc)
        batch = SettlementBatch(engine, batch_day=26, now=lambda: utc_now)

        assert batch.is_settlement_day() is True

    @pytest.mark.asyncio
    async def test_skipped_when_not_settlement_day(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
    ) -> None:
        await _rent(template_store, "user-1")
        batch = SettlementBatch(engine, batch_day=1, now=lambda: SETTLEMENT_DAY)

        result = await batch.run(LedgerType.EXPENSE)

        assert result.skipped is True
        assert result.skip_reason == SKIP_REASON_NOT_SETTLEMENT_DAY
        assert result.processed_users == 0
        assert await engine.check_settled("user-1", LedgerType.EXPENSE, "2024-02") is False


class TestBatchRun:

    @pytest.mark.asyncio
    async def test_settles_all_users(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
    ) -> None:
        await _rent(template_store, "user-1", "500000")
        await _rent(template_store, "user-2", "700000")
        batch = SettlementBatch(engine, batch_day=26, now=lambda: SETTLEMENT_DAY)

        result = await batch.run("expense")

        assert result.target_month == "2024-02"
        assert result.processed_users == 2
        assert result.settled_users == 2
        assert result.total_settled_amount == Decimal("1200000")
        assert await engine.check_settled("user-2", LedgerType.EXPENSE, "2024-02") is True

    @pytest.mark.asyncio
    async def test_force_and_explicit_month(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
    ) -> None:
        await _rent(template_store, "user-1")
        batch = SettlementBatch(engine, batch_day=1, now=lambda: SETTLEMENT_DAY)

        result = await batch.run(LedgerType.EXPENSE, month="2024-01", force=True)

        assert result.skipped is False
        assert result.target_month == "2024-01"
        assert result.settled_users == 1
        assert await engine.check_settled("user-1", LedgerType.EXPENSE, "2024-01") is True

    @pytest.mark.asyncio
    async def test_already_settled_users_counted(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
    ) -> None:
        await _rent(template_store, "user-1")
        await _rent(template_store, "user-2")
        await engine.settle("user-1", LedgerType.EXPENSE, "2024-02")
        batch = SettlementBatch(engine, batch_day=26, now=lambda: SETTLEMENT_DAY)

        result = await batch.run(LedgerType.EXPENSE)

        assert result.settled_users == 1
        assert result.already_settled_users == 1
        assert result.failed_users == 0

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
    ) -> None:
        """사용자별 실패는 집계 후 다음 사용자 진행"""
        await _rent(template_store, "user-1")
        await _rent(template_store, "user-2")
        real = template_store.list_settlement_templates

        async def flaky(user_id, ledger_type):
            if user_id == "user-1":
                raise aiosqlite.OperationalError("database is locked")
            return await real(user_id, ledger_type)

        batch = SettlementBatch(engine, batch_day=26, now=lambda: SETTLEMENT_DAY)
        with patch.object(template_store, "list_settlement_templates", AsyncMock(side_effect=flaky)):
            result = await batch.run(LedgerType.EXPENSE)

        assert result.failed_users == 1
        assert result.settled_users == 1
        assert "user-1" in result.failures
        assert result.failures["user-1"].startswith("STORAGE_ERROR")
        assert result.to_dict()["failed_users"] == 1

    @pytest.mark.asyncio
    async def test_month_normalized_once(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
    ) -> None:
        await _rent(template_store, "user-1")
        batch = SettlementBatch(engine, batch_day=1, now=lambda: SETTLEMENT_DAY)

        result = await batch.run(LedgerType.EXPENSE, month=" 2024-01 ", force=True)

        assert result.target_month == "2024-01"
        assert result.settled_users == 1
        assert result.failed_users == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ledger_type, month", [("expense", "2024-13"), ("transfer", "2024-02")])
    async def test_invalid_input_rejected_before_users(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
        ledger_type: str,
        month: str,
    ) -> None:
        await _rent(template_store, "user-1")
        batch = SettlementBatch(engine, batch_day=26, now=lambda: SETTLEMENT_DAY)

        with pytest.raises(SettlementValidationError):
            await batch.run(ledger_type, month=month)

        assert await engine.check_settled("user-1", LedgerType.EXPENSE, "2024-02") is False

    @pytest.mark.asyncio
    async def test_ineligible_users_not_processed(
        self,
        engine: SettlementEngine,
        template_store: TemplateStore,
        record_store: SettlementRecordStore,
    ) -> None:
        """카드 포함 지출만 가진 사용자는 정산 레코드가 생기지 않음"""
        await template_store.create(
            "card-only",
            LedgerType.EXPENSE,
            "카드값",
            Decimal("300000"),
            billing_day=10,
            is_card_included=True,
        )
        await _rent(template_store, "user-1")
        batch = SettlementBatch(engine, batch_day=26, now=lambda: SETTLEMENT_DAY)

        result = await batch.run(LedgerType.EXPENSE)

        assert result.processed_users == 1
        assert result.settled_users == 1
        assert await record_store.get("card-only", LedgerType.EXPENSE, "2024-02") is None
