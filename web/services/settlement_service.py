"""
월마감 서비스

SettlementEngine 호출 결과를 API 응답 dict로 변환.
금액(Decimal)은 정수면 int, 아니면 float으로 내보낸다.
"""

import logging
from decimal import Decimal
from typing import Any

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import SettlementConfig
from core.ledger.store import LedgerStore
from core.settlement.engine import SettlementEngine
from core.settlement.errors import SettlementStorageError
from core.types import LedgerType
from core.utils.idempotency import make_settlement_key

logger = logging.getLogger(__name__)


def to_number(value: Decimal) -> int | float:
    """Decimal → JSON 숫자"""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


class SettlementService:
    """월마감 서비스

    Args:
        db: SQLite 어댑터 (settle/rollback은 쓰기 가능 연결 필요)
        config: 월마감 설정
    """

    def __init__(self, db: SQLiteAdapter, config: SettlementConfig):
        self.db = db
        self.engine = SettlementEngine.from_db(db, config)
        self.ledger_store = LedgerStore(db)

    async def get_status(
        self,
        user_id: str,
        ledger_type: LedgerType | str,
        month: str,
    ) -> dict[str, Any]:
        """월마감 상태 조회"""
        ledger_type, month = self.engine.normalize_key(ledger_type, month)
        settled = await self.engine.check_settled(user_id, ledger_type, month)
        return {"targetMonth": month, "settled": settled}

    async def settle(
        self,
        user_id: str,
        ledger_type: LedgerType | str,
        month: str,
    ) -> dict[str, Any]:
        """월마감 실행"""
        summary = await self.engine.settle(user_id, ledger_type, month)
        return {
            "targetMonth": summary.target_month,
            "createdCount": summary.created_count,
            "skippedCount": summary.skipped_count,
            "reflectedCount": summary.reflected_count,
            "totalSettledAmount": to_number(summary.total_settled_amount),
        }

    async def rollback(
        self,
        user_id: str,
        ledger_type: LedgerType | str,
        month: str,
    ) -> dict[str, Any]:
        """월마감 취소"""
        summary = await self.engine.rollback(user_id, ledger_type, month)
        return {
            "targetMonth": summary.target_month,
            "deletedCount": summary.deleted_count,
            "reversedAmount": to_number(summary.reversed_amount),
        }

    async def list_entries(
        self,
        user_id: str,
        ledger_type: LedgerType | str,
        month: str,
    ) -> dict[str, Any]:
        """해당 월 원장 항목 목록 (수동 + 자동)"""
        ledger_type, month = self.engine.normalize_key(ledger_type, month)

        try:
            entries = await self.ledger_store.list_by_month(user_id, ledger_type, month)
        except aiosqlite.Error as e:
            key = make_settlement_key(user_id, ledger_type, month)
            logger.exception(f"Ledger entry listing failed: {key}")
            raise SettlementStorageError(f"원장 항목 조회 실패: {e}") from e

        items = []
        for entry in entries:
            item = entry.to_dict()
            item["amount"] = to_number(entry.amount)
            item["reflectedAmount"] = to_number(entry.reflected_amount)
            items.append(item)

        return {"targetMonth": month, "entries": items, "count": len(items)}
