"""
SettlementRecordStore - 정산 레코드 저장소

settlement_record 테이블 관리. (user_id, ledger_type, month) 당 한 행이며
상태 전이는 version 비교 후 갱신(compare-and-swap)으로만 일어난다.

전이:
- (없음)        → settled      : insert_settled()
- rolled_back  → settled      : mark_settled(expected_version)
- settled      → rolled_back  : mark_rolled_back(expected_version)
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import aiosqlite

from core.domain.models import AppliedDelta, SettlementRecord
from core.types import LedgerType, SettlementStatus
from core.utils.timezone import utc_now_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_COLUMNS = (
    "user_id, ledger_type, month, status, version, "
    "generated_entry_ids_json, applied_deltas_json, created_at, updated_at"
)


class VersionConflictError(Exception):
    """낙관적 락 충돌 (다른 요청이 먼저 레코드를 변경함)"""

    def __init__(self, user_id: str, ledger_type: str, month: str, expected_version: int | None):
        self.user_id = user_id
        self.ledger_type = ledger_type
        self.month = month
        self.expected_version = expected_version
        super().__init__(
            f"Settlement record changed concurrently: "
            f"{user_id}:{ledger_type}:{month} (expected version={expected_version})"
        )


def _dump_deltas(deltas: list[AppliedDelta]) -> str:
    return json.dumps([d.to_dict() for d in deltas])


class SettlementRecordStore:
    """정산 레코드 저장소

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    store = SettlementRecordStore(db)
    record = await store.get(user_id, LedgerType.INCOME, "2024-02")
    if record is None:
        await store.insert_settled(user_id, LedgerType.INCOME, "2024-02", ids, deltas)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def get(
        self,
        user_id: str,
        ledger_type: LedgerType,
        month: str,
    ) -> SettlementRecord | None:
        """키로 조회"""
        row = await self.db.fetchone_dict(
            f"""
            SELECT {_COLUMNS} FROM settlement_record
            WHERE user_id = ? AND ledger_type = ? AND month = ?
            """,
            (user_id, LedgerType(ledger_type).value, month),
        )
        return SettlementRecord.from_row(row) if row else None

    async def insert_settled(
        self,
        user_id: str,
        ledger_type: LedgerType,
        month: str,
        generated_entry_ids: list[str],
        applied_deltas: list[AppliedDelta],
    ) -> SettlementRecord:
        """최초 정산 레코드 생성 (version=1)

        Raises:
            VersionConflictError: 같은 키의 레코드가 이미 생성된 경우
        """
        ledger_type = LedgerType(ledger_type)
        now = utc_now_iso()

        try:
            await self.db.execute(
                f"""
                INSERT INTO settlement_record ({_COLUMNS})
                VALUES (?, ?, ?, ?, 1, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    ledger_type.value,
                    month,
                    SettlementStatus.SETTLED.value,
                    json.dumps(generated_entry_ids),
                    _dump_deltas(applied_deltas),
                    now,
                    now,
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise VersionConflictError(user_id, ledger_type.value, month, None) from e
        await self.db.commit()

        record = await self.get(user_id, ledger_type, month)
        assert record is not None
        return record

    async def mark_settled(
        self,
        user_id: str,
        ledger_type: LedgerType,
        month: str,
        expected_version: int,
        generated_entry_ids: list[str],
        applied_deltas: list[AppliedDelta],
    ) -> SettlementRecord:
        """rolled_back 레코드를 다시 settled로 전이

        Raises:
            VersionConflictError: version 불일치 또는 상태가 rolled_back이 아닌 경우
        """
        ledger_type = LedgerType(ledger_type)
        cursor = await self.db.execute(
            """
            UPDATE settlement_record
            SET status = ?,
                version = version + 1,
                generated_entry_ids_json = ?,
                applied_deltas_json = ?,
                updated_at = ?
            WHERE user_id = ? AND ledger_type = ? AND month = ?
              AND version = ? AND status = ?
            """,
            (
                SettlementStatus.SETTLED.value,
                json.dumps(generated_entry_ids),
                _dump_deltas(applied_deltas),
                utc_now_iso(),
                user_id,
                ledger_type.value,
                month,
                expected_version,
                SettlementStatus.ROLLED_BACK.value,
            ),
        )
        if cursor.rowcount == 0:
            raise VersionConflictError(user_id, ledger_type.value, month, expected_version)
        await self.db.commit()

        record = await self.get(user_id, ledger_type, month)
        assert record is not None
        return record

    async def mark_rolled_back(
        self,
        user_id: str,
        ledger_type: LedgerType,
        month: str,
        expected_version: int,
    ) -> None:
        """settled 레코드를 rolled_back으로 전이

        생성 항목/변동분 목록은 이력으로 남겨둔다.

        Raises:
            VersionConflictError: version 불일치 또는 상태가 settled가 아닌 경우
        """
        ledger_type = LedgerType(ledger_type)
        cursor = await self.db.execute(
            """
            UPDATE settlement_record
            SET status = ?,
                version = version + 1,
                updated_at = ?
            WHERE user_id = ? AND ledger_type = ? AND month = ?
              AND version = ? AND status = ?
            """,
            (
                SettlementStatus.ROLLED_BACK.value,
                utc_now_iso(),
                user_id,
                ledger_type.value,
                month,
                expected_version,
                SettlementStatus.SETTLED.value,
            ),
        )
        if cursor.rowcount == 0:
            raise VersionConflictError(user_id, ledger_type.value, month, expected_version)
        await self.db.commit()

    async def delete(self, user_id: str, ledger_type: LedgerType, month: str) -> bool:
        """레코드 삭제 (운영 복구용)"""
        cursor = await self.db.execute(
            """
            DELETE FROM settlement_record
            WHERE user_id = ? AND ledger_type = ? AND month = ?
            """,
            (user_id, LedgerType(ledger_type).value, month),
        )
        await self.db.commit()
        return cursor.rowcount > 0
