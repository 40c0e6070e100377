"""
Ledger 저장소

날짜가 확정된 원장 항목(ledger_entry) 저장 및 조회.
수동 입력 항목과 월마감 자동 생성 항목이 같은 테이블에 저장되며,
자동 항목은 dedup_key(UNIQUE)로 (템플릿, 월) 당 1건만 허용된다.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from core.domain.models import LedgerEntry
from core.types import EntrySource, LedgerType
from core.utils.idempotency import make_auto_entry_dedup_key
from core.utils.months import parse_month

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_COLUMNS = (
    "entry_id, user_id, ledger_type, name, amount, occurred_at, category, "
    "entry_source, reflect_to_liquid_asset, reflected_amount, reflected_asset_id, "
    "source_template_id, settlement_month, dedup_key, note, created_at"
)


class LedgerStore:
    """Ledger 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def create_entry(
        self,
        user_id: str,
        ledger_type: LedgerType,
        name: str,
        amount: Decimal,
        occurred_at: date,
        category: str = "",
        entry_source: EntrySource = EntrySource.MANUAL,
        reflect_to_liquid_asset: bool = False,
        reflected_amount: Decimal = Decimal("0"),
        reflected_asset_id: str | None = None,
        source_template_id: str | None = None,
        settlement_month: str | None = None,
        note: str = "",
        entry_id: str | None = None,
    ) -> LedgerEntry:
        """원장 항목 저장

        자동 항목(AUTO_SETTLEMENT)은 source_template_id와 settlement_month가
        필수이며 dedup_key가 함께 저장된다.

        Raises:
            ValueError: 자동 항목에 템플릿/월 정보가 없는 경우
            sqlite3.IntegrityError: 같은 (템플릿, 월) 자동 항목이 이미 있는 경우
        """
        ledger_type = LedgerType(ledger_type)
        entry_source = EntrySource(entry_source)

        dedup_key = None
        if entry_source == EntrySource.AUTO_SETTLEMENT:
            if not source_template_id or not settlement_month:
                raise ValueError("auto entry requires source_template_id and settlement_month")
            dedup_key = make_auto_entry_dedup_key(
                ledger_type, source_template_id, settlement_month
            )

        entry = LedgerEntry(
            entry_id=entry_id or str(uuid.uuid4()),
            user_id=user_id,
            ledger_type=ledger_type,
            name=name,
            amount=Decimal(str(amount)),
            occurred_at=occurred_at,
            category=category,
            entry_source=entry_source,
            reflect_to_liquid_asset=reflect_to_liquid_asset,
            reflected_amount=reflected_amount,
            reflected_asset_id=reflected_asset_id,
            source_template_id=source_template_id,
            settlement_month=settlement_month,
            dedup_key=dedup_key,
            note=note,
            created_at=datetime.now(timezone.utc),
        )

        await self.db.execute(
            f"""
            INSERT INTO ledger_entry ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.entry_id,
                entry.user_id,
                entry.ledger_type.value,
                entry.name,
                str(entry.amount),
                entry.occurred_at.isoformat(),
                entry.category,
                entry.entry_source.value,
                int(entry.reflect_to_liquid_asset),
                str(entry.reflected_amount),
                entry.reflected_asset_id,
                entry.source_template_id,
                entry.settlement_month,
                entry.dedup_key,
                entry.note,
                entry.created_at.isoformat(),
            ),
        )
        await self.db.commit()

        logger.debug(f"Saved ledger entry: {entry.entry_id}")
        return entry

    async def get(self, entry_id: str) -> LedgerEntry | None:
        """ID로 조회"""
        row = await self.db.fetchone_dict(
            f"SELECT {_COLUMNS} FROM ledger_entry WHERE entry_id = ?",
            (entry_id,),
        )
        return LedgerEntry.from_row(row) if row else None

    async def find_auto_entry(
        self,
        ledger_type: LedgerType,
        template_id: str,
        month: str,
    ) -> LedgerEntry | None:
        """(템플릿, 월)에 해당하는 자동 생성 항목 조회"""
        dedup_key = make_auto_entry_dedup_key(ledger_type, template_id, month)
        row = await self.db.fetchone_dict(
            f"SELECT {_COLUMNS} FROM ledger_entry WHERE dedup_key = ?",
            (dedup_key,),
        )
        return LedgerEntry.from_row(row) if row else None

    async def list_by_month(
        self,
        user_id: str,
        ledger_type: LedgerType,
        month: str,
    ) -> list[LedgerEntry]:
        """해당 월 발생 항목 목록 (발생일, 생성순)"""
        year, mon = parse_month(month)
        prefix = f"{year:04d}-{mon:02d}-%"
        rows = await self.db.fetchall_dict(
            f"""
            SELECT {_COLUMNS} FROM ledger_entry
            WHERE user_id = ? AND ledger_type = ? AND occurred_at LIKE ?
            ORDER BY occurred_at, created_at, entry_id
            """,
            (user_id, LedgerType(ledger_type).value, prefix),
        )
        return [LedgerEntry.from_row(row) for row in rows]

    async def delete_entries(self, entry_ids: list[str]) -> int:
        """여러 항목 삭제

        Returns:
            실제 삭제된 건수
        """
        if not entry_ids:
            return 0

        placeholders = ", ".join("?" for _ in entry_ids)
        cursor = await self.db.execute(
            f"DELETE FROM ledger_entry WHERE entry_id IN ({placeholders})",
            tuple(entry_ids),
        )
        await self.db.commit()
        return cursor.rowcount
