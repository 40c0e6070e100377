"""
AssetStore - 자산 잔액 저장소

asset 테이블 관리. 월마감은 유동자산(cash/deposit)만 조회/조정한다.
잔액 조정은 SQL 한 문장으로 읽기-수정-쓰기를 하지 않고,
호출자가 연 트랜잭션 안에서 조회 후 갱신한다.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from core.domain.models import Asset
from core.types import LIQUID_ASSET_CATEGORIES, AssetCategory
from core.utils.timezone import utc_now_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_COLUMNS = (
    "asset_id, user_id, category, name, current_value, valuation_date, "
    "note, created_at, updated_at"
)


class AssetStore:
    """자산 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def create(
        self,
        user_id: str,
        category: str,
        name: str,
        current_value: Decimal = Decimal("0"),
        valuation_date: date | None = None,
        note: str = "",
        asset_id: str | None = None,
    ) -> Asset:
        """자산 생성"""
        asset_id = asset_id or str(uuid.uuid4())
        now = utc_now_iso()

        await self.db.execute(
            f"""
            INSERT INTO asset ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                asset_id,
                user_id,
                category.value if isinstance(category, AssetCategory) else category,
                name,
                str(Decimal(str(current_value))),
                valuation_date.isoformat() if valuation_date else None,
                note,
                now,
                now,
            ),
        )
        await self.db.commit()

        logger.debug(f"Asset created: {asset_id} ({category}, {name})")

        asset = await self.get(asset_id)
        assert asset is not None
        return asset

    async def get(self, asset_id: str) -> Asset | None:
        """ID로 조회"""
        row = await self.db.fetchone_dict(
            f"SELECT {_COLUMNS} FROM asset WHERE asset_id = ?",
            (asset_id,),
        )
        return Asset.from_row(row) if row else None

    async def list_liquid_assets(self, user_id: str) -> list[Asset]:
        """사용자의 유동자산(cash/deposit) 목록"""
        placeholders = ", ".join("?" for _ in LIQUID_ASSET_CATEGORIES)
        rows = await self.db.fetchall_dict(
            f"""
            SELECT {_COLUMNS} FROM asset
            WHERE user_id = ? AND category IN ({placeholders})
            ORDER BY asset_id
            """,
            (user_id, *LIQUID_ASSET_CATEGORIES),
        )
        return [Asset.from_row(row) for row in rows]

    async def apply_delta(
        self,
        asset_id: str,
        delta: Decimal,
        floor_at_zero: bool = False,
        valuation_date: date | None = None,
    ) -> Decimal | None:
        """잔액에 delta 적용

        Args:
            asset_id: 자산 ID
            delta: 변동분 (+ 증가, - 감소)
            floor_at_zero: True면 잔액이 0 미만으로 내려가지 않도록 제한
            valuation_date: 갱신할 평가일 (None이면 유지)

        Returns:
            실제 적용된 delta. 자산이 없으면 None.
        """
        asset = await self.get(asset_id)
        if asset is None:
            return None

        new_value = asset.current_value + delta
        if floor_at_zero and new_value < 0:
            new_value = Decimal("0")
        applied = new_value - asset.current_value

        now = utc_now_iso()
        await self.db.execute(
            """
            UPDATE asset
            SET current_value = ?,
                valuation_date = COALESCE(?, valuation_date),
                updated_at = ?
            WHERE asset_id = ?
            """,
            (
                str(new_value),
                valuation_date.isoformat() if valuation_date else None,
                now,
                asset_id,
            ),
        )
        await self.db.commit()

        return applied

    async def delete(self, asset_id: str) -> bool:
        """자산 삭제"""
        cursor = await self.db.execute(
            "DELETE FROM asset WHERE asset_id = ?",
            (asset_id,),
        )
        await self.db.commit()
        return cursor.rowcount > 0
