"""
TemplateStore - 반복 수입/지출 템플릿 저장소

recurring_template 테이블 관리.
월마감 엔진은 list_settlement_templates()만 사용하고,
나머지 CRUD는 시드/테스트/외부 CRUD 레이어용.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.domain.models import RecurringTemplate
from core.types import BillingCycle, LedgerType
from core.utils.months import is_valid_billing_day
from core.utils.timezone import utc_now_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_COLUMNS = (
    "template_id, user_id, ledger_type, name, amount, cycle, billing_day, "
    "is_fixed_income, is_card_included, reflect_to_liquid_asset, "
    "investment_target_category, category, owner, note, created_at, updated_at"
)

# update()에서 변경 가능한 필드
_UPDATABLE_FIELDS = frozenset({
    "name",
    "amount",
    "cycle",
    "billing_day",
    "is_fixed_income",
    "is_card_included",
    "reflect_to_liquid_asset",
    "investment_target_category",
    "category",
    "owner",
    "note",
})


def _validate(amount: Decimal, cycle: BillingCycle, billing_day: int | None) -> None:
    if amount < 0:
        raise ValueError(f"amount must be >= 0: {amount}")
    if cycle == BillingCycle.MONTHLY and not is_valid_billing_day(billing_day):
        raise ValueError(f"monthly template requires billing_day 1-31: {billing_day}")


def _to_db(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (LedgerType, BillingCycle)):
        return value.value
    return value


class TemplateStore:
    """반복 템플릿 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def create(
        self,
        user_id: str,
        ledger_type: LedgerType,
        name: str,
        amount: Decimal,
        cycle: BillingCycle = BillingCycle.MONTHLY,
        billing_day: int | None = None,
        is_fixed_income: bool = False,
        is_card_included: bool = False,
        reflect_to_liquid_asset: bool = False,
        investment_target_category: str | None = None,
        category: str = "",
        owner: str = "",
        note: str = "",
        template_id: str | None = None,
    ) -> RecurringTemplate:
        """템플릿 생성

        Raises:
            ValueError: 금액이 음수이거나 monthly인데 billing_day가 잘못된 경우
        """
        ledger_type = LedgerType(ledger_type)
        cycle = BillingCycle(cycle)
        amount = Decimal(str(amount))
        _validate(amount, cycle, billing_day)

        template_id = template_id or str(uuid.uuid4())
        now = utc_now_iso()

        await self.db.execute(
            f"""
            INSERT INTO recurring_template ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                template_id,
                user_id,
                ledger_type.value,
                name,
                str(amount),
                cycle.value,
                billing_day if cycle == BillingCycle.MONTHLY else None,
                int(is_fixed_income),
                int(is_card_included),
                int(reflect_to_liquid_asset),
                investment_target_category,
                category,
                owner,
                note,
                now,
                now,
            ),
        )
        await self.db.commit()

        logger.debug(f"Template created: {template_id} ({ledger_type.value}, {name})")

        template = await self.get(template_id)
        assert template is not None
        return template

    async def get(self, template_id: str) -> RecurringTemplate | None:
        """ID로 조회"""
        row = await self.db.fetchone_dict(
            f"SELECT {_COLUMNS} FROM recurring_template WHERE template_id = ?",
            (template_id,),
        )
        return RecurringTemplate.from_row(row) if row else None

    async def list_settlement_templates(
        self,
        user_id: str,
        ledger_type: LedgerType,
    ) -> list[RecurringTemplate]:
        """월마감 입력 템플릿 목록

        monthly 주기만 조회한 뒤 유형별 조건을 적용한다.
        - 지출: 카드 포함 항목 제외
        - 수입: 고정수입만
        """
        rows = await self.db.fetchall_dict(
            f"""
            SELECT {_COLUMNS} FROM recurring_template
            WHERE user_id = ? AND ledger_type = ? AND cycle = ?
            ORDER BY created_at, template_id
            """,
            (user_id, LedgerType(ledger_type).value, BillingCycle.MONTHLY.value),
        )
        templates = [RecurringTemplate.from_row(row) for row in rows]
        return [t for t in templates if t.is_settlement_input()]

    async def list_user_ids(self, ledger_type: LedgerType) -> list[str]:
        """월마감 입력 템플릿을 가진 사용자 ID 목록 (배치 월마감용)

        list_settlement_templates 와 같은 조건으로 거른다.
        """
        ledger_type = LedgerType(ledger_type)
        if ledger_type == LedgerType.EXPENSE:
            eligible = "is_card_included = 0"
        else:
            eligible = "is_fixed_income = 1"

        rows = await self.db.fetchall(
            f"""
            SELECT DISTINCT user_id FROM recurring_template
            WHERE ledger_type = ? AND cycle = ? AND {eligible}
            ORDER BY user_id
            """,
            (ledger_type.value, BillingCycle.MONTHLY.value),
        )
        return [row[0] for row in rows]

    async def update(self, template_id: str, **changes: Any) -> RecurringTemplate:
        """템플릿 수정

        이미 생성된 원장 항목과 정산 레코드에는 영향이 없다.

        Raises:
            KeyError: 템플릿이 없는 경우
            ValueError: 변경 불가 필드이거나 값이 잘못된 경우
        """
        current = await self.get(template_id)
        if current is None:
            raise KeyError(template_id)

        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        if "amount" in changes:
            changes["amount"] = Decimal(str(changes["amount"]))
        if "cycle" in changes:
            changes["cycle"] = BillingCycle(changes["cycle"])

        _validate(
            changes.get("amount", current.amount),
            changes.get("cycle", current.cycle),
            changes.get("billing_day", current.billing_day),
        )

        if not changes:
            return current

        assignments = ", ".join(f"{name} = ?" for name in changes)
        params = [_to_db(value) for value in changes.values()]
        params.append(utc_now_iso())
        params.append(template_id)

        await self.db.execute(
            f"""
            UPDATE recurring_template
            SET {assignments}, updated_at = ?
            WHERE template_id = ?
            """,
            tuple(params),
        )
        await self.db.commit()

        updated = await self.get(template_id)
        assert updated is not None
        return updated

    async def delete(self, template_id: str) -> bool:
        """템플릿 삭제

        Returns:
            삭제 여부
        """
        cursor = await self.db.execute(
            "DELETE FROM recurring_template WHERE template_id = ?",
            (template_id,),
        )
        await self.db.commit()
        return cursor.rowcount > 0
