"""
도메인 모델

반복 템플릿, 원장 항목, 유동자산, 정산 레코드.
DB 행(dict)에서 생성하는 from_row 팩토리를 제공한다.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from core.types import BillingCycle, EntrySource, LedgerType, SettlementStatus


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value not in (None, "") else Decimal("0")


def _datetime(value: Any) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass
class RecurringTemplate:
    """반복 수입/지출 템플릿

    Attributes:
        template_id: 템플릿 ID
        user_id: 사용자 ID
        ledger_type: income / expense
        name: 이름
        amount: 금액 (0 이상)
        cycle: monthly / yearly / one_time
        billing_day: 청구일 (monthly일 때만 1~31)
        is_fixed_income: 고정수입 여부 (수입 월마감 대상 조건)
        is_card_included: 카드 결제 포함 여부 (지출 월마감 제외 조건)
        reflect_to_liquid_asset: 유동자산 반영 여부
        investment_target_category: 투자 대상 카테고리 (표시용)
        category: 카테고리
        owner: 소유자 (본인/배우자 등)
        note: 메모
    """

    template_id: str
    user_id: str
    ledger_type: LedgerType
    name: str
    amount: Decimal
    cycle: BillingCycle
    billing_day: int | None = None
    is_fixed_income: bool = False
    is_card_included: bool = False
    reflect_to_liquid_asset: bool = False
    investment_target_category: str | None = None
    category: str = ""
    owner: str = ""
    note: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "RecurringTemplate":
        """DB 행에서 생성"""
        return cls(
            template_id=row["template_id"],
            user_id=row["user_id"],
            ledger_type=LedgerType(row["ledger_type"]),
            name=row["name"],
            amount=_decimal(row["amount"]),
            cycle=BillingCycle(row["cycle"]),
            billing_day=row.get("billing_day"),
            is_fixed_income=bool(row.get("is_fixed_income")),
            is_card_included=bool(row.get("is_card_included")),
            reflect_to_liquid_asset=bool(row.get("reflect_to_liquid_asset")),
            investment_target_category=row.get("investment_target_category"),
            category=row.get("category") or "",
            owner=row.get("owner") or "",
            note=row.get("note") or "",
            created_at=_datetime(row.get("created_at")),
            updated_at=_datetime(row.get("updated_at")),
        )

    def is_settlement_input(self) -> bool:
        """월마감 입력 대상 여부

        - 월 반복(monthly)만 대상
        - 지출: 카드 포함 항목 제외 (카드 간편입력으로 별도 처리)
        - 수입: 고정수입만 포함
        """
        if self.cycle != BillingCycle.MONTHLY:
            return False
        if self.ledger_type == LedgerType.EXPENSE:
            return not self.is_card_included
        return self.is_fixed_income


@dataclass
class LedgerEntry:
    """원장 항목 (날짜가 확정된 실제 거래)"""

    entry_id: str
    user_id: str
    ledger_type: LedgerType
    name: str
    amount: Decimal
    occurred_at: date
    category: str = ""
    entry_source: EntrySource = EntrySource.MANUAL
    reflect_to_liquid_asset: bool = False
    reflected_amount: Decimal = Decimal("0")
    reflected_asset_id: str | None = None
    source_template_id: str | None = None
    settlement_month: str | None = None
    dedup_key: str | None = None
    note: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "LedgerEntry":
        """DB 행에서 생성"""
        return cls(
            entry_id=row["entry_id"],
            user_id=row["user_id"],
            ledger_type=LedgerType(row["ledger_type"]),
            name=row["name"],
            amount=_decimal(row["amount"]),
            occurred_at=date.fromisoformat(row["occurred_at"]),
            category=row.get("category") or "",
            entry_source=EntrySource(row["entry_source"]),
            reflect_to_liquid_asset=bool(row.get("reflect_to_liquid_asset")),
            reflected_amount=_decimal(row.get("reflected_amount")),
            reflected_asset_id=row.get("reflected_asset_id"),
            source_template_id=row.get("source_template_id"),
            settlement_month=row.get("settlement_month"),
            dedup_key=row.get("dedup_key"),
            note=row.get("note") or "",
            created_at=_datetime(row.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 dict"""
        return {
            "id": self.entry_id,
            "ledgerType": self.ledger_type.value,
            "name": self.name,
            "amount": str(self.amount),
            "occurredAt": self.occurred_at.isoformat(),
            "category": self.category,
            "entrySource": self.entry_source.value,
            "reflectToLiquidAsset": self.reflect_to_liquid_asset,
            "reflectedAmount": str(self.reflected_amount),
            "reflectedAssetId": self.reflected_asset_id,
            "sourceTemplateId": self.source_template_id,
            "settlementMonth": self.settlement_month,
            "note": self.note,
        }


@dataclass
class Asset:
    """자산 (월마감은 현금/예금 카테고리만 사용)"""

    asset_id: str
    user_id: str
    category: str
    name: str
    current_value: Decimal
    valuation_date: date | None = None
    note: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Asset":
        """DB 행에서 생성"""
        valuation_date = row.get("valuation_date")
        return cls(
            asset_id=row["asset_id"],
            user_id=row["user_id"],
            category=row["category"],
            name=row["name"],
            current_value=_decimal(row["current_value"]),
            valuation_date=date.fromisoformat(valuation_date) if valuation_date else None,
            note=row.get("note") or "",
            created_at=_datetime(row.get("created_at")),
            updated_at=_datetime(row.get("updated_at")),
        )


@dataclass(frozen=True)
class AppliedDelta:
    """자산에 실제로 적용된 변동분"""

    asset_id: str
    delta: Decimal

    def to_dict(self) -> dict[str, str]:
        return {"asset_id": self.asset_id, "delta": str(self.delta)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppliedDelta":
        return cls(asset_id=data["asset_id"], delta=Decimal(str(data["delta"])))


@dataclass
class SettlementRecord:
    """정산 레코드

    (user_id, ledger_type, month) 당 한 행. version은 상태 전이마다 1씩 증가하며
    낙관적 락(compare-and-swap)에 사용된다.
    """

    user_id: str
    ledger_type: LedgerType
    month: str
    status: SettlementStatus
    version: int
    generated_entry_ids: list[str] = field(default_factory=list)
    applied_deltas: list[AppliedDelta] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SettlementRecord":
        """DB 행에서 생성"""
        entry_ids = json.loads(row["generated_entry_ids_json"] or "[]")
        deltas = json.loads(row["applied_deltas_json"] or "[]")
        return cls(
            user_id=row["user_id"],
            ledger_type=LedgerType(row["ledger_type"]),
            month=row["month"],
            status=SettlementStatus(row["status"]),
            version=int(row["version"]),
            generated_entry_ids=list(entry_ids),
            applied_deltas=[AppliedDelta.from_dict(d) for d in deltas],
            created_at=_datetime(row.get("created_at")),
            updated_at=_datetime(row.get("updated_at")),
        )


@dataclass
class SettlementSummary:
    """월마감 결과"""

    target_month: str
    created_count: int = 0
    skipped_count: int = 0
    reflected_count: int = 0
    total_settled_amount: Decimal = Decimal("0")


@dataclass
class RollbackSummary:
    """정산 취소 결과"""

    target_month: str
    deleted_count: int = 0
    reversed_amount: Decimal = Decimal("0")
