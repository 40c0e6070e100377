"""
Settlement Engine - 월마감 엔진

반복 템플릿을 대상 월의 원장 항목으로 생성(settle)하고,
생성 결과를 정확히 되돌리는 취소(rollback)를 제공.

핵심 규칙:
- (user_id, ledger_type, month) 당 활성 정산은 최대 1건
- 템플릿별 효과(항목 생성 + 자산 반영)는 하나의 트랜잭션
- 실제로 적용된 변동분만 기록하고, 취소는 기록된 값만 되돌린다
- 정산 레코드 전이는 version 비교(compare-and-swap)로만 일어난다

재시도 수렴:
정산 도중 실패하면 이미 커밋된 템플릿 결과는 남는다.
재시도 시 해당 템플릿은 skip 되지만 기존 항목을 레코드에 편입(adopt)하므로
이후 취소는 여전히 전체를 되돌린다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import aiosqlite

from core.config.loader import SettlementConfig
from core.constants import Defaults
from core.domain.models import (
    AppliedDelta,
    Asset,
    LedgerEntry,
    RecurringTemplate,
    RollbackSummary,
    SettlementSummary,
)
from core.domain.state_machines import SettlementStateMachine
from core.ledger.store import LedgerStore
from core.settlement.errors import (
    AlreadySettledError,
    NotSettledError,
    SettlementConflictError,
    SettlementStorageError,
    SettlementValidationError,
)
from core.settlement.selection import AssetSelector, select_most_recently_valued
from core.storage.asset_store import AssetStore
from core.storage.settlement_store import SettlementRecordStore, VersionConflictError
from core.storage.template_store import TemplateStore
from core.types import AssetCategory, EntrySource, LedgerType
from core.utils.idempotency import make_settlement_key
from core.utils.months import (
    InvalidMonthError,
    is_valid_billing_day,
    normalize_month,
    resolve_occurrence_date,
)
from core.utils.timezone import today_kst

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass
class _TemplateOutcome:
    """템플릿 1건 처리 결과"""

    entry: LedgerEntry | None
    created: bool
    applied_delta: AppliedDelta | None = None


class SettlementEngine:
    """월마감 엔진

    Args:
        db: SQLiteAdapter (트랜잭션 경계)
        template_store: 반복 템플릿 저장소
        ledger_store: 원장 저장소
        asset_store: 자산 저장소
        record_store: 정산 레코드 저장소
        config: 월마감 설정
        asset_selector: 반영 대상 유동자산 선택 전략
        today: 오늘 날짜(KST) 제공 함수 (테스트용)

    사용 예시:
    ```python
    engine = SettlementEngine.from_db(db, settings.settlement)

    summary = await engine.settle("user-1", LedgerType.INCOME, "2024-02")
    result = await engine.rollback("user-1", LedgerType.INCOME, "2024-02")
    ```
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        template_store: TemplateStore,
        ledger_store: LedgerStore,
        asset_store: AssetStore,
        record_store: SettlementRecordStore,
        config: SettlementConfig | None = None,
        asset_selector: AssetSelector = select_most_recently_valued,
        today: Callable[[], date] = today_kst,
    ):
        self.db = db
        self.template_store = template_store
        self.ledger_store = ledger_store
        self.asset_store = asset_store
        self.record_store = record_store
        self.config = config or SettlementConfig()
        self.asset_selector = asset_selector
        self._today = today

    @classmethod
    def from_db(
        cls,
        db: SQLiteAdapter,
        config: SettlementConfig | None = None,
        asset_selector: AssetSelector = select_most_recently_valued,
    ) -> SettlementEngine:
        """하나의 연결을 공유하는 저장소들로 엔진 생성"""
        return cls(
            db=db,
            template_store=TemplateStore(db),
            ledger_store=LedgerStore(db),
            asset_store=AssetStore(db),
            record_store=SettlementRecordStore(db),
            config=config,
            asset_selector=asset_selector,
        )

    # =========================================================================
    # Public API
    # =========================================================================

    async def check_settled(
        self,
        user_id: str,
        ledger_type: LedgerType | str,
        month: str,
    ) -> bool:
        """해당 월 활성 정산 존재 여부"""
        ledger_type, month = self.normalize_key(ledger_type, month)
        key = make_settlement_key(user_id, ledger_type, month)

        try:
            record = await self.record_store.get(user_id, ledger_type, month)
        except aiosqlite.Error as e:
            logger.exception(f"Settlement status lookup failed: {key}")
            raise SettlementStorageError(f"정산 상태 조회 실패: {e}") from e

        return SettlementStateMachine.from_status(record.status if record else None).is_settled

    async def settle(
        self,
        user_id: str,
        ledger_type: LedgerType | str,
        month: str,
    ) -> SettlementSummary:
        """월마감 실행

        활성 정산 레코드가 있으면 아무 작업 없이 ALREADY_SETTLED.
        레코드가 없거나 취소된 상태에서 다시 호출하면 이미 생성된 자동 항목은
        skip 되므로 created_count=0, skipped_count=N 으로 수렴한다.

        Raises:
            SettlementValidationError: 잘못된 월/유형
            AlreadySettledError: 이미 정산된 월
            SettlementConflictError: 동시 요청에 밀린 경우
            SettlementStorageError: 저장소 오류
        """
        ledger_type, month = self.normalize_key(ledger_type, month)
        key = make_settlement_key(user_id, ledger_type, month)

        try:
            record = await self.record_store.get(user_id, ledger_type, month)
        except aiosqlite.Error as e:
            logger.exception(f"Settlement record lookup failed: {key}")
            raise SettlementStorageError(f"정산 레코드 조회 실패: {e}") from e

        machine = SettlementStateMachine.from_status(record.status if record else None)
        if not machine.can_settle:
            logger.info(f"Settle rejected: {key} (state={machine.state})")
            raise AlreadySettledError(f"이미 {month} 월마감이 완료되었습니다")

        observed_version = record.version if record else None
        summary = SettlementSummary(target_month=month)
        generated_entry_ids: list[str] = []
        applied_deltas: list[AppliedDelta] = []

        try:
            templates = await self.template_store.list_settlement_templates(
                user_id, ledger_type
            )

            for template in templates:
                outcome = await self._settle_template(user_id, template, month)

                if outcome.entry is not None:
                    generated_entry_ids.append(outcome.entry.entry_id)
                if outcome.applied_delta is not None:
                    applied_deltas.append(outcome.applied_delta)

                if not outcome.created:
                    summary.skipped_count += 1
                    continue

                summary.created_count += 1
                summary.total_settled_amount += template.amount
                if outcome.applied_delta is not None:
                    summary.reflected_count += 1

            async with self.db.transaction():
                if observed_version is None:
                    await self.record_store.insert_settled(
                        user_id, ledger_type, month, generated_entry_ids, applied_deltas
                    )
                else:
                    await self.record_store.mark_settled(
                        user_id,
                        ledger_type,
                        month,
                        expected_version=observed_version,
                        generated_entry_ids=generated_entry_ids,
                        applied_deltas=applied_deltas,
                    )
        except VersionConflictError as e:
            logger.warning(f"Settlement lost race: {key} ({e})")
            raise SettlementConflictError(
                f"{month} 월마감이 다른 요청에 의해 변경되었습니다. 다시 시도해주세요"
            ) from e
        except aiosqlite.Error as e:
            logger.exception(f"Settlement storage failure: {key}")
            raise SettlementStorageError(f"월마감 저장 실패: {e}") from e

        logger.info(
            f"Settled {key}: created={summary.created_count}, "
            f"skipped={summary.skipped_count}, reflected={summary.reflected_count}, "
            f"total={summary.total_settled_amount}"
        )
        return summary

    async def rollback(
        self,
        user_id: str,
        ledger_type: LedgerType | str,
        month: str,
    ) -> RollbackSummary:
        """월마감 취소

        정산 레코드에 기록된 항목만 삭제하고 기록된 변동분만 역적용한다.
        템플릿은 다시 읽지 않는다.

        Raises:
            SettlementValidationError: 잘못된 월/유형
            NotSettledError: 활성 정산이 없는 경우
            SettlementConflictError: 동시 요청에 밀린 경우
            SettlementStorageError: 저장소 오류
        """
        ledger_type, month = self.normalize_key(ledger_type, month)
        key = make_settlement_key(user_id, ledger_type, month)

        try:
            record = await self.record_store.get(user_id, ledger_type, month)
        except aiosqlite.Error as e:
            logger.exception(f"Settlement record lookup failed: {key}")
            raise SettlementStorageError(f"정산 레코드 조회 실패: {e}") from e

        machine = SettlementStateMachine.from_status(record.status if record else None)
        if record is None or not machine.can_rollback:
            logger.info(f"Rollback rejected: {key} (state={machine.state})")
            raise NotSettledError(f"{month} 월마감 내역이 없습니다")

        summary = RollbackSummary(target_month=month)

        try:
            async with self.db.transaction():
                await self.record_store.mark_rolled_back(
                    user_id, ledger_type, month, expected_version=record.version
                )

                summary.deleted_count = await self.ledger_store.delete_entries(
                    record.generated_entry_ids
                )

                for delta in record.applied_deltas:
                    applied = await self.asset_store.apply_delta(
                        delta.asset_id, -delta.delta, floor_at_zero=False
                    )
                    if applied is None:
                        logger.warning(
                            f"Rollback skipped missing asset: {key} "
                            f"(asset_id={delta.asset_id}, delta={delta.delta})"
                        )
                        continue
                    summary.reversed_amount += abs(delta.delta)
        except VersionConflictError as e:
            logger.warning(f"Rollback lost race: {key} ({e})")
            raise SettlementConflictError(
                f"{month} 월마감이 다른 요청에 의해 변경되었습니다. 다시 시도해주세요"
            ) from e
        except aiosqlite.Error as e:
            logger.exception(f"Rollback storage failure: {key}")
            raise SettlementStorageError(f"월마감 취소 실패: {e}") from e

        logger.info(
            f"Rolled back {key}: deleted={summary.deleted_count}, "
            f"reversed={summary.reversed_amount}"
        )
        return summary

    # =========================================================================
    # Internal
    # =========================================================================

    @staticmethod
    def normalize_key(ledger_type: LedgerType | str, month: str) -> tuple[LedgerType, str]:
        """유형/월 검증 및 정규화

        Raises:
            SettlementValidationError: 유효하지 않은 유형 또는 월
        """
        try:
            ledger_type = LedgerType(ledger_type)
        except ValueError as e:
            raise SettlementValidationError(f"유효하지 않은 유형입니다: {ledger_type!r}") from e

        try:
            month = normalize_month(month)
        except InvalidMonthError as e:
            raise SettlementValidationError(
                f"유효하지 않은 월입니다: {month!r} (YYYY-MM)"
            ) from e

        return ledger_type, month

    async def _settle_template(
        self,
        user_id: str,
        template: RecurringTemplate,
        month: str,
    ) -> _TemplateOutcome:
        """템플릿 1건 처리

        이미 자동 항목이 있으면 생성하지 않고 편입한다.
        동시 생성으로 dedup_key 충돌이 나면 트랜잭션을 되돌리고 편입한다.
        """
        if not is_valid_billing_day(template.billing_day):
            logger.warning(
                f"Template skipped (invalid billing_day={template.billing_day!r}): "
                f"{template.template_id}"
            )
            return _TemplateOutcome(entry=None, created=False)

        existing = await self.ledger_store.find_auto_entry(
            template.ledger_type, template.template_id, month
        )
        if existing is not None:
            logger.debug(f"Template already materialized: {template.template_id} ({month})")
            return self._adopt(existing)

        occurred_at = resolve_occurrence_date(month, template.billing_day)

        try:
            async with self.db.transaction():
                applied_delta = None
                if template.reflect_to_liquid_asset:
                    applied_delta = await self._reflect(user_id, template)

                entry = await self.ledger_store.create_entry(
                    user_id=user_id,
                    ledger_type=template.ledger_type,
                    name=template.name,
                    amount=template.amount,
                    occurred_at=occurred_at,
                    category=template.category,
                    entry_source=EntrySource.AUTO_SETTLEMENT,
                    reflect_to_liquid_asset=template.reflect_to_liquid_asset,
                    reflected_amount=applied_delta.delta if applied_delta else Decimal("0"),
                    reflected_asset_id=applied_delta.asset_id if applied_delta else None,
                    source_template_id=template.template_id,
                    settlement_month=month,
                    note=template.note,
                )
        except aiosqlite.IntegrityError:
            existing = await self.ledger_store.find_auto_entry(
                template.ledger_type, template.template_id, month
            )
            if existing is None:
                raise
            logger.debug(f"Concurrent insert adopted: {template.template_id} ({month})")
            return self._adopt(existing)

        return _TemplateOutcome(entry=entry, created=True, applied_delta=applied_delta)

    @staticmethod
    def _adopt(entry: LedgerEntry) -> _TemplateOutcome:
        applied_delta = None
        if entry.reflected_asset_id and entry.reflected_amount != 0:
            applied_delta = AppliedDelta(entry.reflected_asset_id, entry.reflected_amount)
        return _TemplateOutcome(entry=entry, created=False, applied_delta=applied_delta)

    async def _reflect(
        self,
        user_id: str,
        template: RecurringTemplate,
    ) -> AppliedDelta | None:
        """유동자산에 반영 (수입 +, 지출 -)

        Returns:
            실제 적용된 변동분. 대상 자산이 없거나 적용분이 0이면 None.
        """
        asset = await self._resolve_target_asset(user_id)
        if asset is None:
            logger.warning(
                f"No liquid asset for user {user_id}; "
                f"entry for template {template.template_id} left unreflected"
            )
            return None

        delta = template.amount if template.ledger_type == LedgerType.INCOME else -template.amount
        applied = await self.asset_store.apply_delta(
            asset.asset_id,
            delta,
            floor_at_zero=not self.config.allow_negative_balance,
            valuation_date=self._today(),
        )

        if applied is None or applied == 0:
            return None
        if applied != delta:
            logger.info(
                f"Balance floored at zero: asset={asset.asset_id}, "
                f"requested={delta}, applied={applied}"
            )
        return AppliedDelta(asset.asset_id, applied)

    async def _resolve_target_asset(self, user_id: str) -> Asset | None:
        """반영 대상 유동자산 (없으면 설정에 따라 자동 생성)"""
        assets = await self.asset_store.list_liquid_assets(user_id)
        selected = self.asset_selector(assets)
        if selected is not None or not self.config.auto_create_liquid_asset:
            return selected

        asset = await self.asset_store.create(
            user_id=user_id,
            category=AssetCategory.DEPOSIT,
            name=Defaults.AUTO_LIQUID_ASSET_NAME,
            current_value=Decimal("0"),
            valuation_date=self._today(),
            note=Defaults.AUTO_LIQUID_ASSET_NOTE,
        )
        logger.info(f"Liquid asset auto-created for user {user_id}: {asset.asset_id}")
        return asset
