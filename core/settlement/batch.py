"""
월마감 배치

매월 정산일(KST)에 monthly 템플릿을 가진 모든 사용자의 월마감을 실행.
scripts/settle_month.py 에서 호출한다.

사용자별 실패는 기록 후 다음 사용자로 진행하며, 결과에 집계된다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from core.settlement.engine import SettlementEngine
from core.settlement.errors import AlreadySettledError, SettlementError
from core.types import LedgerType
from core.utils.timezone import month_key_kst, now_kst, to_kst

logger = logging.getLogger(__name__)


SKIP_REASON_NOT_SETTLEMENT_DAY = "not_settlement_day"


@dataclass
class BatchResult:
    """배치 실행 결과"""

    target_month: str
    ledger_type: LedgerType
    skipped: bool = False
    skip_reason: str | None = None
    processed_users: int = 0
    settled_users: int = 0
    already_settled_users: int = 0
    failed_users: int = 0
    total_settled_amount: Decimal = Decimal("0")
    failures: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "target_month": self.target_month,
            "ledger_type": self.ledger_type.value,
            "skipped": self.skipped,
            "skip_reason": self.skip_reason,
            "processed_users": self.processed_users,
            "settled_users": self.settled_users,
            "already_settled_users": self.already_settled_users,
            "failed_users": self.failed_users,
            "total_settled_amount": str(self.total_settled_amount),
        }


class SettlementBatch:
    """월마감 배치 실행기

    Args:
        engine: SettlementEngine
        batch_day: 정산일 (KST 기준 일자)
        now: 현재 시각 제공 함수 (테스트용)
    """

    def __init__(
        self,
        engine: SettlementEngine,
        batch_day: int,
        now: Callable[[], datetime] = now_kst,
    ):
        self.engine = engine
        self.batch_day = batch_day
        self._now = now

    def is_settlement_day(self) -> bool:
        """오늘(KST)이 정산일인지 확인"""
        return to_kst(self._now()).day == self.batch_day

    async def run(
        self,
        ledger_type: LedgerType | str,
        month: str | None = None,
        force: bool = False,
    ) -> BatchResult:
        """배치 실행

        Args:
            ledger_type: income / expense
            month: 대상 월 (None이면 KST 기준 이번 달)
            force: True면 정산일이 아니어도 실행

        Returns:
            BatchResult

        Raises:
            SettlementValidationError: 잘못된 월/유형 (사용자 처리 전에 검사)
        """
        ledger_type, target_month = SettlementEngine.normalize_key(
            ledger_type, month or month_key_kst(self._now())
        )
        result = BatchResult(target_month=target_month, ledger_type=ledger_type)

        if not force and not self.is_settlement_day():
            result.skipped = True
            result.skip_reason = SKIP_REASON_NOT_SETTLEMENT_DAY
            logger.info(
                f"Batch skipped ({ledger_type.value}, {target_month}): "
                f"today is not day {self.batch_day}"
            )
            return result

        user_ids = await self.engine.template_store.list_user_ids(ledger_type)
        logger.info(
            f"Batch started ({ledger_type.value}, {target_month}): {len(user_ids)} users"
        )

        for user_id in user_ids:
            result.processed_users += 1
            try:
                summary = await self.engine.settle(user_id, ledger_type, target_month)
            except AlreadySettledError:
                result.already_settled_users += 1
                logger.debug(f"Already settled: {user_id} ({target_month})")
                continue
            except SettlementError as e:
                result.failed_users += 1
                result.failures[user_id] = f"{e.code.value}: {e.message}"
                logger.error(
                    f"Batch settle failed: {user_id} ({ledger_type.value}, {target_month}) "
                    f"[{e.code.value}] {e.message}"
                )
                continue

            result.settled_users += 1
            result.total_settled_amount += summary.total_settled_amount

        logger.info(
            f"Batch finished ({ledger_type.value}, {target_month}): "
            f"settled={result.settled_users}, "
            f"already={result.already_settled_users}, failed={result.failed_users}, "
            f"total={result.total_settled_amount}"
        )
        return result
