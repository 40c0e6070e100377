"""
월마감 (Settlement) 모듈

반복 템플릿을 대상 월의 원장 항목으로 생성하고 유동자산에 반영하는 월마감,
그리고 그 정확한 취소(rollback).

사용 예시:
```python
from core.settlement import SettlementEngine

engine = SettlementEngine.from_db(db, settings.settlement)
summary = await engine.settle(user_id, LedgerType.INCOME, "2024-02")
```
"""

from core.settlement.batch import BatchResult, SettlementBatch
from core.settlement.engine import SettlementEngine
from core.settlement.errors import (
    AlreadySettledError,
    ErrorCode,
    NotSettledError,
    SettlementConflictError,
    SettlementError,
    SettlementStorageError,
    SettlementValidationError,
    UnauthorizedError,
)
from core.settlement.selection import AssetSelector, select_most_recently_valued

__all__ = [
    # 엔진
    "SettlementEngine",
    "SettlementBatch",
    "BatchResult",
    # 자산 선택
    "AssetSelector",
    "select_most_recently_valued",
    # 예외
    "ErrorCode",
    "SettlementError",
    "SettlementValidationError",
    "AlreadySettledError",
    "NotSettledError",
    "SettlementConflictError",
    "SettlementStorageError",
    "UnauthorizedError",
]
