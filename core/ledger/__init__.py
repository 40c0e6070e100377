"""
원장 (Ledger) 모듈

수동 입력 항목과 월마감 자동 생성 항목을 함께 저장하는 원장.

사용 예시:
```python
from core.ledger import LedgerStore

ledger_store = LedgerStore(db)
entries = await ledger_store.list_by_month(user_id, LedgerType.INCOME, "2024-02")
```
"""

from core.ledger.store import LedgerStore

__all__ = [
    "LedgerStore",
]
