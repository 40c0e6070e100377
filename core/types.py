"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class AppMode(str, Enum):
    """실행 모드 (운영 / 개발)"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


class LedgerType(str, Enum):
    """원장 유형 (수입 / 지출)"""

    INCOME = "income"
    EXPENSE = "expense"


class BillingCycle(str, Enum):
    """반복 주기

    월마감 대상은 MONTHLY 뿐이다.
    """

    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"


class EntrySource(str, Enum):
    """원장 항목 출처"""

    MANUAL = "manual"
    AUTO_SETTLEMENT = "auto_settlement"


class SettlementStatus(str, Enum):
    """정산 레코드 상태"""

    SETTLED = "settled"
    ROLLED_BACK = "rolled_back"


class AssetCategory(str, Enum):
    """자산 카테고리 (유동자산만 정의)"""

    CASH = "cash"
    DEPOSIT = "deposit"


# 월마감 반영 대상이 되는 유동자산 카테고리
LIQUID_ASSET_CATEGORIES: tuple[str, ...] = (
    AssetCategory.CASH.value,
    AssetCategory.DEPOSIT.value,
)
