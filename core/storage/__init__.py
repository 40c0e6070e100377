"""
스토리지 모듈

Template Store, Asset Store, Settlement Record Store 등 데이터 저장소 제공
"""

from core.storage.asset_store import AssetStore
from core.storage.settlement_store import SettlementRecordStore, VersionConflictError
from core.storage.template_store import TemplateStore

__all__ = [
    "TemplateStore",
    "AssetStore",
    "SettlementRecordStore",
    "VersionConflictError",
]
