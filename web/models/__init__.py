"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import SettlementRequest
from web.models.responses import (
    ErrorResponse,
    HealthResponse,
    LedgerEntryListResponse,
    LedgerEntryResponse,
    RollbackResponse,
    SettlementResponse,
    SettlementStatusResponse,
)

__all__ = [
    # Requests
    "SettlementRequest",
    # Responses
    "HealthResponse",
    "ErrorResponse",
    "SettlementStatusResponse",
    "SettlementResponse",
    "RollbackResponse",
    "LedgerEntryResponse",
    "LedgerEntryListResponse",
]
