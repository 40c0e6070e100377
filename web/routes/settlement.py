"""
월마감 라우트

반복 수입/지출 월마감 실행, 취소, 상태 및 항목 조회 API.
ledger_type 경로 변수: income / expense
"""

from fastapi import APIRouter, Depends, Query

from core.utils.timezone import month_key_kst
from web.dependencies import get_settlement_reader, get_settlement_service, get_user_id
from web.models.requests import SettlementRequest
from web.models.responses import (
    ErrorResponse,
    LedgerEntryListResponse,
    RollbackResponse,
    SettlementResponse,
    SettlementStatusResponse,
)
from web.services.settlement_service import SettlementService

router = APIRouter(
    prefix="/api/settlements/{ledger_type}",
    tags=["Settlement"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.get("/status", response_model=SettlementStatusResponse)
async def get_settlement_status(
    ledger_type: str,
    month: str | None = Query(default=None, description="대상 월 (YYYY-MM, 기본: 이번 달 KST)"),
    user_id: str = Depends(get_user_id),
    service: SettlementService = Depends(get_settlement_reader),
) -> dict:
    """월마감 완료 여부 조회"""
    return await service.get_status(user_id, ledger_type, month or month_key_kst())


@router.post(
    "/settle",
    response_model=SettlementResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
async def settle_month(
    ledger_type: str,
    request: SettlementRequest,
    user_id: str = Depends(get_user_id),
    service: SettlementService = Depends(get_settlement_service),
) -> dict:
    """월마감 실행

    대상 월의 monthly 템플릿을 원장 항목으로 생성하고,
    반영 설정된 항목은 유동자산에 적용한다.

    **에러 코드**:
    - VALIDATION (400): 잘못된 월/유형
    - ALREADY_SETTLED (409): 이미 월마감됨
    - CONFLICT (409): 동시 요청 충돌
    """
    return await service.settle(user_id, ledger_type, request.month)


@router.post(
    "/rollback",
    response_model=RollbackResponse,
    responses={409: {"model": ErrorResponse}},
)
async def rollback_month(
    ledger_type: str,
    request: SettlementRequest,
    user_id: str = Depends(get_user_id),
    service: SettlementService = Depends(get_settlement_service),
) -> dict:
    """월마감 취소

    월마감으로 생성된 항목만 삭제하고 자산 변동분을 정확히 되돌린다.

    **에러 코드**:
    - NOT_SETTLED (409): 월마감 내역 없음
    - CONFLICT (409): 동시 요청 충돌
    """
    return await service.rollback(user_id, ledger_type, request.month)


@router.get("/entries", response_model=LedgerEntryListResponse)
async def get_month_entries(
    ledger_type: str,
    month: str | None = Query(default=None, description="대상 월 (YYYY-MM, 기본: 이번 달 KST)"),
    user_id: str = Depends(get_user_id),
    service: SettlementService = Depends(get_settlement_reader),
) -> dict:
    """해당 월 원장 항목 목록 (수동 + 월마감 자동 생성)"""
    return await service.list_entries(user_id, ledger_type, month or month_key_kst())
