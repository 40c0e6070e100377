"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends, Header

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.settlement.errors import UnauthorizedError
from web.services.settlement_service import SettlementService

USER_ID_HEADER = "X-User-Id"


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    상태/항목 조회용.
    월마감 실행/취소는 readonly=False로 별도 처리.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    월마감 실행/취소 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


# =========================================================================
# 사용자 식별
# =========================================================================

def get_user_id(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """요청 사용자 ID

    인증 프록시가 넣어준 X-User-Id 헤더를 사용.
    헤더가 없으면 allow_dev_header_auth 설정에 따라 기본 사용자로 대체하거나 401.
    """
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()

    if settings.auth.allow_dev_header_auth:
        return settings.auth.default_user_id

    raise UnauthorizedError("사용자 인증 정보가 없습니다")


# =========================================================================
# 월마감 서비스
# =========================================================================

def get_settlement_service(
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
) -> SettlementService:
    """월마감 서비스 (쓰기 가능 연결)"""
    return SettlementService(db, settings.settlement)


def get_settlement_reader(
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SettlementService:
    """월마감 조회 서비스 (읽기 전용 연결)"""
    return SettlementService(db, settings.settlement)
