"""
헬스 체크 엔드포인트

GET /health - 서버 및 DB 스키마 상태
"""

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.constants import APP_VERSION
from web.dependencies import get_app_settings, get_db
from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    db: SQLiteAdapter = Depends(get_db),
) -> HealthResponse:
    """서버 상태 확인

    정산 레코드 테이블이 없으면 status="degraded" (스키마 미초기화).
    """
    schema_ready = await db.table_exists("settlement_record")
    return HealthResponse(
        status="ok" if schema_ready else "degraded",
        mode=settings.mode.value,
        version=APP_VERSION,
        schema_ready=schema_ready,
    )
