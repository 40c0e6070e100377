"""
FastAPI 애플리케이션

라우터 등록, 에러 응답 형식 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config.loader import get_settings
from core.constants import APP_VERSION
from core.logging import setup_logging
from core.settlement.errors import ErrorCode, SettlementError

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import health, settlement

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema

    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

    logger.info(f"Web started (mode={settings.mode.value}, db={settings.db_path})")

    yield


app = FastAPI(
    title="Ledger Settlement API",
    description="반복 수입/지출 월마감 API",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================================================
# 에러 응답 ({code, message})
# =========================================================================

@app.exception_handler(SettlementError)
async def settlement_error_handler(request: Request, exc: SettlementError) -> JSONResponse:
    """월마감 예외 → 에러 응답"""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code.value}] {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """요청 형식 오류 → VALIDATION (400)"""
    details = "; ".join(
        f"{'.'.join(str(loc) for loc in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"code": ErrorCode.VALIDATION.value, "message": details or "잘못된 요청입니다"},
    )


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(settlement.router)
