"""
로깅 설정

Web(API)과 월마감 배치 스크립트 공통 로깅.
- 콘솔: stdout
- 파일: logs/<process>/<process>.log (자정 기준 daily rotation)

사용법:
    from core.logging import setup_logging
    setup_logging("web")
    setup_logging("batch")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 30  # 월마감 배치 한 주기 이상 보관

PROCESS_LOG_DIRS: dict[str, Path] = {
    "web": Paths.WEB_LOGS_DIR,
    "batch": Paths.BATCH_LOGS_DIR,
}

# 쿼리/요청마다 로그를 남기는 라이브러리 로거
NOISY_LOGGERS = (
    "aiosqlite",
    "asyncio",
    "httpx",
    "httpcore",
    "uvicorn.access",
)


def get_log_file_path(process_name: str) -> Path:
    """프로세스별 로그 파일 경로"""
    log_dir = PROCESS_LOG_DIRS.get(process_name, Paths.LOGS_DIR)
    return log_dir / f"{process_name}.log"


def _file_handler(log_file: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"  # batch.log.2024-02-26
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
) -> logging.Logger:
    """루트 로거 초기화

    기존 핸들러는 제거하므로 여러 번 호출해도 핸들러가 중복되지 않는다.

    Args:
        process_name: "web" 또는 "batch"
        console_level: 콘솔 로그 레벨
        file_level: 파일 로그 레벨

    Returns:
        루트 Logger
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    log_file = get_log_file_path(process_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(console_level, file_level))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(_file_handler(log_file, file_level, formatter))

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(
        f"Logging initialized: {process_name} "
        f"(console={logging.getLevelName(console_level)}, file={log_file})"
    )
    return root_logger
