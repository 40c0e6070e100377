"""
core/logging.py 테스트
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from core import logging as app_logging
from core.constants import Paths


@pytest.fixture
def isolated_root_logger():
    """테스트 후 루트 로거 핸들러 원복"""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(saved_level)


class TestGetLogFilePath:

    def test_known_processes(self) -> None:
        assert app_logging.get_log_file_path("web") == Paths.WEB_LOGS_DIR / "web.log"
        assert app_logging.get_log_file_path("batch") == Paths.BATCH_LOGS_DIR / "batch.log"

    def test_unknown_process(self) -> None:
        assert app_logging.get_log_file_path("tool") == Paths.LOGS_DIR / "tool.log"


class TestSetupLogging:

    def test_handlers_not_duplicated(
        self,
        temp_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
        isolated_root_logger: logging.Logger,
    ) -> None:
        monkeypatch.setitem(app_logging.PROCESS_LOG_DIRS, "batch", temp_dir / "batch")

        app_logging.setup_logging("batch")
        root_logger = app_logging.setup_logging("batch", console_level=logging.WARNING)

        file_handlers = [
            h for h in root_logger.handlers if isinstance(h, TimedRotatingFileHandler)
        ]
        assert len(root_logger.handlers) == 2
        assert len(file_handlers) == 1
        assert (temp_dir / "batch" / "batch.log").exists()
        assert logging.getLogger("aiosqlite").level == logging.WARNING
