"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

APP_VERSION: str = "1.0.0"


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    # 인증 헤더가 없을 때 사용하는 개발용 사용자
    DEFAULT_USER_ID: str = "demo-user"

    # 월마감 배치 실행일 (KST 기준 매월 26일)
    SETTLEMENT_BATCH_DAY: int = 26

    # 유동자산이 하나도 없을 때 자동 생성하는 계좌
    AUTO_LIQUID_ASSET_NAME: str = "입출금 통장"
    AUTO_LIQUID_ASSET_NOTE: str = "월마감 자동 반영용 자동 생성"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"
    BATCH_LOGS_DIR: Path = LOGS_DIR / "batch"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "ledger_prod.db"
    DEV_DB: Path = DATA_DIR / "ledger_dev.db"
