"""
설정 로더

settings.yaml 로드 및 앱 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths
from core.types import AppMode


@dataclass(frozen=True)
class AuthConfig:
    """인증 설정

    인증 프록시가 사용자 헤더를 넣어주지 않는 개발 환경에서는
    default_user_id로 대체한다.
    """

    allow_dev_header_auth: bool = True
    default_user_id: str = Defaults.DEFAULT_USER_ID


@dataclass(frozen=True)
class SettlementConfig:
    """월마감 설정"""

    auto_create_liquid_asset: bool = True
    allow_negative_balance: bool = False
    batch_day: int = Defaults.SETTLEMENT_BATCH_DAY


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: AppMode
    web_host: str
    web_port: int
    db_path: Path | None
    auth: AuthConfig
    settlement: SettlementConfig


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """하위 섹션 조회 (없으면 빈 dict)"""
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigLoadError(f"settings.yaml의 '{name}' 섹션 형식이 잘못되었습니다")
    return value


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        ConfigLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode 또는 batch_day인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise ConfigLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise ConfigLoadError("settings.yaml이 비어 있습니다")

    if not isinstance(data, dict):
        raise ConfigLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise ConfigLoadError("settings.yaml에 'mode' 필드가 없습니다")

    try:
        mode = AppMode(mode_str)
    except ValueError as e:
        valid_modes = [m.value for m in AppMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    web = _section(data, "web")
    database = _section(data, "database")
    auth = _section(data, "auth")
    settlement = _section(data, "settlement")

    raw_db_path = database.get("path")
    db_path = Path(raw_db_path) if raw_db_path else None

    batch_day = int(settlement.get("batch_day", Defaults.SETTLEMENT_BATCH_DAY))
    if not 1 <= batch_day <= 31:
        raise ValueError(f"settlement.batch_day는 1~31 사이여야 합니다: {batch_day}")

    return AppConfig(
        mode=mode,
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=int(web.get("port", Defaults.WEB_PORT)),
        db_path=db_path,
        auth=AuthConfig(
            allow_dev_header_auth=bool(auth.get("allow_dev_header_auth", True)),
            default_user_id=str(auth.get("default_user_id", Defaults.DEFAULT_USER_ID)),
        ),
        settlement=SettlementConfig(
            auto_create_liquid_asset=bool(settlement.get("auto_create_liquid_asset", True)),
            allow_negative_balance=bool(settlement.get("allow_negative_balance", False)),
            batch_day=batch_day,
        ),
    )


def get_db_path(config: AppConfig) -> Path:
    """모드에 따른 DB 경로 반환

    database.path가 지정되어 있으면 그 값을 우선한다.

    Args:
        config: AppConfig 인스턴스

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if config.db_path is not None:
        return config.db_path
    if config.mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    else:
        return Paths.DEV_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_config(settings_path)

    @property
    def mode(self) -> AppMode:
        """현재 실행 모드"""
        assert self._config is not None
        return self._config.mode

    @property
    def web_host(self) -> str:
        assert self._config is not None
        return self._config.web_host

    @property
    def web_port(self) -> int:
        assert self._config is not None
        return self._config.web_port

    @property
    def auth(self) -> AuthConfig:
        """인증 설정"""
        assert self._config is not None
        return self._config.auth

    @property
    def settlement(self) -> SettlementConfig:
        """월마감 설정"""
        assert self._config is not None
        return self._config.settlement

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        assert self._config is not None
        return get_db_path(self._config)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
