"""
pytest 공통 fixture 정의

설정 파일, 임시 DB, 저장소 및 월마감 엔진 fixture
"""

import tempfile
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import SettlementConfig, Settings
from core.ledger.store import LedgerStore
from core.settlement.engine import SettlementEngine
from core.storage.asset_store import AssetStore
from core.storage.settlement_store import SettlementRecordStore
from core.storage.template_store import TemplateStore

TEST_USER = "user-1"
TEST_TODAY = date(2024, 2, 25)


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = f"""# 테스트용 settings.yaml
mode: development

web:
  host: 0.0.0.0
  port: 9000

database:
  path: {(temp_dir / "ledger_test.db").as_posix()}

auth:
  allow_dev_header_auth: true
  default_user_id: demo-user

settlement:
  auto_create_liquid_asset: true
  allow_negative_balance: false
  batch_day: 26
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production 모드, 기본값 사용)"""
    settings_path = temp_dir / "settings_prod.yaml"
    settings_path.write_text("mode: production\n", encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 settings.yaml 파일 생성"""
    settings_path = temp_dir / "settings_invalid.yaml"
    settings_path.write_text("mode: staging\n", encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


# =========================================================================
# DB / 저장소
# =========================================================================

@pytest_asyncio.fixture
async def db(temp_dir: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(temp_dir / "test_ledger.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def template_store(db: SQLiteAdapter) -> TemplateStore:
    return TemplateStore(db)


@pytest.fixture
def ledger_store(db: SQLiteAdapter) -> LedgerStore:
    return LedgerStore(db)


@pytest.fixture
def asset_store(db: SQLiteAdapter) -> AssetStore:
    return AssetStore(db)


@pytest.fixture
def record_store(db: SQLiteAdapter) -> SettlementRecordStore:
    return SettlementRecordStore(db)


@pytest.fixture
def settlement_config() -> SettlementConfig:
    return SettlementConfig()


@pytest.fixture
def engine(
    db: SQLiteAdapter,
    template_store: TemplateStore,
    ledger_store: LedgerStore,
    asset_store: AssetStore,
    record_store: SettlementRecordStore,
    settlement_config: SettlementConfig,
) -> SettlementEngine:
    """오늘 날짜가 고정된 월마감 엔진"""
    return SettlementEngine(
        db=db,
        template_store=template_store,
        ledger_store=ledger_store,
        asset_store=asset_store,
        record_store=record_store,
        config=settlement_config,
        today=lambda: TEST_TODAY,
    )
