"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web 요청마다 독립 연결을 만들고, 배치 스크립트와 동시에 접근 가능하도록 설정.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths
from core.types import AppMode

logger = logging.getLogger(__name__)


def get_db_path(mode: AppMode | str) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        mode: 실행 모드 (PRODUCTION/DEVELOPMENT)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if isinstance(mode, str):
        mode = AppMode(mode.lower())

    if mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)
    in_memory = db_path_str == ":memory:"

    # 디렉토리가 없으면 생성
    if not in_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly and not in_memory:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # WAL 모드 설정 (읽기 전용 연결은 journal_mode 변경 불가)
    if not readonly and not in_memory:
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.debug(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공. 트랜잭션 안에서 호출된 commit()은
    무시되고 가장 바깥 트랜잭션이 끝날 때 한 번에 커밋된다.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 API용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await ledger_store.create_entry(entry)   # 내부 commit은 보류
        await asset_store.apply_delta(...)

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._tx_depth = 0

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """transaction() 블록 내부 여부"""
        return self._tx_depth > 0

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            self._tx_depth = 0
            logger.debug("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def fetchone_dict(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> dict[str, Any] | None:
        """단일 행 조회 (컬럼명 → 값 dict)"""
        cursor = await self.execute(sql, parameters)
        row = await cursor.fetchone()
        if row is None:
            return None
        columns = [desc[0] for desc in cursor.description]
        return dict(zip(columns, row))

    async def fetchall_dict(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[dict[str, Any]]:
        """전체 행 조회 (컬럼명 → 값 dict 목록)"""
        cursor = await self.execute(sql, parameters)
        rows = await cursor.fetchall()
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in rows]

    async def commit(self) -> None:
        """커밋 (transaction() 블록 안에서는 보류)"""
        if self._conn is not None and self._tx_depth == 0:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        중첩 호출 시 가장 바깥 블록만 커밋/롤백한다.

        사용 예시:
        ```python
        async with adapter.transaction() as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield self._conn
            finally:
                self._tx_depth -= 1
            return

        # 쓰기 잠금을 먼저 잡아 읽기→쓰기 승격 중 충돌을 피한다
        if not self._conn.in_transaction:
            await self._conn.execute("BEGIN IMMEDIATE")

        self._tx_depth = 1
        try:
            yield self._conn
        except BaseException:
            self._tx_depth = 0
            await self._conn.rollback()
            raise
        self._tx_depth = 0
        await self._conn.commit()

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter

    Web 시작 시, 배치 스크립트 시작 시 호출. IF NOT EXISTS로 안전하게 재실행 가능.
    """
    # recurring_template (반복 수입/지출 템플릿)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS recurring_template (
            template_id                TEXT PRIMARY KEY,
            user_id                    TEXT NOT NULL,
            ledger_type                TEXT NOT NULL,
            name                       TEXT NOT NULL,
            amount                     TEXT NOT NULL DEFAULT '0',
            cycle                      TEXT NOT NULL,
            billing_day                INTEGER,

            is_fixed_income            INTEGER NOT NULL DEFAULT 0,
            is_card_included           INTEGER NOT NULL DEFAULT 0,
            reflect_to_liquid_asset    INTEGER NOT NULL DEFAULT 0,
            investment_target_category TEXT,

            category                   TEXT NOT NULL DEFAULT '',
            owner                      TEXT NOT NULL DEFAULT '',
            note                       TEXT NOT NULL DEFAULT '',

            created_at                 TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at                 TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # ledger_entry (수동 입력 + 월마감 자동 생성 원장 항목)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS ledger_entry (
            entry_id                TEXT PRIMARY KEY,
            user_id                 TEXT NOT NULL,
            ledger_type             TEXT NOT NULL,
            name                    TEXT NOT NULL,
            amount                  TEXT NOT NULL DEFAULT '0',
            occurred_at             TEXT NOT NULL,
            category                TEXT NOT NULL DEFAULT '',
            entry_source            TEXT NOT NULL DEFAULT 'manual',

            reflect_to_liquid_asset INTEGER NOT NULL DEFAULT 0,
            reflected_amount        TEXT NOT NULL DEFAULT '0',
            reflected_asset_id      TEXT,

            source_template_id      TEXT,
            settlement_month        TEXT,
            dedup_key               TEXT UNIQUE,

            note                    TEXT NOT NULL DEFAULT '',
            created_at              TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # asset (자산 - 월마감은 cash/deposit 만 사용)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS asset (
            asset_id       TEXT PRIMARY KEY,
            user_id        TEXT NOT NULL,
            category       TEXT NOT NULL,
            name           TEXT NOT NULL,
            current_value  TEXT NOT NULL DEFAULT '0',
            valuation_date TEXT,
            note           TEXT NOT NULL DEFAULT '',
            created_at     TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at     TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # settlement_record (키당 한 행, version으로 낙관적 락)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS settlement_record (
            user_id                  TEXT NOT NULL,
            ledger_type              TEXT NOT NULL,
            month                    TEXT NOT NULL,
            status                   TEXT NOT NULL,
            version                  INTEGER NOT NULL DEFAULT 1,

            generated_entry_ids_json TEXT NOT NULL DEFAULT '[]',
            applied_deltas_json      TEXT NOT NULL DEFAULT '[]',

            created_at               TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at               TEXT NOT NULL DEFAULT (datetime('now')),

            PRIMARY KEY (user_id, ledger_type, month)
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_recurring_template_user
        ON recurring_template(user_id, ledger_type, cycle)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_ledger_entry_user_date
        ON ledger_entry(user_id, ledger_type, occurred_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_ledger_entry_source
        ON ledger_entry(source_template_id, settlement_month)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_asset_user_category
        ON asset(user_id, category)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
