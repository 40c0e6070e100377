"""
월마감 실행 스크립트

매월 정산일(KST)에 스케줄러(cron 등)에서 배치 모드로 실행.
운영 복구용으로 단일 사용자 월마감/취소도 지원한다.

사용법:
    # 배치 (정산일이 아니면 건너뜀)
    python -m scripts.settle_month batch --type expense
    python -m scripts.settle_month batch --type income --month 2024-02 --force

    # 단일 사용자
    python -m scripts.settle_month settle --user demo-user --type income --month 2024-02
    python -m scripts.settle_month rollback --user demo-user --type income --month 2024-02
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path, init_schema
from core.config.loader import get_settings
from core.logging import setup_logging
from core.settlement.batch import SettlementBatch
from core.settlement.engine import SettlementEngine
from core.settlement.errors import SettlementError
from core.types import AppMode, LedgerType

logger = logging.getLogger(__name__)


async def run(args: argparse.Namespace) -> int:
    """명령 실행

    Returns:
        종료 코드 (0: 성공, 1: 실패 포함)
    """
    settings = get_settings(Path(args.config) if args.config else None)
    if args.db:
        db_path = Path(args.db)
    elif args.mode:
        db_path = get_db_path(args.mode)
    else:
        db_path = settings.db_path

    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        engine = SettlementEngine.from_db(db, settings.settlement)

        try:
            if args.command == "batch":
                batch = SettlementBatch(engine, batch_day=settings.settlement.batch_day)
                result = await batch.run(args.type, month=args.month, force=args.force)
                print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
                return 1 if result.failed_users else 0

            if args.command == "settle":
                summary = await engine.settle(args.user, args.type, args.month)
                output = {
                    "target_month": summary.target_month,
                    "created_count": summary.created_count,
                    "skipped_count": summary.skipped_count,
                    "reflected_count": summary.reflected_count,
                    "total_settled_amount": str(summary.total_settled_amount),
                }
            else:
                rollback = await engine.rollback(args.user, args.type, args.month)
                output = {
                    "target_month": rollback.target_month,
                    "deleted_count": rollback.deleted_count,
                    "reversed_amount": str(rollback.reversed_amount),
                }
        except SettlementError as e:
            logger.error(f"{args.command} failed: [{e.code.value}] {e.message}")
            print(json.dumps(e.to_dict(), ensure_ascii=False))
            return 1

        print(json.dumps(output, ensure_ascii=False, indent=2))
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="반복 수입/지출 월마감")
    parser.add_argument("--config", default=None, help="settings.yaml 경로")
    parser.add_argument("--db", default=None, help="DB 경로 (기본: 설정의 모드별 DB)")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in AppMode],
        default=None,
        help="모드별 기본 DB 사용 (--db 가 없을 때)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    ledger_types = [t.value for t in LedgerType]

    batch = subparsers.add_parser("batch", help="전체 사용자 월마감")
    batch.add_argument("--type", choices=ledger_types, required=True)
    batch.add_argument("--month", default=None, help="대상 월 (기본: 이번 달 KST)")
    batch.add_argument("--force", action="store_true", help="정산일이 아니어도 실행")

    for name, help_text in (("settle", "단일 사용자 월마감"), ("rollback", "단일 사용자 월마감 취소")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--user", required=True, help="사용자 ID")
        sub.add_argument("--type", choices=ledger_types, required=True)
        sub.add_argument("--month", required=True, help="대상 월 (YYYY-MM)")

    return parser


def main() -> None:
    args = build_parser().parse_args()
    setup_logging("batch")
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
