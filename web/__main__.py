"""
Web 진입점 (월마감 API 서버)

실행 방법:
    python -m web
    python -m web --config config/settings.yaml
"""

import argparse
from pathlib import Path

import uvicorn

from core.config.loader import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="월마감 API 서버")
    parser.add_argument("--config", default=None, help="settings.yaml 경로")
    args = parser.parse_args()

    # web.app 은 같은 프로세스에서 이 설정 싱글턴을 사용한다
    settings = get_settings(Path(args.config) if args.config else None)
    uvicorn.run(
        "web.app:app",
        host=settings.web_host,
        port=settings.web_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
