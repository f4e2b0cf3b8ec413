"""Command line entry point: ``python -m roomrelay.main``."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from .app import create_app
from .config import get_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="roomrelay",
        description="Real-time WebSocket message relay",
        epilog="""
Endpoints:
  ws://HOST:PORT/ws/relay?id=alice                                  direct relay
  ws://HOST:PORT/ws/rooms?command=create&room_id=r1&client_id=alice  room relay
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default: {settings.port})")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level (default: %(default)s)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings().model_copy(
        update={"host": args.host, "port": args.port, "log_level": args.log_level}
    )
    app = create_app(settings)

    logger.info("Room relay starting on %s:%d", settings.host, settings.port)
    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
