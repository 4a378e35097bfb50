"""
anon-diary server.

Usage:
    anon-diary [--host HOST] [--port PORT] [--db-path PATH] [--rate-limit]
    python -m anondiary --rate-limit
"""

import argparse
import sys

import uvicorn

from .config import Settings
from .logging_config import setup_logging
from .main import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anon-diary",
        description="Anonymous greentext diary API",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=3001, help="Port")
    parser.add_argument("--db-path", help="SQLite database file (default: DATABASE_PATH or diary.db)")
    parser.add_argument(
        "--rate-limit",
        action="store_true",
        help="Enable per-client rate limiting on the API",
    )
    parser.add_argument("--log-level", default="info", help="Log level (debug, info, warning, ...)")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with command-line overrides applied."""
    overrides = {}
    if args.db_path:
        overrides["database_path"] = args.db_path
    if args.rate_limit:
        overrides["rate_limit_enabled"] = True
    return Settings(**overrides)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    settings = settings_from_args(args)
    app = create_app(settings)

    print(f"/diary/ server running on http://{args.host}:{args.port}", file=sys.stderr)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
