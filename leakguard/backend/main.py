"""
backend/main.py

Command-line entry point.

    leakguard analyze data.csv                 print the report
    leakguard analyze data.csv --report out.txt
    leakguard serve --host 127.0.0.1 --port 8000
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

import uvicorn

from .api.main import create_app, set_session
from .config import settings
from .errors import LeakGuardError
from .metrics import METRICS
from .session import AnalysisSession

logger = logging.getLogger("leakguard.main")


def cmd_analyze(args: argparse.Namespace) -> int:
    path = Path(args.file)
    session = AnalysisSession()
    try:
        content = path.read_bytes()
    except OSError as e:
        print(f"ERROR: cannot read {path}: {e}", file=sys.stderr)
        return 1

    try:
        session.analyze_content(path.name, content)
        report = session.generate_report()
    except LeakGuardError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.report:
        Path(args.report).write_text(report + "\n", encoding="utf-8")
        logger.info("Report written to %s", args.report)
    else:
        print(report)
    logger.info("Final stats: counters=%s aggregator=%s", METRICS.as_dict(), session.aggregator.stats)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    set_session(AnalysisSession())
    app = create_app()
    logger.info("LeakGuard API on http://%s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    return 0


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="leakguard", description="LeakGuard data leakage detector")
    parser.add_argument(
        "--log-level", default=settings.LOG_LEVEL.upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="analyse a CSV file and print the report")
    analyze.add_argument("file")
    analyze.add_argument("--report", default=None, help="write the report to this path")
    analyze.set_defaults(func=cmd_analyze)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=settings.API_HOST)
    serve.add_argument("--port", type=int, default=settings.API_PORT)
    serve.set_defaults(func=cmd_serve)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> NoReturn:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
