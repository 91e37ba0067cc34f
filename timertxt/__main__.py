from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

import uvicorn

from .config import Settings, _normalize_pattern, settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timertxt-server", description="Serve a timer.txt file over HTTP")
    parser.add_argument("--host", default=None, help=f"bind address (default {settings.host})")
    parser.add_argument("--port", type=int, default=None, help=f"bind port (default {settings.port})")
    parser.add_argument("--timer-file", type=Path, default=None, help="timer.txt to serve")
    parser.add_argument("--archive-file", type=Path, default=None, help="done.txt receiving archived timers")
    parser.add_argument("--date-layout", default=None, help="'rfc3339' or a strftime pattern")
    return parser


def apply_arguments(args: argparse.Namespace, target: Settings = settings) -> Settings:
    """Copy the options given on the command line onto ``target``."""
    for name in ("host", "port", "timer_file", "archive_file", "date_layout"):
        value = getattr(args, name)
        if value is not None:
            setattr(target, name, _normalize_pattern(value) if name == "date_layout" else value)
    if args.timer_file is not None and args.archive_file is None:
        target.archive_file = args.timer_file.with_name("done.txt")
    return target


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    apply_arguments(args)
    # timertxt.main reads settings on import, so it is only loaded by uvicorn
    uvicorn.run("timertxt.main:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
