from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

from goruntime.collector import GoRuntimeCollector
from goruntime.config import default_config_path, init_config, load_config, sample_config
from goruntime.logging import configure_logging
from goruntime.runtime import run_daemon, run_once

logger = logging.getLogger("goruntime")


def _config_path(args: argparse.Namespace) -> Path | None:
    return Path(args.config).expanduser() if args.config else None


def cmd_sample_config(args: argparse.Namespace) -> int:
    del args
    sys.stdout.write(sample_config())
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    path = init_config(_config_path(args))
    print(f"initialized config: {path}")
    return 0


def cmd_run_once(args: argparse.Namespace) -> int:
    config = load_config(_config_path(args))
    collector = GoRuntimeCollector(config)
    try:
        summary = run_once(collector, sys.stdout)
    finally:
        collector.close()
    logger.info("cycle summary=%s", summary)
    return 0


def cmd_daemon(args: argparse.Namespace) -> int:
    config = load_config(_config_path(args))
    stop_event = threading.Event()

    def _stop(signum: int, frame: object) -> None:
        del frame
        logger.info("received signal %s", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)
    run_daemon(config, stop_event=stop_event, stream=sys.stdout)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="goruntime")
    parser.add_argument("--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sample_parser = subparsers.add_parser("sample-config", help="print a commented sample config")
    sample_parser.set_defaults(func=cmd_sample_config)

    init_parser = subparsers.add_parser("init", help="write the sample config if missing")
    init_parser.add_argument("--config", type=str, default=str(default_config_path()))
    init_parser.set_defaults(func=cmd_init)

    run_once_parser = subparsers.add_parser("run-once", help="poll every endpoint once")
    run_once_parser.add_argument("--config", type=str, default=str(default_config_path()))
    run_once_parser.set_defaults(func=cmd_run_once)

    daemon_parser = subparsers.add_parser("daemon", help="poll continuously")
    daemon_parser.add_argument("--config", type=str, default=str(default_config_path()))
    daemon_parser.set_defaults(func=cmd_daemon)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=bool(args.verbose))
    return int(args.func(args))
