"""Command-line entry point."""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Mapping, Optional

from taskdash import __version__
from taskdash.config import load_settings
from taskdash.logging_setup import setup_logging
from taskdash.interface.tui_themes import THEMES

logger = logging.getLogger("taskdash.cli")


def build_parser(themes: Mapping[str, object]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskdash",
        description="taskdash: interactive terminal dashboard for Taskwarrior",
    )
    parser.add_argument("--config", type=Path, help="YAML config file (default: ~/.taskdash_config.yaml)")
    parser.add_argument("--filter", "-f", dest="task_filter", help="initial Taskwarrior filter")
    parser.add_argument("--theme", choices=list(themes.keys()), help="colour palette")
    parser.add_argument("--lang", help="interface language (en, ru)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper)
    parser.add_argument("--log-dir", type=Path, help="directory for taskdash.log")
    parser.add_argument("--version", action="version", version=f"taskdash {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser(THEMES).parse_args(argv)
    settings = load_settings(args.config)
    overrides = {}
    if args.theme:
        overrides["theme"] = args.theme
    if args.lang:
        overrides["lang"] = args.lang
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        settings = replace(settings, **overrides)
    log_file = setup_logging(args.log_dir, settings.log_level)
    logger.info("taskdash %s starting, logging to %s", __version__, log_file)

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        print("taskdash needs an interactive terminal", file=sys.stderr)
        return 2

    # Imported late so --help and --version work without a terminal.
    from taskdash.interface.tui_app import DashboardTUI

    return DashboardTUI(settings, task_filter=args.task_filter).run()


__all__ = ["build_parser", "main"]
