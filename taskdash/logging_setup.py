"""Logging configuration. The terminal belongs to the UI, so logs go to a file."""

import logging
from pathlib import Path
from typing import Optional, Union

from taskdash.config import CACHE_DIR

LOG_FILE_NAME = "taskdash.log"


class _TaskdashOnlyFilter(logging.Filter):
    """Keep our loggers; third-party records only at WARNING and above."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "taskdash" or record.name.startswith("taskdash."):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(log_dir: Optional[Union[str, Path]] = None, level: Union[int, str] = logging.INFO) -> Path:
    """Install one file handler on the root logger. Call once, before the UI starts."""
    log_dir = Path(log_dir) if log_dir else CACHE_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    fh.addFilter(_TaskdashOnlyFilter())
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file


__all__ = ["setup_logging", "LOG_FILE_NAME"]
