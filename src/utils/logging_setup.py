"""
Logging configuration for the LFS integrity checker.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

BASE_LOGGER = "lfs_fsck"
MOVEMENT_LOGGER = "lfs_fsck.movement"
CONSOLE_HANDLER = "lfs_fsck.console"
FILE_HANDLER_PREFIX = "lfs_fsck.file."


def setup_logging(log_dir: Optional[Path] = None, verbose: bool = False) -> Dict[str, logging.Logger]:
    """Initialize loggers and return a mapping of named loggers.

    Console output goes to stderr so it never mixes with the command's
    report on stdout. File handlers are only attached when ``log_dir`` is set.
    Handlers from an earlier call are replaced, never retargeted, so repeated
    calls in one process always write to the current stderr and ``log_dir``.
    """
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    console_level = logging.DEBUG if verbose else logging.WARNING

    base_logger = logging.getLogger(BASE_LOGGER)
    base_logger.setLevel(logging.DEBUG)
    movement_logger = logging.getLogger(MOVEMENT_LOGGER)
    _remove_handlers(base_logger, CONSOLE_HANDLER)
    _remove_handlers(base_logger, FILE_HANDLER_PREFIX)
    _remove_handlers(movement_logger, FILE_HANDLER_PREFIX)
    movement_logger.propagate = True

    console = logging.StreamHandler(sys.stderr)
    console.set_name(CONSOLE_HANDLER)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console.setLevel(console_level)
    base_logger.addHandler(console)

    if log_dir is None:
        return {"main": base_logger, "movement": movement_logger}

    log_dir.mkdir(parents=True, exist_ok=True)
    date_stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    master_log = log_dir / f"master_log_{date_stamp}.log"
    error_log = log_dir / f"error_log_{date_stamp}.log"
    movement_log = log_dir / f"movement_log_{date_stamp}.log"

    base_logger.addHandler(_file_handler("master", master_log, logging.INFO, formatter))
    base_logger.addHandler(_file_handler("errors", error_log, logging.ERROR, formatter))

    movement_logger.setLevel(logging.INFO)
    movement_logger.addHandler(_file_handler("movement", movement_log, logging.INFO, formatter))
    movement_logger.propagate = False

    return {"main": base_logger, "movement": movement_logger}


def _file_handler(name: str, path: Path, level: int, formatter: logging.Formatter) -> logging.FileHandler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.set_name(FILE_HANDLER_PREFIX + name)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _remove_handlers(logger: logging.Logger, name_prefix: str) -> None:
    for handler in list(logger.handlers):
        if (handler.get_name() or "").startswith(name_prefix):
            logger.removeHandler(handler)
            # The console handler does not own sys.stderr; closing it leaves the stream open.
            handler.close()
