"""Logging for **aria_scout**.

All modules share one logger, ``AriaScout``::

    from aria_scout.logger import logger
    logger.info("Crawl start: %s", url)

Records go to stderr so that stdout stays clean for results piped from the
CLI (JSON, tables).  :func:`init_logging` is called once per CLI invocation
with ``--log-level`` / ``--log-file`` / ``--log-format``; library users who
never call it get the standard library defaults.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "AriaScout"

#: rotation settings for --log-file
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

LevelT = Union[int, str]


def _handlers(fmt: str, log_file: Union[str, Path, None]) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    out: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        out.append(
            RotatingFileHandler(
                filename=str(path),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in out:
        handler.setFormatter(formatter)
    return out


def configure(
    *,
    level: LevelT = "WARNING",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach a stderr handler (and a rotating file handler) to the project logger.

    With *replace_handlers* the previous handlers are closed and removed first,
    so repeated calls do not duplicate output.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        for old in list(lg.handlers):
            lg.removeHandler(old)
            old.close()
    for handler in _handlers(log_format, log_file):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def init_logging(
    level: LevelT = "WARNING",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """CLI entry point: reset the logger from command line options."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


logger: logging.Logger = logging.getLogger(LOGGER_NAME)

__all__ = ["logger", "configure", "init_logging", "DEFAULT_FORMAT", "LOGGER_NAME"]
