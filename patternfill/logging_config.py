"""
Logging setup for scripts and applications using patternfill.

The package itself only creates module loggers under the ``patternfill``
namespace; nothing is printed until an application attaches handlers,
either its own or the ones installed here.
"""
import logging
import sys
from typing import IO, List, Optional

LOGGER_NAME = "patternfill"
LOG_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'
DATE_FORMAT = '%H:%M:%S'

# Marks handlers installed by setup_logging so a second call replaces only those
_OWNED = "_patternfill_owned"


def _owned_handlers(logger: logging.Logger) -> List[logging.Handler]:
    return [handler for handler in logger.handlers if getattr(handler, _OWNED, False)]


def _attach(logger: logging.Logger, handler: logging.Handler, level: int,
            formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _OWNED, True)
    logger.addHandler(handler)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[IO[str]] = None,
    append: bool = False
) -> logging.Logger:
    """
    Route patternfill's log records to a stream and optionally a file.

    Calling it again swaps the handlers it installed before; handlers
    added by the application are left alone.

    Args:
        level: Threshold for the package logger and its handlers
        log_file: Optional path of a log file
        stream: Console stream, stderr by default
        append: Append to ``log_file`` instead of truncating it

    Returns:
        The ``patternfill`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    _attach(logger, logging.StreamHandler(stream or sys.stderr), level, formatter)

    if log_file:
        mode = 'a' if append else 'w'
        _attach(logger, logging.FileHandler(log_file, mode=mode, encoding='utf-8'), level, formatter)

    logger.debug("Logging to %s%s", "console", f" and {log_file}" if log_file else "")
    return logger
