"""Logging helpers for ohabits.

All loggers live under the ``ohabits`` namespace so a single handler
configured by the service covers the engine, the store and the routes.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "ohabits"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ohabits namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install a single stream handler on the ohabits root logger.

    Safe to call more than once; the handler is only added the first time.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper())
    if not any(getattr(h, "_ohabits_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ohabits_handler = True
        logger.addHandler(handler)
    return logger


def log_sync_operation(
    prefix: str,
    operation: str,
    kind: str,
    record_id: Optional[str],
    success: bool,
    error: Optional[str] = None,
) -> None:
    """Log the outcome of one push item."""
    logger = get_logger("sync")
    status = "OK" if success else "FAIL"
    message = f"{operation.upper()} | {prefix} | {kind}/{record_id or '-'} | {status}"
    if error:
        message += f" | {error}"
    if success:
        logger.debug(message)
    else:
        logger.warning(message)
