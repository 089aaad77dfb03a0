import logging
from logging.handlers import RotatingFileHandler
import os
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

_sentry_initialized = False


def init_sentry(
    dsn: str,
    environment: str = "development",
    traces_sample_rate: float = 1.0,
) -> bool:
    """
    Start Sentry error tracking, at most once per process.

    INFO records become breadcrumbs and ERROR records become events.

    Args:
        dsn (str): Project DSN. An empty string leaves Sentry off.
        environment (str): Environment name reported with each event.
        traces_sample_rate (float): Fraction of transactions to trace.

    Returns:
        bool: True if this call started Sentry.
    """
    global _sentry_initialized

    if _sentry_initialized or not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            AsyncioIntegration(),
        ],
    )
    _sentry_initialized = True
    return True


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logger(
    name: str,
    log_file: str,
    level: int = logging.INFO,
    sentry_tag: Optional[str] = None,
) -> logging.Logger:
    """
    Return the named logger, writing to a rotating file and to stderr.

    Handlers are attached only the first time a name is configured.

    Args:
        name (str): Logger name.
        log_file (str): Path of the log file; its directory is created if needed.
        level (int, optional): Minimum level. Defaults to logging.INFO.
        sentry_tag (str, optional): ``component`` tag applied in Sentry.
    """
    if sentry_tag and _sentry_initialized:
        sentry_sdk.set_tag("component", sentry_tag)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger.addHandler(
        _handler(
            RotatingFileHandler(
                log_file,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            ),
            level,
        )
    )
    logger.addHandler(_handler(logging.StreamHandler(), level))
    return logger


__all__ = ["init_sentry", "setup_logger"]
