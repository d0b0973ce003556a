import logging
import os
import re
import sys

from loguru import logger

# httpx logs every request URL at INFO, and Helius URLs carry the API key
_QUIET_LOGGERS = ("httpx", "httpcore")

_API_KEY_RE = re.compile(r"(api-key=)[^&\s]+")


def _redact(record) -> None:
    record["message"] = _API_KEY_RE.sub(r"\1***", record["message"])


def setup_logger(*, json_logs: bool = False, level: str = "INFO") -> None:
    """Configure loguru sinks for the indexer.

    LOG_LEVEL env overrides ``level`` on the console. The daily file sink
    keeps DEBUG so per-item skips (bad signatures, missing metadata) can be
    traced after the fact.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()
    logger.configure(patcher=_redact)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss.SSS}</green> | "
                "<level>{level: <7}</level> | "
                "<cyan>{module}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    logger.add(
        "logs/indexer_{time:YYYY-MM-DD}.log",
        rotation="20 MB",
        retention="3 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
