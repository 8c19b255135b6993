"""Logging setup shared by the CLI and embedding applications."""

import logging
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "asyncpg")


def setup_logging(
    name: str = "taskboard",
    level: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure root logging for taskboard.

    Args:
        name: Logger name to return
        level: Log level (defaults to TASKBOARD_LOG_LEVEL, then LOG_LEVEL, then INFO)
        log_file: Optional file that receives a copy of every record

    Returns:
        The named logger
    """
    level = level or os.getenv("TASKBOARD_LOG_LEVEL") or os.getenv("LOG_LEVEL", "INFO")
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, handlers=handlers, force=True)

    # Request-level logs only when debugging
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))

    return logging.getLogger(name)
