"""Logging setup for the server process."""

import logging

from ..consts import SERVER_NAME

# httpx logs every request URL at INFO, and the credential exchange URL
# carries the client secret
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure root logging and return the package logger."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return logging.getLogger(SERVER_NAME)
