"""Logging configuration for the application."""

import logging
import re
import sys

from kycauth.config import Settings

# Bearer headers, JWT-shaped strings and refresh cookies
_SECRET_PATTERNS = [
    re.compile(r"(Bearer\s+)[A-Za-z0-9\-_\.]+", re.IGNORECASE),
    re.compile(r"eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+"),
    re.compile(r"(refreshToken=)[^;\s]+"),
]


class RedactSecretsFilter(logging.Filter):
    """Mask access/refresh tokens before a record reaches any handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(
            lambda m: (m.group(1) if m.groups() else "") + "[REDACTED]", text
        )
    return text


def setup_logging(settings: Settings) -> None:
    """Configure application logging.

    Levels follow the environment: DEBUG when ``debug`` is set, WARNING under
    test, INFO otherwise. Every handler gets the token redaction filter.

    Args:
        settings: Application settings
    """
    if settings.debug:
        level = logging.DEBUG
    elif settings.environment == "test":
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RedactSecretsFilter())
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Driver and client chatter can echo headers and query strings
    for noisy in ("httpx", "httpcore", "asyncpg", "redis"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("kycauth").setLevel(level)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: environment={settings.environment}, level={logging.getLevelName(level)}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
