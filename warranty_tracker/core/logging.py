import logging
import sys

import structlog

from warranty_tracker.core.config import settings

# Request-level chatter from client and driver libraries.
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "asyncio")


def _renderer() -> structlog.types.Processor:
    if settings.APP_ENV == "development":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging(level: str | None = None) -> None:
    """Route stdlib and structlog output to stdout.

    Development gets readable console lines; every other environment emits
    one JSON object per event.
    """
    log_level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stdout, force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLevelName(log_level)))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
