# app/utils/my_logging.py
"""Logging configuration shared by the API process and the Celery worker"""
import logging
import sys
from app.config.settings import get_settings

NOISY_LOGGERS = [
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "celery",
    "kombu",
    "httpx",
    "twilio.http_client",
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
]


class CorrelationIdFilter(logging.Filter):
    """Adds the current request's correlation id to every record ("-" outside requests)"""

    def filter(self, record: logging.LogRecord) -> bool:
        from app.core.middleware import correlation_id_var

        record.correlation_id = correlation_id_var.get()
        return True


def setup_logging(verbose=True):
    """
    Configure the root logger once per process.

    verbose=False keeps WARNING and above and mutes library chatter.
    """
    settings = get_settings()

    if verbose:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s",
        handlers=[handler],
        force=True,
    )

    if not verbose:
        for name in NOISY_LOGGERS:
            noisy = logging.getLogger(name)
            noisy.setLevel(logging.ERROR)
            noisy.propagate = False
