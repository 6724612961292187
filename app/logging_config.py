"""Centralized logging configuration.

Usage::

    from app.logging_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan
"""
import logging
import sys

from app.config import settings

_SQL_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite")

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _parse_level(value: str) -> int:
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    """Apply root and SQL log levels from settings."""
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.LOG_LEVEL))

    # Avoid stacking handlers when the lifespan runs more than once (tests).
    if not any(getattr(h, "_blog_api", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._blog_api = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    sql_level = _parse_level(settings.LOG_LEVEL_SQL)
    for name in _SQL_LOGGERS:
        logging.getLogger(name).setLevel(sql_level)
