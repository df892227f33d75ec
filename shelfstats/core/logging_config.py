"""
Root logger setup. Called once from shelfstats.main at import time.

Under gunicorn the access/error logs are handled by gunicorn.conf.py;
this only sets the level and format for application loggers.
"""
import logging

from shelfstats.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
