"""Logging configuration"""

import logging

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

def setup_logging(level: str = None) -> None:
    """Configure root logging for the application"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # SQL echo is controlled by DATABASE_ECHO, keep the engine logger quiet otherwise
    if not settings.DATABASE_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
