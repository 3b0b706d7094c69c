import logging
import sys
from typing import Optional

from config import settings

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure the root logger for the API process.

    Modules keep using ``logging.getLogger(__name__)``; this only sets the
    level, the format and a stdout handler once at startup.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=fmt or settings.LOG_FORMAT or DEFAULT_FORMAT,
        stream=sys.stdout,
    )
    # SQL statements are logged through SQL_ECHO instead
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
