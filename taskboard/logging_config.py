"""Root logger setup."""

import logging
from typing import Optional

from taskboard.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT)
    # SQL echo is noisy even in debug
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
