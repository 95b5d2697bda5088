import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries whose debug output drowns out account events.
QUIET_LOGGERS = ("urllib3", "multipart", "python_multipart")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging for the API process and the maintenance scripts."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level_name, format=LOG_FORMAT)
    logging.getLogger("roomhub").setLevel(level_name)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
