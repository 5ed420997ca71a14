# casenotes/core/logging.py
import logging
import sys

from casenotes.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str = None):
    """
    Configure the root logger once for the whole process.

    Repeated calls only adjust the level, so importing the app in tests
    does not stack handlers.
    """
    global _configured
    level = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(level)

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        _configured = True

    # keep library chatter down unless explicitly asked for
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.SQL_ECHO else logging.WARNING
    )
