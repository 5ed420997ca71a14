# casenotes/db/init_db.py
import logging
from casenotes.db.base import Base
from casenotes.db.session import engine

logger = logging.getLogger(__name__)


def init_db(bind=None):
    # import to ensure modules define models
    from casenotes import models  # noqa: F401
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ready (%s)", ", ".join(sorted(Base.metadata.tables)))
