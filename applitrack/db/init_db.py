import logging

from applitrack.db.base import Base
from applitrack.db.session import engine

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create all tables on the given engine (defaults to the configured one)."""
    # Register models with Base.metadata
    from applitrack.db import models  # noqa: F401

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target)
    logger.info(f"Database tables ensured on {target.url.render_as_string(hide_password=True)}")
