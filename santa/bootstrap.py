from __future__ import annotations

from typing import Optional

from loguru import logger

from santa.core.config import Settings, load_settings
from santa.core.logging import setup_logging
from santa.db import Base, get_session, init_engine
from santa.services.coordinator import GroupCoordinator


def bootstrap(settings: Optional[Settings] = None) -> GroupCoordinator:
    settings = settings or load_settings()
    setup_logging(settings)
    engine = init_engine(settings.database_url)
    Base.metadata.create_all(engine)

    logger.info("santa ready")
    logger.info("Database     - {url}", url=engine.url.render_as_string(hide_password=True))
    logger.info("Max attempts - {attempts}", attempts=settings.max_attempts)

    return GroupCoordinator(get_session, max_attempts=settings.max_attempts)
