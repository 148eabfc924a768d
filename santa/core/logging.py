import sys
from loguru import logger

from santa.core.config import Settings


def setup_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format=settings.log_format,
    )
    if settings.log_path:
        logger.add(
            settings.log_path,
            level="DEBUG",
            format=settings.log_format,
            rotation=settings.log_rotation,
            compression="zip",
        )
