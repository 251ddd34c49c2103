import sys

from loguru import logger

from notification_prefs.config import Settings


def configure_logging(settings: Settings):
    """Replace loguru's default sink with one stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL.upper(),
        serialize=settings.LOG_JSON,
        backtrace=not settings.is_prod,
        diagnose=not settings.is_prod,
    )
