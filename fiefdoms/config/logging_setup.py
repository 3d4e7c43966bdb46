"""
Rolling Fiefdoms - Logging Configuration

The engine modules only create module loggers; the host application
calls configure_logging once at startup.
"""

import logging

from fiefdoms.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> int:
    """
    Configure root logging from settings.

    Debug mode forces DEBUG regardless of the configured level.

    Returns:
        The numeric level applied
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else logging.getLevelName(settings.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    logging.getLogger("fiefdoms").setLevel(level)
    return level
