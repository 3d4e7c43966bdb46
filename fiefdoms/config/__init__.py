"""
Rolling Fiefdoms Configuration.

Environment variables, settings, and logging configuration.
"""

from fiefdoms.config.logging_setup import configure_logging
from fiefdoms.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_settings"]
