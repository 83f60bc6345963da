"""Logging setup driven by application settings."""

import logging

from eip712_authn.core.config import Settings

FORMATS = {
    "console": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    "keyvalue": "time=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s",
}


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings.

    Args:
        settings: Application settings providing level and format
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format=FORMATS[settings.log_format],
        force=True,
    )
    logging.getLogger(__name__).debug(
        f"Logging configured: level={settings.log_level} format={settings.log_format}"
    )
