"""Logging setup for applications using the storage adapter."""

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure root logging with the standard format.

    With no level, the LOG_LEVEL setting is used. Calling this again
    replaces the handlers installed by the previous call.
    """
    if level is None:
        from .settings import get_settings

        level = get_settings().log_level

    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(
        format=LOG_FORMAT,
        level=level,
        force=True,
    )
    logging.getLogger(__name__).debug("Logging configured", extra={"level": level})
