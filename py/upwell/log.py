"""Logging setup for the upwell package."""

import logging
import sys
from typing import Optional

from upwell.config import UpwellConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None,
                      config: Optional[UpwellConfig] = None) -> logging.Logger:
    """Attach a stream handler to the 'upwell' logger.

    The level is the explicit level if given, else config.log_level.
    Without a config, UpwellConfig.from_env() supplies it, so
    UPWELL_LOG_LEVEL is only read when config is None. Calling twice
    does not add a second handler.
    """
    config = config or UpwellConfig.from_env()
    logger = logging.getLogger("upwell")
    logger.setLevel((level or config.log_level).upper())
    if not any(getattr(h, "_upwell", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._upwell = True
        logger.addHandler(handler)
    return logger
