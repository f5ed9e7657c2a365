# src/ecsim_core/log_config.py
import logging
import os
import sys
from typing import Optional, Union

LOG_LEVEL_ENV_VAR = "ECSIM_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    """Picks the explicit level, then the environment override, then INFO."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, logging.INFO)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        # getLevelName returns "Level X" for unknown names
        return resolved if isinstance(resolved, int) else logging.INFO
    return int(level)


def setup_logging(level: Optional[Union[int, str]] = None):
    """ Configures basic logging to stdout, replacing any handlers already installed. """
    log_formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.setLevel(_resolve_level(level))
    root_logger.addHandler(console_handler)
    logging.debug(f"Logging configured at level {logging.getLevelName(root_logger.level)}.")
