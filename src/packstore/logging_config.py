import logging
import os
import sys
from typing import IO, Optional, Union

ENV_LOG_LEVEL = "PACKSTORE_LOG_LEVEL"
LOGGER_NAME = "packstore"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: Optional[Union[int, str]] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Attach a stream handler to the ``packstore`` logger and set its level.

    The root logger is left to the host application. ``level`` falls back to
    PACKSTORE_LOG_LEVEL, then WARNING. Calling this again replaces the handler
    installed by the previous call instead of stacking another one.
    """
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL) or logging.WARNING
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_packstore_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._packstore_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
