from __future__ import annotations

import logging
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
HANDLER_NAME = "groverlab-stdout"


def configure_logging(level: str = "INFO", name: str = "groverlab") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    ours = [h for h in logger.handlers if h.get_name() == HANDLER_NAME]
    if ours and ours[0].stream is sys.stdout:
        return logger  # already configured
    # sys.stdout was swapped since the handler was installed (e.g. captured output)
    for handler in ours:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.debug("logging configured at %s", level.upper())
    return logger
