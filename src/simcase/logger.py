import logging

import simcase.config as config

default_level = config.LOGGING_LEVEL
logging.basicConfig(
    level=default_level,
    format="%(asctime)s [%(levelname)s] [%(filename)s:%(lineno)d - %(funcName)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("simcase")

# Shortcut aliases
debug = logger.debug
info = logger.info
warning = logger.warning
error = logger.error
exception = logger.exception


def get_logger():
    return logger


def preview(text: str, n: int = config.LOG_PREVIEW_CHARS) -> tuple[str, str]:
    """Return the first and last ``n`` characters of a model response."""
    if n <= 0:
        return ("", "")
    return (text[:n], text[-n:])
