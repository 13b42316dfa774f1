"""Logging configuration helpers."""

import logging
import sys

SDK_LOGGERS = ("httpx", "httpcore", "openai", "google_genai")


def configure_logging(level: str = "INFO") -> None:
    """Send ``homefix`` records to stderr at the requested level.

    Repeated calls only adjust levels. HTTP and SDK loggers stay at WARNING
    unless ``level`` is DEBUG.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logger = logging.getLogger("homefix")
    logger.setLevel(resolved)
    sdk_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)
    if logger.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
