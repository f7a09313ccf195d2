import logging
import sys
from typing import Optional

from runtrace.core.config import get_settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure console logging for the tracing client.

    Only the "runtrace" logger is touched; the host application's root
    logger is left alone.
    """
    logger = logging.getLogger("runtrace")
    logger.setLevel(level or get_settings().log_level)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Silence noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
