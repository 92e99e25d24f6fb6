"""
Logging setup for CivicWatch.

Modules log through logging.getLogger(__name__); this only configures the root.
"""

import logging


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure root logging once at application startup.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ...)
    """
    logging.basicConfig(
        level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # firebase/google clients are chatty at INFO
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
