"""
Logging setup for the badge card server and the env check script.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# These loggers print request URLs at INFO. On the Discord token endpoint and
# the OAuth callback those URLs carry authorization codes.
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def configure_logging(level: str = "INFO") -> None:
    """Send badgecard logs to stdout at ``level`` (the ``APP_LOG_LEVEL`` setting)."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stdout)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["LOG_FORMAT", "configure_logging"]
