from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] - %(message)s"

# third-party loggers that repeat what CrptClient already logs per request
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | None = None) -> int:
    """
    Configure root logging from ``level`` or LOG_LEVEL and return the numeric level.

    Thread names are part of the format: submissions run on server worker
    threads and limiter ticks on "window-limiter-ticker".
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric = getattr(logging, level_name, None)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(level=numeric, format=LOG_FORMAT)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))

    return numeric
