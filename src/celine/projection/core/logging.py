# celine/projection/core/logging.py
from __future__ import annotations

import logging
import sys

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"


def configure_logging(level: str = "INFO", *, json_output: bool = True) -> None:
    """
    Install a single stdout handler on the root logger.

    JSON lines by default; ``json_output=False`` gives plain text for local
    development.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    # Replace rather than append, the app factory may run more than once
    root.handlers = [handler]
