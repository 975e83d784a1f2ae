"""
Logging setup shared by the CLI and the fake Live bridge server.

Responsibilities:
    - Configure structured logging to stderr (stdout stays free for CLI output)
    - Quiet third-party loggers that would otherwise flood a monitoring session
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s.%(msecs)03d " "[%(name)s] %(levelname)s " "%(message)s"
_LOG_DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure root logger to write structured output to stderr.

    Call once, at the top of an entry point, before the context is built.

    Args:
        level: Python logging level (default: INFO)
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # websocket-client logs every frame at DEBUG and every reconnect error at
    # ERROR; the supervisor already reports both in its own words.
    logging.getLogger("websocket").setLevel(logging.CRITICAL)
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
