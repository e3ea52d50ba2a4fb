"""Centralized logging configuration.
Call setup_logging() once at startup (console run, API server or tests).
"""

from __future__ import annotations

import io
import logging
import sys
from typing import Optional, TextIO

from dep_autofill.config import get_settings

_VERBOSE_FORMAT = (
    "\n%(asctime)s │ %(levelname)-8s │ %(name)s │ %(funcName)s:%(lineno)d\n"
    "  %(message)s"
)
_COMPACT_FORMAT = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Attach one handler to the root logger.

    ``level`` defaults to Settings.log_level. Debug mode uses the multi-line
    format with call sites; otherwise one line per record.
    """
    root = logging.getLogger()
    # Avoid duplicate handlers on repeated calls
    if root.handlers:
        return

    settings = get_settings()
    level_no = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    root.setLevel(level_no)

    if stream is None:
        # Console prompts print non-ASCII option text (e.g. "6–12 months")
        stream = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace", line_buffering=True)
    handler = logging.StreamHandler(stream)
    handler.setLevel(level_no)
    handler.setFormatter(logging.Formatter(
        fmt=_VERBOSE_FORMAT if settings.debug else _COMPACT_FORMAT,
        datefmt="%H:%M:%S",
    ))
    root.addHandler(handler)

    # HTTP stack stays quiet unless something goes wrong
    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
    for name in ("uvicorn", "fastapi"):
        logging.getLogger(name).setLevel(logging.INFO)
