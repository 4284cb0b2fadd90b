from __future__ import annotations

import os
import sys
from typing import Optional

from loguru import logger

DEFAULT_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"

_CONFIGURED = False


def setup_logging(level: Optional[str] = None, *, force: bool = False) -> None:
    """Configure the loguru sinks once.

    Env vars:
    - STABLEIDS_LOG_LEVEL: level used when `level` is not given, default WARNING
    - STABLEIDS_LOG_FILE: optional path to also write logs to
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    resolved = (level or os.getenv("STABLEIDS_LOG_LEVEL") or "WARNING").upper()
    logger.remove()
    logger.add(lambda msg: sys.stderr.write(msg), level=resolved, format=DEFAULT_FORMAT)

    log_file = os.getenv("STABLEIDS_LOG_FILE")
    if log_file:
        logger.add(log_file, level=resolved, format=DEFAULT_FORMAT)

    _CONFIGURED = True
