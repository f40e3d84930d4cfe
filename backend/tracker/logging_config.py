from __future__ import annotations
"""Logging setup shared by the app factory and the scripts.

Modules log through `logging.getLogger(__name__)`; this only decides level
and format for the `tracker` logger tree once per process.
"""
import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

_configured = False


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    global _configured
    logger = logging.getLogger('tracker')
    logger.setLevel((level or 'INFO').upper())
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        _configured = True
    return logger
