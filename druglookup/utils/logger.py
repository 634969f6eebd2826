from __future__ import annotations
import logging, os, sys
from typing import Optional

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _default_level() -> str:
    return os.getenv("DRUGLOOKUP_LOG_LEVEL", "INFO").upper()


def get_logger(name: str = "druglookup", level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        if level:
            logger.setLevel(level.upper())
        return logger
    logger.setLevel((level or _default_level()).upper())
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(h)
    logger.propagate = False
    return logger
