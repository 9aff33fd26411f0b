from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logger(
    name: str = "truss_loadtest",
    level: int = logging.INFO,
    log_path: Optional[Path] = None,
) -> logging.Logger:
    """Attach a console handler (or a file handler when log_path is given).

    Safe to call repeatedly: a handler for the same destination is only added once.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if log_path is not None:
        log_path = Path(log_path)
        already = any(
            isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == os.path.abspath(log_path)
            for h in logger.handlers
        )
        if not already:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)
    else:
        already = any(type(h) is logging.StreamHandler for h in logger.handlers)
        if not already:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)

    return logger
