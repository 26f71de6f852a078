# utils/logger.py

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", fmt: str = DEFAULT_FORMAT, log_file: Optional[Path] = None,
                  max_bytes: int = 10_000_000, backup_count: int = 5, stream=None) -> logging.Logger:
    """Configure the root logger: console output plus an optional rotating file"""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt)

    # Reconfiguring (tests, reload) must not stack duplicate handlers
    for handler in list(logger.handlers):
        if getattr(handler, "_heatmap_tracker", False):
            logger.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(stream or sys.stdout)
    console.setFormatter(formatter)
    console._heatmap_tracker = True
    logger.addHandler(console)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(exist_ok=True, parents=True)
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        handler.setFormatter(formatter)
        handler._heatmap_tracker = True
        logger.addHandler(handler)

    return logger
