"""Logging setup for the CLI."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "WARNING", log_path: Optional[Path] = None) -> logging.Logger:
    """Configure console logging via rich and, optionally, a rotating log file.

    Safe to call more than once. The console handler is added once; a file
    handler pointing anywhere other than ``log_path`` is closed and replaced.
    """
    logger = logging.getLogger("tradeguard")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        console = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        console.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console)

    wanted = os.path.abspath(log_path) if log_path is not None else None
    for handler in [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]:
        if handler.baseFilename == wanted:
            return logger
        logger.removeHandler(handler)
        handler.close()

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
