"""Simple logging utilities for alltz."""

import logging
import sys
from pathlib import Path
from typing import Optional

from alltz.config.constants import LOG_FILENAME, config_dir


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger instance for the given module name."""
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        logger.setLevel(level)

    return logger


def setup_tui_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> Path:
    """Route log records to a file while the TUI owns the terminal.

    Returns:
        Path of the log file in use
    """
    log_dir = log_dir or config_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(log_file)],
        force=True,
    )
    return log_file
