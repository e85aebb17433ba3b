"""Structured logging setup for the gateway."""

import logging
import sys
from pathlib import Path
from typing import Optional

from config import LOG_LEVEL, LOGS_DIR

LOGGER_NAME = "fortytwo-mcp"


def setup_logging(level: int = logging.INFO, logs_dir: Optional[Path] = None) -> logging.Logger:
    """Configure structured logging.

    Console output goes to stderr: stdout is reserved for the stdio transport.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(fmt)
    logger.addHandler(console)

    # File handler
    if logs_dir is not None:
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(logs_dir / "gateway.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    return logger


logger = setup_logging(getattr(logging, LOG_LEVEL, logging.INFO), LOGS_DIR)
