"""Logging setup shared by the engine and the API."""

import logging

from config import config


def setup_logging(level: str | None = None) -> None:
    """Call once at program start (api/main.py)."""
    level = (level or config.logging.level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=config.logging.format,
        datefmt="%H:%M:%S",
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
