"""
Logging setup.
"""

from __future__ import annotations

import logging
import os


def setup_logging(log_path: str, log_level: str) -> None:
    """Log to `log_path` and stderr. An empty path logs to stderr only."""
    handlers: list = [logging.StreamHandler()]
    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.insert(0, logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
