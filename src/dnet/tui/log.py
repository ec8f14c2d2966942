"""Diagnostic logging that never writes to the rendered terminal."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dnet.tui.config import config_dir

__all__ = ["LOG_FORMAT", "default_log_path", "configure_logging"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def default_log_path() -> Path:
    """``$DNET_TUI_LOG`` if set, else ``tui.log`` in the config directory."""
    env = os.environ.get("DNET_TUI_LOG")
    if env:
        return Path(env)
    return config_dir() / "tui.log"


def configure_logging(path: str | Path | None = None, level: str = "info") -> Path:
    """Send all ``dnet`` log records to the file at *path*.

    The root logger is left alone so nothing reaches stderr while the
    screen is in raw mode.  Returns the log file path.
    """
    log_path = Path(path) if path else default_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("dnet")
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False
    return log_path
