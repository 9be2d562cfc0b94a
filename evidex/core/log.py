from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler


LOG_FORMAT = "%(name)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO", log_path: Path | None = None) -> logging.Logger:
    """Route the root logger through a single handler.

    Console output goes through rich. Full-screen hosts pass ``log_path`` so
    records land in a file instead of on the terminal they draw on. Calling
    this again only adjusts the level; it never stacks handlers.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not any(getattr(handler, "_evidex", False) for handler in root.handlers):
        if log_path is not None:
            handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
            handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        else:
            handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._evidex = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    root.setLevel(level)
    return root
