"""Bladegen logging.

Every module logs under the ``bladegen`` hierarchy through :func:`get_logger`.
The console handler writes to stderr because emitters may be pointed at
stdout (see :meth:`emitters.Emitter.from_streams`).

Environment variables:
    BLADEGEN_LOG_LEVEL: DEBUG / INFO (default) / WARNING / ERROR
    BLADEGEN_LOG_FILE: optional path; appends plain-text log lines
    BLADEGEN_LOG_COLOR: auto (default) / always / never
"""

import logging
import os
import sys
from typing import Optional

ROOT = "bladegen"

_CONFIGURED = False

_LEVEL_COLORS = {
    logging.DEBUG: "\033[2m",      # dim: per-operation detail
    logging.INFO: "\033[32m",      # green: phase summaries
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
_RESET = "\033[0m"


def _parse_level(value, default: Optional[int] = None) -> Optional[int]:
    """``"debug"``, ``"INFO"`` or ``10`` -> a :mod:`logging` level number."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    level = logging.getLevelName(str(value).strip().upper())
    return level if isinstance(level, int) else default


def _use_color(stream) -> bool:
    mode = os.environ.get("BLADEGEN_LOG_COLOR", "auto").lower()
    if mode in ("always", "never"):
        return mode == "always"
    return hasattr(stream, "isatty") and stream.isatty()


class _ConsoleFormatter(logging.Formatter):
    """Colors the level name and drops the ``bladegen.`` prefix from names."""

    def __init__(self, use_color: bool):
        super().__init__("%(levelname)s %(name)s: %(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        if record.name.startswith(ROOT + "."):
            record.name = record.name[len(ROOT) + 1:]
        if self.use_color:
            color = _LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{_RESET}"
        return super().format(record)


def _configure_once() -> None:
    """Lazily attach handlers to the ``bladegen`` logger."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger(ROOT)
    root.setLevel(_parse_level(os.environ.get("BLADEGEN_LOG_LEVEL", "INFO"), logging.INFO))

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_ConsoleFormatter(_use_color(sys.stderr)))
    root.addHandler(console)

    log_file = os.environ.get("BLADEGEN_LOG_FILE")
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Return ``bladegen.<name>``, configuring the hierarchy on first use.

    Args:
        name: Typically ``__name__`` of the calling module.
    """
    _configure_once()
    return logging.getLogger(f"{ROOT}.{name}")


def set_level(level) -> int:
    """Set the ``bladegen`` level from the ``log_level`` config key.

    Unknown names leave the level unchanged so a typo never aborts a
    generation run.

    Returns:
        The level in effect before the call.
    """
    _configure_once()
    root = logging.getLogger(ROOT)
    previous = root.level
    parsed = _parse_level(level)
    if parsed is None:
        root.warning("ignoring unknown log level %r", level)
    else:
        root.setLevel(parsed)
    return previous


def log_block(logger: logging.Logger, title: str, text: str,
              level: int = logging.INFO) -> None:
    """Log *title*, then every line of *text* as its own indented record.

    Every line gets the same prefix, so tables such as the Cayley table stay
    aligned on the console.
    """
    if not logger.isEnabledFor(level):
        return
    logger.log(level, "%s", title)
    for line in text.splitlines():
        logger.log(level, "  %s", line)
