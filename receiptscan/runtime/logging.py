"""Logging for the ``receiptscan`` namespace.

The level comes from ``RECEIPTSCAN_LOG_LEVEL`` (DEBUG, INFO, WARNING, ERROR);
records go to stderr so CLI output on stdout stays machine-readable.
"""

import logging
import os
import sys

ROOT_LOGGER_NAME = "receiptscan"

_FORMAT = "%(levelname)s [%(name)s] %(message)s"
# Debug output carries line numbers for tracing consensus passes.
_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_handler: logging.Handler | None = None


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(_FORMAT_DEBUG if level <= logging.DEBUG else _FORMAT)


def _level_from_env() -> int:
    name = os.environ.get("RECEIPTSCAN_LOG_LEVEL", "").upper()
    if name == "WARN":
        name = "WARNING"
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: int | None = None) -> None:
    """Attach the stderr handler once; later calls are no-ops."""
    global _handler
    if _handler is not None:
        return

    level = _level_from_env() if level is None else level
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(_formatter_for(level))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.addHandler(_handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, nested under ``receiptscan`` unless already inside it."""
    configure_logging()
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_log_level(level: int) -> None:
    """Change the namespace level at runtime, switching the format for DEBUG."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
    if _handler is not None:
        _handler.setFormatter(_formatter_for(level))
