"""Runtime infrastructure for receiptscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Scan option loading via load_scan_options()

Usage:
    from receiptscan.runtime import get_logger, get_paths, load_scan_options

    logger = get_logger(__name__)
    options = load_scan_options()
"""

from receiptscan.runtime.logging import configure_logging, get_logger, set_log_level
from receiptscan.runtime.paths import (
    ProjectPaths,
    get_paths,
    reset_paths,
)
from receiptscan.runtime.scan_config import load_scan_options, scan_options_from_mapping

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    # Config
    "load_scan_options",
    "scan_options_from_mapping",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
