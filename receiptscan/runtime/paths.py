"""Centralized path management for receiptscan.

This module provides a single source of truth for the paths a running
scanner reads from or writes to.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project root: ``RECEIPTSCAN_HOME`` or the working directory."""
    home = os.environ.get("RECEIPTSCAN_HOME")
    return Path(home).expanduser() if home else Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        # Ensure root is resolved to absolute path
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def scan_config(self) -> Path:
        """Scan options TOML file; ``RECEIPTSCAN_CONFIG`` overrides it."""
        override = os.environ.get("RECEIPTSCAN_CONFIG")
        if override:
            return Path(override).expanduser()
        return self.config / "receiptscan.toml"


# Module-level singleton
_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Drop the singleton so the next get_paths() re-reads the environment."""
    global _paths
    _paths = None
