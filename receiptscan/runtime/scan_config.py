"""Runtime loader for scan options."""

from __future__ import annotations

import dataclasses
from datetime import timedelta
from pathlib import Path
from typing import Any

from receiptscan.receipt.options import ScanOptions, ScanOptionsError
from receiptscan.runtime.logging import get_logger
from receiptscan.runtime.paths import get_paths

logger = get_logger(__name__)

# Options given in seconds in TOML and as timedelta in ScanOptions
_DURATION_FIELDS = frozenset({"min_duration_before_invalidate", "scan_interval", "scan_timeout"})
_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(ScanOptions))


def scan_options_from_mapping(values: dict[str, Any], base: ScanOptions | None = None) -> ScanOptions:
    """
    Build ScanOptions from plain values, e.g. a TOML table or a JSON body.

    Durations are given in seconds. Unknown keys and wrongly typed values
    raise ScanOptionsError.
    """
    changes: dict[str, Any] = {}
    for key, value in values.items():
        if key not in _FIELD_NAMES:
            raise ScanOptionsError(f"Unknown scan option: {key}")
        if key in _DURATION_FIELDS:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ScanOptionsError(f"{key} must be a number of seconds, got {value!r}")
            changes[key] = timedelta(seconds=value)
        elif key == "video_feed":
            if not isinstance(value, bool):
                raise ScanOptionsError(f"video_feed must be true or false, got {value!r}")
            changes[key] = value
        else:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ScanOptionsError(f"{key} must be an integer, got {value!r}")
            changes[key] = value
    return dataclasses.replace(base or ScanOptions(), **changes)


def load_scan_options(config_path: str | Path | None = None) -> ScanOptions:
    """
    Load scan options from the ``[scan]`` table of a TOML file.

    Args:
        config_path: Optional TOML path override. If None, uses the project path.

    Returns:
        Options from the file, or defaults when the file does not exist.
    """
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    path = Path(config_path) if config_path is not None else get_paths().scan_config
    if not path.exists():
        logger.debug("No scan config at %s, using defaults", path)
        return ScanOptions()

    with open(path, "rb") as f:
        try:
            config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ScanOptionsError(f"Invalid TOML in {path}: {e}") from e

    table = config.get("scan", {})
    if not isinstance(table, dict):
        raise ScanOptionsError(f"[scan] in {path} must be a table")
    logger.debug("Loaded %d scan option(s) from %s", len(table), path)
    return scan_options_from_mapping(table)
