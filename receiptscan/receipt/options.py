"""Tuning options for a scanning session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


class ScanOptionsError(ValueError):
    """Raised when scan options are out of range or unknown."""


@dataclass(frozen=True)
class ScanOptions:
    """Caller-supplied configuration, fixed for the lifetime of a session."""

    # Minimum product similarity (0-100) for joining an existing group.
    similarity_threshold: int = 50
    # Minimum trustworthiness (0-100) of a group winner to be emitted.
    trustworthy_threshold: int = 20
    # Maximum members per group; the oldest is evicted beyond this.
    max_cache_size: int = 20
    # Receipts with at least this many positions need fewer scans per line.
    min_long_receipt_size: int = 20
    # Continuous camera feed (True) or discrete image captures (False).
    video_feed: bool = True
    # Under-observed groups older than this are discarded.
    min_duration_before_invalidate: timedelta = timedelta(seconds=3)
    # Valid passes required before a video scan completes.
    min_valid_scans: int = 1
    # Frames closer than this to the previous accepted frame are dropped (video only).
    scan_interval: timedelta = timedelta(0)
    # An incomplete session older than this is reset.
    scan_timeout: timedelta = timedelta(seconds=30)
    # Minimum corner points per side for a skew line fit.
    skew_min_samples: int = 3

    def __post_init__(self) -> None:
        for name in ("similarity_threshold", "trustworthy_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ScanOptionsError(f"{name} must be within 0..100, got {value}")
        for name in ("max_cache_size", "min_long_receipt_size", "min_valid_scans", "skew_min_samples"):
            value = getattr(self, name)
            if value < 1:
                raise ScanOptionsError(f"{name} must be at least 1, got {value}")
        for name in ("min_duration_before_invalidate", "scan_interval", "scan_timeout"):
            if getattr(self, name) < timedelta(0):
                raise ScanOptionsError(f"{name} must not be negative")

    @property
    def min_scans(self) -> int:
        """Observations a group needs before its winner counts."""
        return 3 if self.video_feed else 1
