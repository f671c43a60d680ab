"""Scan session workflow: frames in, receipt snapshots and callbacks out."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from receiptscan.domain.receipt import FrameReading, Operation, ReceiptSnapshot, RecognizedPosition, ScanProgress
from receiptscan.receipt.cached_receipt import CachedReceipt
from receiptscan.receipt.options import ScanOptions
from receiptscan.receipt.skew_estimator import estimate_degrees
from receiptscan.runtime.logging import get_logger

ScanStatus = Literal[
    "complete",
    "in_progress",
    "dropped",
    "timeout",
]


@dataclass(frozen=True)
class ScanPassResult:
    """Outcome of offering one frame to a session."""

    status: ScanStatus
    snapshot: ReceiptSnapshot
    progress: ScanProgress | None = None


def estimate_percentage(snapshot: ReceiptSnapshot) -> int | None:
    """How close the summed positions are to the printed total, in percent.

    None without a printed total or when the printed total is zero.
    """
    if snapshot.sum is None:
        return None
    calculated = snapshot.calculated_sum
    printed = snapshot.sum.value
    if printed == 0:
        return None
    if calculated < printed:
        return int(calculated / printed * 100)
    if calculated == 0:
        return None
    return int(printed / calculated * 100)


class ScanSession:
    """One scanning run over a stream of frames.

    Owns a consensus cache and drives it one pass per accepted frame. A pass
    that overlaps a running one is dropped and answered with the previous
    snapshot. In video mode frames closer than ``scan_interval`` to the last
    accepted frame are dropped the same way.
    """

    def __init__(
        self,
        options: ScanOptions | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
        logger: logging.Logger | None = None,
        on_scan_update: Callable[[ScanProgress], None] | None = None,
        on_scan_complete: Callable[[ReceiptSnapshot], None] | None = None,
        on_scan_timeout: Callable[[], None] | None = None,
    ) -> None:
        self.options = options or ScanOptions()
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self.cache = CachedReceipt(self.options, clock=clock, logger=self._logger)
        self.on_scan_update = on_scan_update
        self.on_scan_complete = on_scan_complete
        self.on_scan_timeout = on_scan_timeout

        self._busy = threading.Lock()
        self._last_scan: datetime | None = None
        self._initialized_scan: datetime | None = None
        self._valid_scans = 0
        self.last_snapshot = ReceiptSnapshot.empty(clock())

    @property
    def valid_scans(self) -> int:
        return self._valid_scans

    def reset(self) -> None:
        """Forget all scanning state; the last snapshot is kept."""
        self.cache.clear()
        self._initialized_scan = None
        self._valid_scans = 0

    def skew_degrees(self) -> float:
        """Skew estimate over the positions of the last snapshot."""
        return estimate_degrees(self.last_snapshot.positions, self.options.skew_min_samples)

    def _should_throttle(self, now: datetime) -> bool:
        return (
            self.options.video_feed
            and self._last_scan is not None
            and now - self._last_scan < self.options.scan_interval
        )

    def process(self, frame: FrameReading, now: datetime | None = None) -> ScanPassResult:
        """Run one consensus pass over ``frame``.

        Args:
            frame: The frame's partial reading
            now: Pass time; defaults to the session clock

        Returns:
            The pass status with the resulting snapshot. Dropped passes carry
            the previous snapshot unchanged.
        """
        if not self._busy.acquire(blocking=False):
            self._logger.debug("Dropping frame %s: a pass is already running", frame.timestamp.isoformat())
            return ScanPassResult(status="dropped", snapshot=self.last_snapshot)

        try:
            now = now or self._clock()
            if self._should_throttle(now):
                self._logger.debug("Dropping frame %s: within scan interval", frame.timestamp.isoformat())
                return ScanPassResult(status="dropped", snapshot=self.last_snapshot)
            self._last_scan = now
            return self._run_pass(frame, now)
        finally:
            self._busy.release()

    def _run_pass(self, frame: FrameReading, now: datetime) -> ScanPassResult:
        applied = self.cache.apply(frame)
        snapshot = self.cache.validate(self.cache.normalize(self.cache.merge(now)))
        self.last_snapshot = snapshot

        if snapshot.is_valid:
            self._valid_scans += 1
            if not self.options.video_feed or self._valid_scans >= self.options.min_valid_scans:
                return self._complete(snapshot)
            self._logger.debug("Valid pass %d of %d", self._valid_scans, self.options.min_valid_scans)

        return self._incomplete(snapshot, applied, now)

    def _complete(self, snapshot: ReceiptSnapshot) -> ScanPassResult:
        self._logger.info(
            "Scan complete: %d position(s), total %s",
            len(snapshot.positions),
            snapshot.calculated_sum_formatted,
        )
        self.reset()
        if self.on_scan_complete is not None:
            self.on_scan_complete(snapshot)
        return ScanPassResult(status="complete", snapshot=snapshot)

    def _incomplete(
        self, snapshot: ReceiptSnapshot, applied: list[RecognizedPosition], now: datetime
    ) -> ScanPassResult:
        progress = ScanProgress(
            added_positions=tuple(p for p in applied if p.operation == Operation.ADDED),
            updated_positions=tuple(p for p in applied if p.operation == Operation.UPDATED),
            estimated_percentage=estimate_percentage(snapshot),
        )
        if self._initialized_scan is None:
            self._initialized_scan = now
        if self.on_scan_update is not None:
            self.on_scan_update(progress)

        if now - self._initialized_scan >= self.options.scan_timeout:
            self._logger.info("Scan timed out after %s", now - self._initialized_scan)
            self.reset()
            if self.on_scan_timeout is not None:
                self.on_scan_timeout()
            return ScanPassResult(status="timeout", snapshot=snapshot, progress=progress)

        return ScanPassResult(status="in_progress", snapshot=snapshot, progress=progress)
