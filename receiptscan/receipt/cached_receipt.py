"""Cross-frame consensus cache for receipt line items.

Each frame contributes an error-prone partial reading. The cache clusters
repeated readings of the same line into position groups, votes on the most
trustworthy reading per group, prunes noise against the printed total and
validates the result.

Typical pass:
    cache.apply(frame)
    snapshot = cache.validate(cache.normalize(cache.merge()))
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from receiptscan.domain.receipt import (
    FrameReading,
    Operation,
    ReceiptSnapshot,
    RecognizedPosition,
    RecognizedPurchaseDate,
    RecognizedStore,
    RecognizedSum,
    RecognizedSumLabel,
    calculate_sum,
    format_amount,
)
from receiptscan.runtime.logging import get_logger

from .normalizer import normalize_product_text
from .options import ScanOptions
from .position_group import PositionGroup
from .similarity import partial_match

# Overshoot factor of the calculated total that triggers pruning.
SUM_OVERSHOOT_FACTOR = Decimal(2).sqrt()


class CachedReceipt:
    """Consensus state of one scanning session.

    Groups live in an arena keyed by integer ids; observations refer to their
    group through ``group_id``. Not reentrant: callers run one pass at a time.
    """

    def __init__(
        self,
        options: ScanOptions | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
        logger: logging.Logger | None = None,
    ) -> None:
        self.options = options or ScanOptions()
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self.groups: dict[int, PositionGroup] = {}
        self._next_group_id = 0
        self.timestamp: datetime = clock()
        self.store: RecognizedStore | None = None
        self.purchase_date: RecognizedPurchaseDate | None = None
        self.sum_label: RecognizedSumLabel | None = None
        self.sum: RecognizedSum | None = None

    @classmethod
    def from_video_feed(cls, **kwargs: Any) -> CachedReceipt:
        return cls(ScanOptions(video_feed=True), **kwargs)

    @classmethod
    def from_images(cls, **kwargs: Any) -> CachedReceipt:
        return cls(ScanOptions(video_feed=False), **kwargs)

    @property
    def min_scans(self) -> int:
        return self.options.min_scans

    def clear(self) -> None:
        """Forget all groups and singleton values."""
        self.groups.clear()
        self.store = None
        self.purchase_date = None
        self.sum_label = None
        self.sum = None
        self.timestamp = self._clock()

    # -- apply ---------------------------------------------------------------

    def apply(self, frame: FrameReading) -> list[RecognizedPosition]:
        """Assign the frame's observations to groups.

        Returns the stored observations, tagged ``added`` or ``updated``.
        Observations already applied from an earlier offering of the same
        frame are skipped.
        """
        self.timestamp = frame.timestamp
        self.store = frame.store or self.store
        self.purchase_date = frame.purchase_date or self.purchase_date
        self.sum_label = frame.sum_label or self.sum_label
        self.sum = frame.sum or self.sum

        applied: list[RecognizedPosition] = []
        seen: Counter[tuple[datetime, str, str]] = Counter()
        for incoming in frame.positions:
            occurrence = (incoming.timestamp, *incoming.key)
            seen[occurrence] += 1
            if self._count_cached(occurrence) >= seen[occurrence]:
                self._logger.debug("Skipping already applied reading %r", incoming.product.value)
                continue
            applied.append(self._apply_position(incoming.copy(trustworthiness=None)))
        return applied

    def _count_cached(self, occurrence: tuple[datetime, str, str]) -> int:
        timestamp, product, price = occurrence
        return sum(
            1
            for group in self.groups.values()
            for p in group.positions
            if p.timestamp == timestamp and p.key == (product, price)
        )

    def _apply_position(self, position: RecognizedPosition) -> RecognizedPosition:
        best_group: PositionGroup | None = None
        best_similarity = -1
        for group in self.groups.values():
            if group.has_timestamp(position.timestamp):
                continue
            score = group.similarity_to(position)
            if score > best_similarity:
                best_group, best_similarity = group, score

        if best_group is not None and best_similarity >= self.options.similarity_threshold:
            position.group_id = best_group.group_id
            position.operation = Operation.UPDATED
            evicted = best_group.add(position, self.options.max_cache_size)
            if evicted:
                self._logger.debug("Group %d evicted %d oldest reading(s)", best_group.group_id, len(evicted))
            best_group.most_trustworthy()
            return position

        group = PositionGroup(self._next_group_id, [position])
        self._next_group_id += 1
        position.group_id = group.group_id
        position.operation = Operation.ADDED
        self.groups[group.group_id] = group
        group.most_trustworthy()
        self._logger.debug("Opened group %d for %r", group.group_id, position.product.value)
        return position

    # -- merge ---------------------------------------------------------------

    def merge(self, now: datetime | None = None) -> ReceiptSnapshot:
        """Build a fresh snapshot from the winners of all groups.

        Groups that stayed under-observed for too long are removed. When the
        summed winners overshoot the printed total by more than a factor of
        sqrt(2), the least trustworthy positions are dropped until the sum
        fits.
        """
        now = now or self._clock()
        options = self.options
        positions: list[RecognizedPosition] = []
        stale: list[int] = []
        matched_sum = False

        for group_id, group in self.groups.items():
            winner = group.most_trustworthy()
            if winner is None:
                continue
            trust = winner.trustworthiness or 0
            if trust >= options.trustworthy_threshold and len(group) >= self.min_scans:
                positions.append(winner.copy())
            if len(group) < self.min_scans and now - group.oldest_timestamp() >= options.min_duration_before_invalidate:
                stale.append(group_id)
            if self.sum is not None and format_amount(calculate_sum(positions)) == self.sum.formatted_value:
                matched_sum = True
                break

        if not matched_sum and self.sum is not None:
            positions = self._prune_overshoot(positions, self.sum.value)

        for group_id in stale:
            del self.groups[group_id]
        if stale:
            self._logger.debug("Removed %d stale group(s)", len(stale))

        return ReceiptSnapshot(
            timestamp=self.timestamp,
            positions=tuple(positions),
            store=self.store,
            purchase_date=self.purchase_date,
            sum_label=self.sum_label,
            sum=self.sum,
        )

    def _prune_overshoot(self, positions: list[RecognizedPosition], printed: Decimal) -> list[RecognizedPosition]:
        if calculate_sum(positions) <= printed * SUM_OVERSHOOT_FACTOR:
            return positions

        kept = list(positions)
        # Stable sort: among equal trust the earlier position goes first.
        for weakest in sorted(positions, key=lambda p: p.trustworthiness or 0):
            if calculate_sum(kept) <= printed:
                break
            kept.remove(weakest)
            self._logger.debug(
                "Pruned %r (%s%% trust) to fit printed total %s",
                weakest.product.value,
                weakest.trustworthiness,
                format_amount(printed),
            )
        return kept

    # -- normalize -----------------------------------------------------------

    def normalize(self, snapshot: ReceiptSnapshot) -> ReceiptSnapshot:
        """Return a snapshot whose product texts are cleaned by group agreement."""
        normalized: list[RecognizedPosition] = []
        for position in snapshot.positions:
            group = self.groups.get(position.group_id) if position.group_id is not None else None
            if group is None:
                normalized.append(position)
                continue

            canonical = group.most_trustworthy(default=position, price_required=True) or position
            price = position.price.formatted_value
            agreeing = [
                p.product.value
                for p in group.positions
                if p.price.formatted_value == price and partial_match(p.product.value, canonical.product.value) == 100
            ]
            value = normalize_product_text(canonical.product.value, agreeing)
            normalized.append(canonical.copy(product=replace(canonical.product, value=value)))

        return snapshot.with_changes(positions=tuple(normalized))

    # -- validate ------------------------------------------------------------

    def are_enough_scans(self, snapshot: ReceiptSnapshot) -> bool:
        """True when every group behind the snapshot has at least ``min_scans`` members."""
        group_ids = {p.group_id for p in snapshot.positions}
        if not group_ids:
            return False
        return all(gid in self.groups and len(self.groups[gid]) >= self.min_scans for gid in group_ids)

    def is_long_receipt(self, snapshot: ReceiptSnapshot) -> bool:
        return len(snapshot.positions) >= self.options.min_long_receipt_size

    def validate(self, snapshot: ReceiptSnapshot) -> ReceiptSnapshot:
        """Return the snapshot with its validity flag set."""
        is_valid = snapshot.is_correct_sum and (self.are_enough_scans(snapshot) or self.is_long_receipt(snapshot))
        return snapshot.with_changes(is_valid=is_valid)

    def process(self, frame: FrameReading, now: datetime | None = None) -> ReceiptSnapshot:
        """Run one complete pass: apply, merge, normalize, validate."""
        self.apply(frame)
        return self.validate(self.normalize(self.merge(now)))

