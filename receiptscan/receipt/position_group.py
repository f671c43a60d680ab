"""Clusters of observations that read the same physical receipt line."""

from __future__ import annotations

from datetime import datetime

from receiptscan.domain.receipt import RecognizedPosition

from .similarity import position_similarity


class PositionGroup:
    """Ordered observations of one receipt line across frames.

    Members never share a timestamp; the oldest member is evicted first once
    the group grows past its bound.
    """

    def __init__(self, group_id: int, positions: list[RecognizedPosition] | None = None) -> None:
        self.group_id = group_id
        self.positions: list[RecognizedPosition] = list(positions or [])

    def __len__(self) -> int:
        return len(self.positions)

    def __repr__(self) -> str:
        return f"PositionGroup(id={self.group_id}, size={len(self.positions)})"

    def add(self, position: RecognizedPosition, max_size: int | None = None) -> list[RecognizedPosition]:
        """Append a member and return the members evicted to respect ``max_size``."""
        self.positions.append(position)
        evicted: list[RecognizedPosition] = []
        if max_size is not None:
            while len(self.positions) > max_size:
                evicted.append(self.positions.pop(0))
        return evicted

    def has_timestamp(self, timestamp: datetime) -> bool:
        return any(p.timestamp == timestamp for p in self.positions)

    def oldest_timestamp(self) -> datetime:
        return min(p.timestamp for p in self.positions)

    def most_similar(self, candidate: RecognizedPosition) -> RecognizedPosition:
        """Member whose product reads most like the candidate; the earliest wins ties."""
        best = self.positions[0]
        best_score = position_similarity(best, candidate)
        for position in self.positions[1:]:
            score = position_similarity(position, candidate)
            if score > best_score:
                best, best_score = position, score
        return best

    def similarity_to(self, candidate: RecognizedPosition) -> int:
        if not self.positions:
            return 0
        return position_similarity(self.most_similar(candidate), candidate)

    def most_trustworthy(
        self,
        default: RecognizedPosition | None = None,
        price_required: bool = False,
    ) -> RecognizedPosition | None:
        """
        Majority vote over (product, formatted price) pairs.

        The first member carrying the most frequent pair wins and gets its
        trustworthiness set to ``occurrences * 100 // group size``. Equal counts
        go to the pair seen most recently, then to the pair seen first.

        With ``price_required`` and a default, only members priced like the
        default take part in the vote, so the price stays fixed while the
        product text is open to revision. Returns the default when nothing
        qualifies.
        """
        members = self.positions
        if price_required and default is not None:
            members = [p for p in members if p.price.formatted_value == default.price.formatted_value]

        counts: dict[tuple[str, str], int] = {}
        newest: dict[tuple[str, str], datetime] = {}
        for position in members:
            key = position.key
            counts[key] = counts.get(key, 0) + 1
            if key not in newest or position.timestamp > newest[key]:
                newest[key] = position.timestamp

        if not counts:
            return default

        # max() keeps the first of equal keys, i.e. insertion order.
        best_key = max(counts, key=lambda k: (counts[k], newest[k]))
        winner = next(p for p in members if p.key == best_key)
        winner.trustworthiness = counts[best_key] * 100 // len(self.positions)
        return winner
