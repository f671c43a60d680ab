"""Data models for multi-frame receipt scanning."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Any

CENTS = Decimal("0.01")


def format_amount(value: Decimal) -> str:
    """Format a money value at display precision, e.g. ``Decimal("1234.5")`` -> ``"1,234.50"``."""
    return f"{value.quantize(CENTS, rounding=ROUND_HALF_EVEN):,.2f}"


class Operation(str, Enum):
    """How the last apply() classified an observation."""

    ADDED = "added"
    UPDATED = "updated"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in image pixels."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2.0


@dataclass(frozen=True)
class TextLine:
    """One recognized text line as delivered by the OCR engine.

    Corner points follow the recognizer order: top-left, top-right,
    bottom-right, bottom-left.
    """

    text: str = ""
    confidence: int | None = None
    corner_points: tuple[Point, ...] = ()
    box: BoundingBox | None = None

    @property
    def bounding_box(self) -> BoundingBox:
        if self.box is not None:
            return self.box
        if not self.corner_points:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in self.corner_points]
        ys = [p.y for p in self.corner_points]
        return BoundingBox(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class RecognizedProduct:
    """Product text of a line item."""

    value: str
    line: TextLine = field(default_factory=TextLine)

    @property
    def normalized_text(self) -> str:
        return " ".join(self.value.split())


@dataclass(frozen=True)
class RecognizedPrice:
    """Price of a line item."""

    value: Decimal
    line: TextLine = field(default_factory=TextLine)

    @property
    def formatted_value(self) -> str:
        return format_amount(self.value)


@dataclass(frozen=True)
class RecognizedStore:
    value: str
    line: TextLine = field(default_factory=TextLine)

    @property
    def formatted_value(self) -> str:
        return self.value.strip()


@dataclass(frozen=True)
class RecognizedSumLabel:
    value: str
    line: TextLine = field(default_factory=TextLine)

    @property
    def formatted_value(self) -> str:
        return self.value.strip()


@dataclass(frozen=True)
class RecognizedSum:
    """The total printed on the receipt."""

    value: Decimal
    line: TextLine = field(default_factory=TextLine)

    @property
    def formatted_value(self) -> str:
        return format_amount(self.value)


@dataclass(frozen=True)
class RecognizedPurchaseDate:
    value: date
    line: TextLine = field(default_factory=TextLine)

    @property
    def formatted_value(self) -> str:
        return self.value.isoformat()


@dataclass(eq=False)
class RecognizedPosition:
    """A timestamped reading of one line item (an observation).

    Equality is identity: two readings with equal text are still two
    observations.
    """

    product: RecognizedProduct
    price: RecognizedPrice
    timestamp: datetime
    confidence: int = 0
    # Percentage agreement, set by group voting.
    trustworthiness: int | None = None
    # Key of the owning group inside the consensus cache.
    group_id: int | None = None
    operation: Operation | None = None

    def copy(self, **changes: Any) -> RecognizedPosition:
        return dataclasses.replace(self, **changes)

    @property
    def key(self) -> tuple[str, str]:
        """The (product text, formatted price) pair used for voting."""
        return self.product.value, self.price.formatted_value


def calculate_sum(positions: tuple[RecognizedPosition, ...] | list[RecognizedPosition]) -> Decimal:
    """Sum of all position prices."""
    return sum((p.price.value for p in positions), Decimal("0"))


@dataclass
class FrameReading:
    """One frame's partial reading, as produced by the upstream layout step."""

    timestamp: datetime
    positions: list[RecognizedPosition] = field(default_factory=list)
    store: RecognizedStore | None = None
    purchase_date: RecognizedPurchaseDate | None = None
    sum_label: RecognizedSumLabel | None = None
    sum: RecognizedSum | None = None


@dataclass(frozen=True)
class ReceiptSnapshot:
    """Immutable receipt record emitted after each consensus pass."""

    timestamp: datetime
    positions: tuple[RecognizedPosition, ...] = ()
    store: RecognizedStore | None = None
    purchase_date: RecognizedPurchaseDate | None = None
    sum_label: RecognizedSumLabel | None = None
    sum: RecognizedSum | None = None
    is_valid: bool = False

    @classmethod
    def empty(cls, timestamp: datetime | None = None) -> ReceiptSnapshot:
        return cls(timestamp=timestamp or datetime.now())

    def with_changes(self, **changes: Any) -> ReceiptSnapshot:
        return dataclasses.replace(self, **changes)

    @property
    def calculated_sum(self) -> Decimal:
        return calculate_sum(self.positions)

    @property
    def calculated_sum_formatted(self) -> str:
        return format_amount(self.calculated_sum)

    @property
    def is_correct_sum(self) -> bool:
        """True when the summed positions match the printed total at display precision."""
        if self.sum is None:
            return False
        return self.calculated_sum_formatted == self.sum.formatted_value


@dataclass(frozen=True)
class ScanProgress:
    """Progress of an incomplete scan, reported after each pass."""

    added_positions: tuple[RecognizedPosition, ...] = ()
    updated_positions: tuple[RecognizedPosition, ...] = ()
    estimated_percentage: int | None = None
