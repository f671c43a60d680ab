"""JSON encoding of frame readings and receipt snapshots.

Frame format (one JSON object per frame, JSON Lines on disk):

    {
      "timestamp": "2026-01-01T10:00:00.100",
      "store": {"value": "ALDI"},
      "purchase_date": {"value": "2026-01-01"},
      "sum_label": {"value": "SUMME"},
      "sum": {"value": "5.00"},
      "positions": [
        {
          "product": {"value": "MILK 1L", "line": {"text": "MILK 1L", "confidence": 90,
                                                  "corner_points": [[10, 20], [80, 20], [80, 30], [10, 30]]}},
          "price": {"value": "1.29"},
          "confidence": 90
        }
      ]
    }

Positions without their own ``timestamp`` inherit the frame's.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from receiptscan.domain.receipt import (
    BoundingBox,
    FrameReading,
    Point,
    ReceiptSnapshot,
    RecognizedPosition,
    RecognizedPrice,
    RecognizedProduct,
    RecognizedPurchaseDate,
    RecognizedStore,
    RecognizedSum,
    RecognizedSumLabel,
    TextLine,
)


class FrameDecodeError(ValueError):
    """Raised when a frame payload is malformed."""


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise FrameDecodeError(f"{where}: expected an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise FrameDecodeError(f"{where}: missing '{key}'")
    return data[key]


def _parse_timestamp(value: Any, where: str) -> datetime:
    """Parse an ISO-8601 timestamp into naive local time, matching the session clock."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError as e:
            raise FrameDecodeError(f"{where}: invalid timestamp {value!r}") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _parse_amount(value: Any, where: str) -> Decimal:
    if isinstance(value, bool):
        raise FrameDecodeError(f"{where}: invalid amount {value!r}")
    try:
        amount = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation as e:
        raise FrameDecodeError(f"{where}: invalid amount {value!r}") from e
    if not amount.is_finite():
        raise FrameDecodeError(f"{where}: invalid amount {value!r}")
    return amount


def _parse_confidence(value: Any, where: str) -> int:
    try:
        confidence = int(value)
    except (TypeError, ValueError) as e:
        raise FrameDecodeError(f"{where}: invalid confidence {value!r}") from e
    return max(0, min(100, confidence))


def decode_line(data: dict[str, Any] | None) -> TextLine:
    """Decode line geometry; absent geometry yields an empty line."""
    if not data:
        return TextLine()
    if not isinstance(data, dict):
        raise FrameDecodeError("line: expected an object")

    try:
        corners = tuple(Point(float(p[0]), float(p[1])) for p in data.get("corner_points") or [])
    except (TypeError, ValueError, IndexError) as e:
        raise FrameDecodeError(f"line: invalid corner points {data.get('corner_points')!r}") from e

    box = None
    if data.get("box"):
        raw_box = data["box"]
        try:
            box = BoundingBox(
                float(raw_box["left"]), float(raw_box["top"]), float(raw_box["right"]), float(raw_box["bottom"])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise FrameDecodeError(f"line: invalid box {raw_box!r}") from e

    confidence = data.get("confidence")
    return TextLine(
        text=str(data.get("text", "")),
        confidence=_parse_confidence(confidence, "line") if confidence is not None else None,
        corner_points=corners,
        box=box,
    )


def decode_position(data: dict[str, Any], frame_timestamp: datetime, index: int = 0) -> RecognizedPosition:
    where = f"positions[{index}]"
    product = _require(data, "product", where)
    price = _require(data, "price", where)
    timestamp = data.get("timestamp")
    return RecognizedPosition(
        product=RecognizedProduct(
            value=str(_require(product, "value", f"{where}.product")),
            line=decode_line(product.get("line")),
        ),
        price=RecognizedPrice(
            value=_parse_amount(_require(price, "value", f"{where}.price"), f"{where}.price"),
            line=decode_line(price.get("line")),
        ),
        timestamp=_parse_timestamp(timestamp, where) if timestamp is not None else frame_timestamp,
        confidence=_parse_confidence(data.get("confidence", 0), where),
    )


def decode_frame(data: dict[str, Any]) -> FrameReading:
    """Decode one frame object into a FrameReading."""
    timestamp = _parse_timestamp(_require(data, "timestamp", "frame"), "frame")
    raw_positions = data.get("positions") or []
    if not isinstance(raw_positions, list):
        raise FrameDecodeError("frame: 'positions' must be a list")

    frame = FrameReading(
        timestamp=timestamp,
        positions=[decode_position(p, timestamp, i) for i, p in enumerate(raw_positions)],
    )

    if data.get("store"):
        store = data["store"]
        frame.store = RecognizedStore(str(_require(store, "value", "store")), decode_line(store.get("line")))
    if data.get("sum_label"):
        label = data["sum_label"]
        frame.sum_label = RecognizedSumLabel(str(_require(label, "value", "sum_label")), decode_line(label.get("line")))
    if data.get("sum"):
        total = data["sum"]
        frame.sum = RecognizedSum(_parse_amount(_require(total, "value", "sum"), "sum"), decode_line(total.get("line")))
    if data.get("purchase_date"):
        purchase = data["purchase_date"]
        raw_date = _require(purchase, "value", "purchase_date")
        try:
            value = date.fromisoformat(str(raw_date))
        except ValueError as e:
            raise FrameDecodeError(f"purchase_date: invalid date {raw_date!r}") from e
        frame.purchase_date = RecognizedPurchaseDate(value, decode_line(purchase.get("line")))

    return frame


def iter_frames(path: Path) -> Iterator[FrameReading]:
    """Yield frames from a JSON Lines file, skipping blank lines."""
    with open(path, encoding="utf-8") as f:
        for line_number, raw in enumerate(f, 1):
            if not raw.strip():
                continue
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                raise FrameDecodeError(f"{path}:{line_number}: invalid JSON ({e.msg})") from e
            try:
                yield decode_frame(data)
            except FrameDecodeError as e:
                raise FrameDecodeError(f"{path}:{line_number}: {e}") from e


def encode_position(position: RecognizedPosition) -> dict[str, Any]:
    return {
        "product": position.product.value,
        "price": position.price.formatted_value,
        "timestamp": position.timestamp.isoformat(),
        "confidence": position.confidence,
        "trustworthiness": position.trustworthiness,
        "operation": position.operation.value if position.operation else None,
    }


def encode_snapshot(snapshot: ReceiptSnapshot) -> dict[str, Any]:
    """Encode a snapshot for JSON responses and CLI output."""
    return {
        "timestamp": snapshot.timestamp.isoformat(),
        "store": snapshot.store.formatted_value if snapshot.store else None,
        "purchase_date": snapshot.purchase_date.formatted_value if snapshot.purchase_date else None,
        "positions": [encode_position(p) for p in snapshot.positions],
        "sum_label": snapshot.sum_label.formatted_value if snapshot.sum_label else None,
        "sum": snapshot.sum.formatted_value if snapshot.sum else None,
        "calculated_sum": snapshot.calculated_sum_formatted,
        "is_valid": snapshot.is_valid,
    }
