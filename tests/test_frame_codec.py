"""Tests for frame and snapshot JSON encoding."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from receiptscan.domain.receipt import Operation, ReceiptSnapshot, RecognizedSum
from receiptscan.receipt.frame_codec import FrameDecodeError, decode_frame, encode_snapshot, iter_frames

FRAME = {
    "timestamp": "2026-01-01T10:00:00.100000",
    "store": {"value": "ALDI"},
    "purchase_date": {"value": "2026-01-01"},
    "sum_label": {"value": "SUMME"},
    "sum": {"value": "3.78"},
    "positions": [
        {
            "product": {
                "value": "MILK 1L",
                "line": {"text": "MILK 1L", "confidence": 90, "corner_points": [[10, 20], [80, 20], [80, 30], [10, 30]]},
            },
            "price": {"value": "1.29"},
            "confidence": 90,
        },
        {
            "product": {"value": "BREAD"},
            "price": {"value": "2,49"},
            "timestamp": "2026-01-01T10:00:00.050000",
        },
    ],
}


def test_decode_full_frame() -> None:
    frame = decode_frame(FRAME)

    assert frame.timestamp == datetime(2026, 1, 1, 10, 0, 0, 100000)
    assert frame.store is not None and frame.store.value == "ALDI"
    assert frame.purchase_date is not None and frame.purchase_date.value == date(2026, 1, 1)
    assert frame.sum_label is not None and frame.sum_label.value == "SUMME"
    assert frame.sum is not None and frame.sum.value == Decimal("3.78")

    milk, bread = frame.positions
    assert milk.price.value == Decimal("1.29")
    assert milk.confidence == 90
    assert milk.timestamp == frame.timestamp
    assert milk.product.line.corner_points[3].y == 30.0
    assert bread.price.value == Decimal("2.49")
    assert bread.confidence == 0
    assert bread.timestamp == datetime(2026, 1, 1, 10, 0, 0, 50000)


def test_frame_without_positions_is_valid() -> None:
    frame = decode_frame({"timestamp": "2026-01-01T10:00:00"})

    assert frame.positions == []
    assert frame.sum is None


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"timestamp": "yesterday"},
        {"timestamp": "2026-01-01T10:00:00", "positions": {"product": "MILK"}},
        {"timestamp": "2026-01-01T10:00:00", "positions": [{"price": {"value": "1.29"}}]},
        {"timestamp": "2026-01-01T10:00:00", "positions": [{"product": {"value": "MILK"}, "price": {"value": "abc"}}]},
        {"timestamp": "2026-01-01T10:00:00", "sum": {"value": "NaN"}},
        {"timestamp": "2026-01-01T10:00:00", "purchase_date": {"value": "31.12.2025"}},
    ],
)
def test_malformed_frames_are_rejected(payload: dict) -> None:
    with pytest.raises(FrameDecodeError):
        decode_frame(payload)


def test_iter_frames_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "frames.jsonl"
    path.write_text(json.dumps(FRAME) + "\n\n" + json.dumps({"timestamp": "2026-01-01T10:00:01"}) + "\n")

    frames = list(iter_frames(path))

    assert len(frames) == 2
    assert len(frames[0].positions) == 2


def test_iter_frames_reports_line_number(tmp_path: Path) -> None:
    path = tmp_path / "frames.jsonl"
    path.write_text(json.dumps(FRAME) + "\n{not json\n")

    with pytest.raises(FrameDecodeError, match=r"frames.jsonl:2"):
        list(iter_frames(path))


def test_encode_snapshot(make_position) -> None:
    position = make_position("MILK 1L", "1.29").copy(trustworthiness=100, operation=Operation.ADDED)
    snapshot = ReceiptSnapshot(
        timestamp=datetime(2026, 1, 1, 10, 0, 0),
        positions=(position,),
        sum=RecognizedSum(Decimal("1.29")),
        is_valid=True,
    )

    encoded = encode_snapshot(snapshot)

    assert encoded["sum"] == "1.29"
    assert encoded["calculated_sum"] == "1.29"
    assert encoded["is_valid"] is True
    assert encoded["store"] is None
    assert encoded["positions"] == [
        {
            "product": "MILK 1L",
            "price": "1.29",
            "timestamp": "2026-01-01T10:00:00",
            "confidence": 90,
            "trustworthiness": 100,
            "operation": "added",
        }
    ]
    json.dumps(encoded)


def test_offset_timestamps_become_naive_local_time() -> None:
    frame = decode_frame(
        {
            "timestamp": "2026-01-01T10:00:00+00:00",
            "positions": [
                {"product": {"value": "MILK 1L"}, "price": {"value": "1.29"}},
                {"product": {"value": "BREAD"}, "price": {"value": "2.49"}, "timestamp": "2026-01-01T11:00:00+01:00"},
            ],
        }
    )

    expected = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert frame.timestamp == expected
    assert frame.timestamp.tzinfo is None
    assert [p.timestamp for p in frame.positions] == [expected, expected]
