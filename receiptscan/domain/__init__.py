"""Core domain models for receiptscan.

This module provides the data models shared by the consensus engine:
- RecognizedPosition: one frame's reading of a line item
- FrameReading: one frame's partial receipt reading
- ReceiptSnapshot: the immutable result handed to callers

Usage:
    from receiptscan.domain import FrameReading, ReceiptSnapshot
"""

from receiptscan.domain.receipt import (
    BoundingBox,
    FrameReading,
    Operation,
    Point,
    ReceiptSnapshot,
    RecognizedPosition,
    RecognizedPrice,
    RecognizedProduct,
    RecognizedPurchaseDate,
    RecognizedStore,
    RecognizedSum,
    RecognizedSumLabel,
    ScanProgress,
    TextLine,
    calculate_sum,
    format_amount,
)

__all__ = [
    "BoundingBox",
    "FrameReading",
    "Operation",
    "Point",
    "ReceiptSnapshot",
    "RecognizedPosition",
    "RecognizedPrice",
    "RecognizedProduct",
    "RecognizedPurchaseDate",
    "RecognizedStore",
    "RecognizedSum",
    "RecognizedSumLabel",
    "ScanProgress",
    "TextLine",
    "calculate_sum",
    "format_amount",
]
