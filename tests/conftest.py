"""Shared pytest fixtures for receiptscan tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from receiptscan.domain.receipt import (
    FrameReading,
    RecognizedPosition,
    RecognizedPrice,
    RecognizedProduct,
    RecognizedSum,
    TextLine,
)

T0 = datetime(2026, 1, 1, 10, 0, 0)


def at(seconds: float) -> datetime:
    """Timestamp ``seconds`` after the test epoch."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def make_position() -> Callable[..., RecognizedPosition]:
    def _make(
        product: str,
        price: str,
        seconds: float = 0.0,
        confidence: int = 90,
        product_line: TextLine | None = None,
        price_line: TextLine | None = None,
    ) -> RecognizedPosition:
        return RecognizedPosition(
            product=RecognizedProduct(product, product_line or TextLine(text=product)),
            price=RecognizedPrice(Decimal(price), price_line or TextLine(text=price)),
            timestamp=at(seconds),
            confidence=confidence,
        )

    return _make


@pytest.fixture
def make_frame(make_position: Callable[..., RecognizedPosition]) -> Callable[..., FrameReading]:
    def _make(
        seconds: float,
        items: list[tuple[str, str]],
        total: str | None = None,
        confidence: int = 90,
    ) -> FrameReading:
        return FrameReading(
            timestamp=at(seconds),
            positions=[make_position(product, price, seconds, confidence) for product, price in items],
            sum=RecognizedSum(Decimal(total)) if total is not None else None,
        )

    return _make
