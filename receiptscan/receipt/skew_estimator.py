"""Receipt skew estimation from line-item geometry.

The left edge of the product column and the right edge of the price column
are fitted as ``x = a*y + b`` by weighted least squares; the slope gives the
tilt. A positive angle means the receipt drifts right as y grows (clockwise).
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from receiptscan.domain.receipt import Point, RecognizedPosition, TextLine

# Side angles further apart than this are treated as disagreeing.
MAX_SIDE_DISAGREEMENT_DEGREES = 2.0
# Estimates below this magnitude are reported as 0.
SNAP_TO_ZERO_DEGREES = 0.5
# Confidence assumed for lines without one.
DEFAULT_LINE_CONFIDENCE = 50


@dataclass(frozen=True)
class WeightedPoint:
    x: float
    y: float
    w: float


@dataclass(frozen=True)
class LineFit:
    """Fitted line ``x = a*y + b``."""

    a: float
    b: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def fit_line(points: Sequence[WeightedPoint]) -> LineFit | None:
    """Weighted least squares of x over y; None when the weights sum to zero."""
    sw = sum(p.w for p in points)
    if sw == 0:
        return None

    y_bar = sum(p.w * p.y for p in points) / sw
    x_bar = sum(p.w * p.x for p in points) / sw

    num = 0.0
    den = 0.0
    for p in points:
        dy = p.y - y_bar
        num += p.w * dy * (p.x - x_bar)
        den += p.w * dy * dy
    if den == 0:
        # All points on one row: no measurable tilt.
        return LineFit(a=0.0, b=x_bar)

    a = num / den
    return LineFit(a=a, b=x_bar - a * y_bar)


def _fit_angle_degrees(points: Sequence[WeightedPoint], min_samples: int) -> float | None:
    if len(points) < min_samples:
        return None
    fit = fit_line(points)
    if fit is None:
        return None
    return math.degrees(math.atan(fit.a))


def _combine(left: float | None, right: float | None) -> float:
    if left is not None and right is not None:
        if abs(left - right) > MAX_SIDE_DISAGREEMENT_DEGREES:
            # Sides disagree: keep the one with less tilt.
            result = left if abs(left) <= abs(right) else right
        else:
            result = (left + right) / 2.0
    elif left is not None:
        result = left
    elif right is not None:
        result = right
    else:
        result = 0.0
    return 0.0 if abs(result) < SNAP_TO_ZERO_DEGREES else result


def estimate_degrees(positions: Iterable[RecognizedPosition], min_samples: int = 3) -> float:
    """Estimate the skew angle in degrees from paired product/price lines.

    Uses the product line's first corner and the price line's fourth corner,
    each weighted by the observation confidence clamped to [1, 100]. Lines
    with fewer than four corner points are ignored. Returns 0 when neither
    side has ``min_samples`` points.
    """
    left: list[WeightedPoint] = []
    right: list[WeightedPoint] = []

    for position in positions:
        weight = _clamp(float(position.confidence), 1.0, 100.0)
        product_points = position.product.line.corner_points
        price_points = position.price.line.corner_points
        if len(product_points) >= 4:
            corner = product_points[0]
            left.append(WeightedPoint(corner.x, corner.y, weight))
        if len(price_points) >= 4:
            corner = price_points[3]
            right.append(WeightedPoint(corner.x, corner.y, weight))

    return _combine(_fit_angle_degrees(left, min_samples), _fit_angle_degrees(right, min_samples))


def _line_weight(line: TextLine) -> float:
    """Confidence blended with line height, so taller lines count a bit more."""
    confidence = float(line.confidence if line.confidence is not None else DEFAULT_LINE_CONFIDENCE)
    height = _clamp(line.bounding_box.height, 8.0, 80.0)
    blended = 0.85 * confidence + 0.15 * (height * 100.0 / 80.0)
    return _clamp(blended, 1.0, 100.0)


def estimate_degrees_from_lines(lines: Iterable[TextLine], min_samples: int = 6) -> float:
    """Estimate the skew angle in degrees from raw OCR lines, no pairing needed.

    Each line contributes its left-most and right-most corner point, or the
    bounding box edges at its vertical centre when it has fewer than four
    corners.
    """
    left: list[WeightedPoint] = []
    right: list[WeightedPoint] = []

    for line in lines:
        weight = _line_weight(line)
        if len(line.corner_points) >= 4:
            left_most: Point = min(line.corner_points, key=lambda p: p.x)
            right_most: Point = max(line.corner_points, key=lambda p: p.x)
            left.append(WeightedPoint(left_most.x, left_most.y, weight))
            right.append(WeightedPoint(right_most.x, right_most.y, weight))
        else:
            box = line.bounding_box
            left.append(WeightedPoint(box.left, box.center_y, weight))
            right.append(WeightedPoint(box.right, box.center_y, weight))

    return _combine(_fit_angle_degrees(left, min_samples), _fit_angle_degrees(right, min_samples))
