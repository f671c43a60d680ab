"""Pure conversion of raw OCR engine output into text line geometry."""

from typing import Any

from receiptscan.domain.receipt import Point, TextLine

# Detections below this confidence (0-1 scale) are dropped
MIN_DETECTION_CONFIDENCE = 0.7
# Shorter text is likely noise like single punctuation
MIN_TEXT_LENGTH = 2


def lines_from_paddleocr(
    raw_result: dict[str, Any],
    padding: int = 0,
    min_confidence: float = MIN_DETECTION_CONFIDENCE,
    min_text_length: int = MIN_TEXT_LENGTH,
) -> list[TextLine]:
    """
    Convert a raw PaddleOCR payload into text lines in reading order.

    The payload looks like ``{"detections": [[bbox, [text, confidence]], ...]}``
    where bbox is four ``[x, y]`` corners (top-left, top-right, bottom-right,
    bottom-left) and confidence is in [0, 1].

    Args:
        raw_result: OCR service response
        padding: White border added before OCR; subtracted from coordinates
        min_confidence: Drop detections below this confidence
        min_text_length: Drop detections with shorter stripped text

    Returns:
        Text lines sorted top to bottom, then left to right, with confidence
        scaled to 0-100.
    """
    lines: list[TextLine] = []
    for detection in raw_result.get("detections", []):
        bbox, (text, confidence) = detection

        if confidence < min_confidence:
            continue
        if len(text.strip()) < min_text_length:
            continue

        corners = tuple(Point(float(p[0]) - padding, float(p[1]) - padding) for p in bbox)
        lines.append(
            TextLine(
                text=text,
                confidence=int(round(float(confidence) * 100)),
                corner_points=corners,
            )
        )

    lines.sort(key=lambda line: (line.bounding_box.center_y, line.bounding_box.left))
    return lines
