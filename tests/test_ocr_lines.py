"""Tests for OCR output conversion."""

from receiptscan.receipt.ocr_lines import lines_from_paddleocr


def _bbox(x0: int, y0: int, x1: int, y1: int) -> list[list[int]]:
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1]]


def test_lines_are_filtered_and_sorted_in_reading_order() -> None:
    raw_result = {
        "status": "success",
        "detections": [
            [_bbox(760, 210, 920, 250), ["17.19", 0.99]],
            [_bbox(120, 210, 500, 250), ["COKE ZERO", 0.98]],
            [_bbox(120, 100, 400, 140), ["COSTCO", 0.95]],
            [_bbox(120, 300, 500, 340), ["BLURRY", 0.40]],
            [_bbox(120, 400, 140, 440), ["*", 0.99]],
        ],
    }

    lines = lines_from_paddleocr(raw_result)

    assert [line.text for line in lines] == ["COSTCO", "COKE ZERO", "17.19"]
    assert [line.confidence for line in lines] == [95, 98, 99]


def test_padding_is_removed_from_coordinates() -> None:
    raw_result = {"detections": [[_bbox(60, 70, 160, 90), ["MILK 1L", 0.9]]]}

    (line,) = lines_from_paddleocr(raw_result, padding=50)

    assert line.corner_points[0].x == 10.0
    assert line.corner_points[0].y == 20.0
    assert line.bounding_box.height == 20.0


def test_empty_result_gives_no_lines() -> None:
    assert lines_from_paddleocr({}) == []
