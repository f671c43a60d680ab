"""Fuzzy agreement scores between product readings."""

from rapidfuzz import fuzz

from receiptscan.domain.receipt import RecognizedPosition


def similarity(a: str, b: str) -> int:
    """Edit-distance ratio of two texts in [0, 100]."""
    return round(fuzz.ratio(a, b))


def partial_match(a: str, b: str) -> int:
    """Best-substring alignment score in [0, 100].

    Scores 100 when the shorter text appears in the longer one, e.g. a product
    name read with and without trailing noise.
    """
    return round(fuzz.partial_ratio(a, b))


def position_similarity(a: RecognizedPosition, b: RecognizedPosition) -> int:
    """Product similarity of two observations.

    Observations from the same instant are never similar, so an observation
    cannot match itself or another line of its own frame.
    """
    if a.timestamp == b.timestamp:
        return 0
    return similarity(a.product.value, b.product.value)
