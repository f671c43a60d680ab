"""Product text cleanup driven by agreeing observations."""

from collections.abc import Sequence

# Shortest product name (in tokens) that trimming may leave behind.
MIN_PRODUCT_TOKENS = 2


def _is_noise_token(token: str) -> bool:
    """Tokens without letters or a percent sign, e.g. ``1,29`` or ``*``."""
    return not any(c.isalpha() or c == "%" for c in token)


def normalize_product_text(best: str, agreeing: Sequence[str]) -> str:
    """
    Trim OCR tail noise from the canonical product text.

    ``agreeing`` holds product texts of observations that match ``best`` and
    carry the same price. The retained token count shrinks to the shortest
    agreeing reading as long as that keeps more than two tokens, and trailing
    noise tokens are dropped under the same floor.

    Example:
        >>> normalize_product_text("BIO VOLLMILCH 1L 12", ["BIO VOLLMILCH 1L"])
        'BIO VOLLMILCH 1L'
    """
    if not agreeing:
        return best

    tokens = best.split(" ")
    length = len(tokens)

    for text in agreeing:
        count = len(text.split(" "))
        if MIN_PRODUCT_TOKENS < count < length:
            length = count

    while length > MIN_PRODUCT_TOKENS and _is_noise_token(tokens[length - 1]):
        length -= 1

    return " ".join(tokens[:length])
