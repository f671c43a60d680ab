"""Client for an upstream OCR and layout service that returns frame readings."""

import time
from pathlib import Path

import httpx

from receiptscan.domain.receipt import FrameReading
from receiptscan.receipt.frame_codec import FrameDecodeError, decode_frame
from receiptscan.runtime.logging import get_logger

logger = get_logger(__name__)

DEFAULT_FRAME_SERVICE_URL = "http://localhost:8001"


class FrameSourceUnavailable(RuntimeError):
    """Raised when the frame service cannot be reached or returns an error."""


def fetch_frame_reading(image_path: Path, url: str = DEFAULT_FRAME_SERVICE_URL, timeout: float = 60.0) -> FrameReading:
    """
    Send one captured image to the frame service and decode its reading.

    Raises:
        FrameSourceUnavailable: On connection errors or non-200 responses.
        FrameDecodeError: When the service answers with a malformed frame.
    """
    url = url.rstrip("/")
    logger.info("Sending %s to frame service at %s...", image_path.name, url)

    try:
        start_time = time.time()
        response = httpx.post(
            f"{url}/frame",
            files={"file": (image_path.name, image_path.read_bytes(), "image/jpeg")},
            timeout=timeout,
        )
        logger.info("Frame service returned in %.2f seconds", time.time() - start_time)
    except httpx.RequestError as e:
        logger.error("Failed to connect to frame service: %s", e)
        raise FrameSourceUnavailable(f"Failed to connect to frame service: {e}") from e

    if response.status_code != 200:
        logger.error("Frame service error: %s", response.status_code)
        raise FrameSourceUnavailable(f"Frame service error: {response.status_code}")

    try:
        payload = response.json()
    except ValueError as e:
        raise FrameDecodeError(f"Frame service returned invalid JSON: {e}") from e
    return decode_frame(payload)
