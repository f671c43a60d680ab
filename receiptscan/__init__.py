"""Multi-frame receipt scanning: cross-frame consensus over noisy OCR readings."""

__version__ = "0.1.0"
