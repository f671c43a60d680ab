"""Scan command handlers used by the unified CLI."""

import argparse
import dataclasses
import json
import sys
from datetime import datetime
from pathlib import Path

from receiptscan.domain.receipt import FrameReading, ReceiptSnapshot
from receiptscan.receipt.frame_codec import FrameDecodeError, encode_snapshot, iter_frames
from receiptscan.receipt.options import ScanOptions, ScanOptionsError
from receiptscan.runtime import get_logger, load_scan_options

logger = get_logger(__name__)


class ReplayClock:
    """Clock that reports the timestamp of the frame being replayed."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now()

    def __call__(self) -> datetime:
        return self.now


def _load_options(args: argparse.Namespace) -> ScanOptions:
    try:
        options = load_scan_options(args.config)
    except ScanOptionsError as e:
        logger.error("%s", e)
        print(f"Invalid scan config: {e}")
        sys.exit(1)
    if getattr(args, "images", False):
        options = dataclasses.replace(options, video_feed=False)
    return options


def _load_frames(path: Path) -> list[FrameReading]:
    if not path.exists():
        print(f"Error: Frames file not found: {path}")
        sys.exit(1)
    try:
        return list(iter_frames(path))
    except FrameDecodeError as e:
        logger.error("%s", e)
        print(f"Error: {e}")
        sys.exit(1)


def _print_snapshot(snapshot: ReceiptSnapshot) -> None:
    print(json.dumps(encode_snapshot(snapshot), indent=2))


def cmd_replay(args: argparse.Namespace) -> None:
    """Feed recorded frames through a scan session and print the outcome."""
    from receiptscan.application.scan import ScanSession

    options = _load_options(args)
    frames = _load_frames(Path(args.frames))
    if not frames:
        print("No frames to replay.")
        sys.exit(1)

    completed: list[ReceiptSnapshot] = []
    clock = ReplayClock(frames[0].timestamp)
    session = ScanSession(options, clock=clock, on_scan_complete=completed.append)

    for frame in frames:
        clock.now = frame.timestamp
        result = session.process(frame)
        logger.debug("Frame %s -> %s", frame.timestamp.isoformat(), result.status)

    if completed:
        _print_snapshot(completed[-1])
        return

    _print_snapshot(session.last_snapshot)
    print(f"No valid receipt after {len(frames)} frame(s).", file=sys.stderr)
    sys.exit(1)


def _print_line_skew(path: Path, padding: int) -> None:
    from receiptscan.receipt.ocr_lines import lines_from_paddleocr
    from receiptscan.receipt.skew_estimator import estimate_degrees_from_lines

    if not path.exists():
        print(f"Error: OCR result not found: {path}")
        sys.exit(1)
    try:
        raw_result = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        logger.error("Invalid OCR JSON in %s: %s", path, e)
        print(f"Error: Invalid OCR JSON: {path}")
        sys.exit(1)

    lines = lines_from_paddleocr(raw_result, padding=padding)
    logger.debug("Estimating skew from %d OCR line(s)", len(lines))
    print(f"{estimate_degrees_from_lines(lines):.2f}")


def cmd_skew(args: argparse.Namespace) -> None:
    """Print the skew estimate of the positions merged from recorded frames."""
    from receiptscan.receipt.cached_receipt import CachedReceipt
    from receiptscan.receipt.skew_estimator import estimate_degrees

    if getattr(args, "ocr_json", False):
        _print_line_skew(Path(args.frames), args.padding)
        return

    options = _load_options(args)
    frames = _load_frames(Path(args.frames))
    if not frames:
        print("No frames to estimate skew from.")
        sys.exit(1)

    cache = CachedReceipt(options, clock=lambda: frames[-1].timestamp)
    for frame in frames:
        cache.apply(frame)
    snapshot = cache.merge(frames[-1].timestamp)

    degrees = estimate_degrees(snapshot.positions, options.skew_min_samples)
    print(f"{degrees:.2f}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for remote scan sessions."""
    import uvicorn

    from receiptscan.runtime import receipt_server as server

    print(f"Starting scan server on {args.host}:{args.port}")
    print(f"Open a session: POST http://{args.host}:{args.port}/sessions")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)
