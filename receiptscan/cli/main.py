#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Multi-frame receipt scanning CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  replay <frames.jsonl>      Replay recorded frames through a scan session
  skew <frames.jsonl>        Estimate receipt skew from recorded frames
  skew --ocr-json <ocr.json> Estimate receipt skew from raw OCR text lines
  serve [--host] [--port]    Start the scan session server

Notes:
  Frames files hold one JSON frame reading per line.
  Scan options are read from config/receiptscan.toml ([scan] table)
  unless RECEIPTSCAN_CONFIG or --config points elsewhere.
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # replay command
    replay_parser = subparsers.add_parser("replay", help="Replay recorded frames through a scan session")
    replay_parser.add_argument("frames", help="Path to a JSON Lines frames file")
    replay_parser.add_argument(
        "--images", action="store_true", help="Treat frames as discrete image captures instead of a video feed"
    )
    replay_parser.add_argument("--config", default=None, help="Scan options TOML file")

    # skew command
    skew_parser = subparsers.add_parser("skew", help="Estimate receipt skew from recorded frames")
    skew_parser.add_argument("frames", help="Path to a JSON Lines frames file, or a raw OCR result with --ocr-json")
    skew_parser.add_argument(
        "--ocr-json", action="store_true", help="Read a raw PaddleOCR result and estimate from its text lines"
    )
    skew_parser.add_argument("--padding", type=int, default=0, help="Image padding added before OCR (default: 0)")
    skew_parser.add_argument("--config", default=None, help="Scan options TOML file")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the scan session server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "replay":
        from receiptscan.cli.receipt import cmd_replay

        return _run_command(cmd_replay, args)
    elif args.command == "skew":
        from receiptscan.cli.receipt import cmd_skew

        return _run_command(cmd_skew, args)
    elif args.command == "serve":
        from receiptscan.cli.receipt import cmd_serve

        return _run_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
