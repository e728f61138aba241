#!/usr/bin/env python3
"""Command-line interface for gif-transcoder."""

import argparse
import logging
import sys
from typing import Optional, Sequence

from .transcoder import DEFAULT_MAX_CANVAS_PIXELS, TranscodeOptions, transcode


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point; returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog="gif-transcode",
        description="Shrink an animated GIF to half its width and height",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s input.gif output.gif
  %(prog)s -v --max-canvas-pixels 1000000 big.gif small.gif
""",
    )
    parser.add_argument("input", help="GIF file to read")
    parser.add_argument("output", help="GIF file to write (replaced if it exists)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every frame")
    parser.add_argument(
        "--max-canvas-pixels",
        type=int,
        default=DEFAULT_MAX_CANVAS_PIXELS,
        help="Reject inputs whose logical screen has more pixels (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = TranscodeOptions(max_canvas_pixels=args.max_canvas_pixels)
    except ValueError as exc:
        parser.error(str(exc))

    return 0 if transcode(args.input, args.output, options) else 1


if __name__ == "__main__":
    sys.exit(main())
