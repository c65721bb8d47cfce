#!/usr/bin/env python3
"""
Command-line interface for photobooker.

Usage:
    # Compose every photo under ./photos into one PDF, oldest first
    photobooker -i ./photos -o ./book.pdf -t "Summer 2020"

    # Leave out photos without a capture time instead of failing
    photobooker -i ./photos -o ./book.pdf -t "Summer 2020" --on-metadata-error skip

    # Only show the order pages would be composed in
    photobooker -i ./photos -o ./book.pdf -t "Summer 2020" --dry-run
"""

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photobooker",
        description="Compose a directory of photographs into a chronological PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-i", "--input", required=True,
                        help="Directory scanned recursively for source images")
    parser.add_argument("-o", "--output", required=True,
                        help="PDF file to create (overwritten if it exists)")
    parser.add_argument("-t", "--title", required=True, help="Title of the PDF")
    parser.add_argument("-a", "--author", default="Unknown", help="Author of the PDF")
    parser.add_argument("--on-metadata-error", choices=["abort", "skip"], default="abort",
                        help="What to do with images lacking a capture time (default: abort)")
    parser.add_argument("--dry-run", action="store_true",
                        help="List images in page order without writing anything")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    return parser


def cmd_list(pipeline) -> int:
    """Print the chronological page order."""
    from .errors import BookerError

    try:
        records = pipeline.collect_records()
    except BookerError as e:
        print(f"\n✗ Failed: {e}", file=sys.stderr)
        return 1

    for number, record in enumerate(records, start=1):
        print(f"{number:4d}. {record}")
    return 0


def cmd_compose(pipeline) -> int:
    """Run the full pipeline."""
    result = pipeline.run()

    if result.success:
        print(f"\n✓ Success: {result.message}")
        print(f"  PDF: {result.output_path}")
        return 0
    else:
        print(f"\n✗ Failed: {result.message}", file=sys.stderr)
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from .config import BookerConfig
    from .pipeline import PhotoBookPipeline

    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = BookerConfig(
            input_dir=Path(args.input),
            output_path=Path(args.output),
            title=args.title,
            author=args.author,
            on_metadata_error=args.on_metadata_error,
        )
        pipeline = PhotoBookPipeline(config)
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        return cmd_list(pipeline)
    return cmd_compose(pipeline)


if __name__ == "__main__":
    sys.exit(main())
