"""Command-line interface for richtext2html.

Usage::

    richtext2html doc.json                      # writes doc.html
    richtext2html doc.json -o out.html          # explicit output path
    richtext2html notes.md --markdown           # Markdown input
    richtext2html doc.json --style card         # card layout variant
    richtext2html --list-styles                 # list available presets
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from richtext2html import __version__
from richtext2html.converter import Converter
from richtext2html.settings import Settings, get_settings
from richtext2html.style_manager import StyleManager


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="richtext2html",
        description="Render CMS rich-text documents to HTML fragments.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the rich-text JSON (or Markdown) document.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output HTML file path. Defaults to <input>.html.",
    )
    parser.add_argument(
        "-s", "--style",
        default="smart",
        choices=StyleManager.PRESETS,
        help="Layout preset (default: %(default)s).",
    )
    parser.add_argument(
        "-m", "--markdown",
        action="store_true",
        help="Treat the input as Markdown.",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--payment-recipient",
        help="Payment recipient for eCommerce forms "
             "(default: $RICHTEXT2HTML_PAYMENT_RECIPIENT).",
    )
    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="List available layout presets and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress information.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _load_settings(payment_recipient: str | None) -> Settings:
    if payment_recipient is not None:
        return Settings(payment_recipient=payment_recipient)
    return get_settings()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_styles:
        print("Available layout presets:")
        for preset in StyleManager.PRESETS:
            print(f"  - {preset}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    try:
        settings = _load_settings(args.payment_recipient)
    except ValidationError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else settings.log_level)

    output_path = Path(args.output) if args.output else input_path.with_suffix(".html")

    logger.debug(f"Input:  {input_path}")
    logger.debug(f"Output: {output_path}")
    logger.debug(f"Style:  {args.style}")

    try:
        converter = Converter(settings, style_preset=args.style)
        asyncio.run(converter.convert_file(
            input_path,
            output_path,
            markdown=args.markdown,
            encoding=args.encoding,
        ))
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        logger.info(f"Done. {output_path.stat().st_size} bytes written.")
    else:
        print(f"Converted: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
