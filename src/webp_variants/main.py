"""Main module for the webp-variants CLI."""

import sys
import json
import argparse
from typing import List, Optional

from . import __version__
from .core import (
    ConfigurationError,
    IngestEvent,
    SourceUnavailable,
    VariantConfig,
    get_logger,
    quiet_third_party_loggers,
    setup_logger,
)
from .core.factories import WorkerFactory
from .core.models import parse_breakpoints
from .edge import EdgeRequest, negotiate


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with the convert, negotiate and version commands."""
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="webp-variants",
        description="Convert S3 images into WebP variants and preview edge negotiation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert one object in place (variants are written next to it)
  webp-variants convert --bucket my-images --key photos/cat.jpg

  # Write variants to another bucket with a custom ladder
  webp-variants convert --bucket my-uploads --key cat.png \\
                        --output-bucket my-images --breakpoints 320,640

  # Show which object the edge would serve
  webp-variants negotiate --path /photos/cat.jpg --accept image/webp --width 500

  # Show version
  webp-variants version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    convert_parser: argparse.ArgumentParser = subparsers.add_parser(
        "convert", help="Generate the WebP variants of one S3 object"
    )
    convert_parser.add_argument("--bucket", required=True, help="Bucket holding the source")
    convert_parser.add_argument("--key", required=True, help="Key of the source object")
    convert_parser.add_argument(
        "--output-bucket", default=None, help="Bucket for the variants (default: --bucket)"
    )
    convert_parser.add_argument(
        "--breakpoints",
        default=None,
        help="Comma-separated variant widths (default: $BREAKPOINTS or 480,960,1440)",
    )
    convert_parser.add_argument(
        "--quality", type=int, default=None, help="WebP quality 1-100 (default: 80)"
    )
    convert_parser.add_argument(
        "--processor",
        type=str,
        default=None,
        choices=["serial", "multithread"],
        help="How variants are produced (default: multithread)",
    )
    convert_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    negotiate_parser: argparse.ArgumentParser = subparsers.add_parser(
        "negotiate", help="Print the path the edge would serve for a request"
    )
    negotiate_parser.add_argument("--path", required=True, help="Request path")
    negotiate_parser.add_argument("--accept", default="", help="Accept header value")
    negotiate_parser.add_argument("--width", type=int, default=None, help="Requested width")
    negotiate_parser.add_argument(
        "--breakpoints", default=None, help="Comma-separated variant widths"
    )

    subparsers.add_parser("version", help="Show version information")

    return parser


def build_config(args: argparse.Namespace) -> VariantConfig:
    """Environment configuration with command-line overrides applied."""
    config = VariantConfig.from_env()
    overrides = {}
    if args.output_bucket:
        overrides["output_bucket"] = args.output_bucket
    if args.quality is not None:
        overrides["webp_quality"] = args.quality
    if args.processor:
        overrides["processor"] = args.processor
    if args.debug:
        overrides["debug"] = True
    try:
        if args.breakpoints:
            overrides["breakpoints"] = parse_breakpoints(args.breakpoints)
        return VariantConfig(**{**config.model_dump(), **overrides})
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def run_convert(args: argparse.Namespace) -> int:
    """Convert one object and print its result as JSON. Returns the exit code."""
    setup_logger(level="DEBUG" if args.debug else None)
    quiet_third_party_loggers()
    logger = get_logger("cli")

    try:
        config = build_config(args)
    except ConfigurationError as exc:
        logger.error(f"Invalid configuration: {exc}")
        return 2

    worker = WorkerFactory.create_worker(config=config)
    try:
        result = worker.process(IngestEvent(bucket=args.bucket, key=args.key))
    except SourceUnavailable as exc:
        logger.error(f"Source unavailable: {exc}")
        return 1

    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0 if result.success else 1


def run_negotiate(args: argparse.Namespace) -> int:
    """Print the negotiated path. Returns the exit code."""
    breakpoints = None
    if args.breakpoints:
        try:
            breakpoints = parse_breakpoints(args.breakpoints)
        except ValueError:
            print(f"Invalid breakpoints: {args.breakpoints}", file=sys.stderr)
            return 2

    request = EdgeRequest(
        path=args.path,
        accept=args.accept,
        querystring=f"w={args.width}" if args.width is not None else "",
    )
    if breakpoints is None:
        print(negotiate(request))
    else:
        print(negotiate(request, breakpoints))
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the webp-variants command-line interface.

    Dispatches to the "convert", "negotiate" or "version" command and exits
    with the command's status code.
    """
    parser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "convert":
        sys.exit(run_convert(args))

    elif args.command == "negotiate":
        sys.exit(run_negotiate(args))

    elif args.command == "version":
        print("webp-variants CLI")
        print(f"Version {__version__}")
        print("Ingest-time WebP variants with edge content negotiation")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
