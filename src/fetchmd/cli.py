"""Command-line interface for fetchmd."""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from . import __version__
from .input import InputSource
from .logging_config import setup_logging
from .models.config import FetchmdConfig
from .pipeline import Pipeline, PipelineError
from .render import RenderError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="fetchmd",
        description="Convert any webpage to clean, token-efficient markdown for AI agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch and convert a URL
  fetchmd https://example.com

  # Convert a local HTML file
  fetchmd --file page.html

  # Pipe HTML from stdin
  curl -s https://example.com | fetchmd

  # Several pages as JSON, with statistics
  fetchmd https://example.com/a https://example.com/b --json --stats
        """,
    )

    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="HTTPS URL(s) to fetch and convert",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--file",
        "-f",
        action="append",
        dest="files",
        type=Path,
        metavar="PATH",
        help="Read HTML from a local file (repeatable)",
    )

    # Conversion
    conversion_group = parser.add_argument_group("conversion")
    conversion_group.add_argument(
        "--raw",
        "-r",
        action="store_true",
        help="Skip article extraction, convert the full HTML",
    )
    conversion_group.add_argument(
        "--render",
        action="store_true",
        help="Render URL inputs in headless Chromium (requires Playwright)",
    )
    conversion_group.add_argument(
        "--render-timeout",
        type=int,
        default=None,
        metavar="MS",
        help="Page load timeout for --render in milliseconds (default: 30000)",
    )

    # Network settings
    network_group = parser.add_argument_group("network settings")
    network_group.add_argument(
        "--timeout",
        type=int,
        default=None,
        metavar="MS",
        help="Per-request timeout in milliseconds (default: 15000)",
    )
    network_group.add_argument(
        "--max-size",
        type=str,
        default=None,
        metavar="SIZE",
        help="Maximum response size, e.g. '500kb' or '5mb' (default: 5mb)",
    )
    network_group.add_argument(
        "--max-redirects",
        type=int,
        default=None,
        metavar="N",
        help="Maximum redirects to follow (default: 5)",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--stats",
        "-s",
        action="store_true",
        help="Print word count, token estimate, and size to stderr",
    )
    output_group.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output JSON with source, title, excerpt, markdown and stats",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose logging to stderr",
    )
    output_group.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Also write logs to this file",
    )

    return parser


def collect_sources(args: argparse.Namespace, stdin_is_tty: bool) -> list[InputSource]:
    """Build the input list: URLs, then files, then stdin if nothing else was given."""
    sources = [InputSource.url(url) for url in args.urls]
    sources.extend(InputSource.file(path) for path in args.files or [])

    if not sources and not stdin_is_tty:
        sources.append(InputSource.stdin())

    return sources


def build_config(args: argparse.Namespace) -> FetchmdConfig:
    """Map parsed arguments to a FetchmdConfig."""
    config_kwargs: dict = {
        "raw": args.raw,
        "stats": args.stats,
        "json_output": args.json_output,
        "render_js": args.render,
    }

    budget_kwargs: dict = {}
    if args.timeout is not None:
        budget_kwargs["timeout_ms"] = args.timeout
    if args.max_size is not None:
        budget_kwargs["max_bytes"] = args.max_size
    if args.max_redirects is not None:
        budget_kwargs["max_redirects"] = args.max_redirects
    if budget_kwargs:
        config_kwargs["budget"] = budget_kwargs

    if args.render_timeout is not None:
        config_kwargs["render"] = {"timeout_ms": args.render_timeout}

    if args.verbose:
        config_kwargs["log_level"] = "DEBUG"
    if args.log_file is not None:
        config_kwargs["log_file"] = args.log_file

    return FetchmdConfig(**config_kwargs)


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush cannot fail again."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv: Optional[list[str]] = None, stdin_is_tty: Optional[bool] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if stdin_is_tty is None:
        stdin_is_tty = sys.stdin.isatty()

    sources = collect_sources(args, stdin_is_tty)
    if not sources:
        parser.error("No input provided. Pass a URL, use --file, or pipe HTML via stdin.")

    console = Console(stderr=True)

    try:
        config = build_config(args)
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 1

    setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
        force=True,
    )

    try:
        return asyncio.run(Pipeline(config).run(sources))
    except BrokenPipeError:
        _silence_stdout()
        return 0
    except (PipelineError, RenderError) as e:
        console.print(f"[red]fetchmd:[/red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
