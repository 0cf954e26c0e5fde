"""
Command-line entry point for stackmirror.

Exit codes: 0 on success (even if some posts were skipped), 1 if the run
fails, 2 for bad or missing arguments.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .core.config import OUTPUT_FORMATS, DEFAULT_PAGE_SIZE, SyncConfig, parse_since
from .core.controller import SyncController
from .core.errors import ArgumentError, MirrorError
from .core.logger import create_error_tracker, get_logger, initialize_logging


EXIT_OK = 0
EXIT_RUNTIME = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stackmirror",
        description="Mirror a Substack publication's archive to local HTML or Markdown files",
    )
    parser.add_argument("--pub", required=True,
                        help="Name of the Substack publication to mirror (required)")
    parser.add_argument("--cookie", default="",
                        help="Substack API cookie (without the `substack.sid=` prefix)")
    parser.add_argument("--output", choices=OUTPUT_FORMATS, default="html",
                        help="Output format: html (default) or md")
    parser.add_argument("--dest", default=".",
                        help="Destination folder to write output to. Defaults to current directory")
    parser.add_argument("--since", default="1970-01-01",
                        help="Fetch posts published after this date (YYYY-MM-DD). Defaults to 1970-01-01")
    parser.add_argument("--delay", type=float, default=1.0,
                        help="Minimum seconds between requests")
    parser.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE,
                        help="Archive entries requested per page")
    parser.add_argument("--timeout", type=float, default=30.0,
                        help="HTTP timeout in seconds")
    parser.add_argument("--log-dir", default=None,
                        help="Also write rotating log files to this directory")
    parser.add_argument("--error-report", default=None,
                        help="Write a report of skipped posts to this path after the run")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug output")
    return parser


def config_from_args(args: argparse.Namespace) -> SyncConfig:
    """Build and validate the run configuration from parsed arguments."""
    return SyncConfig(
        pub_name=args.pub.strip(),
        cookie=args.cookie,
        output_format=args.output,
        dest_folder=args.dest,
        since=parse_since(args.since),
        page_size=args.page_size,
        request_delay=args.delay,
        timeout=args.timeout,
    ).validate()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on bad input and 0 for --help
        return e.code if isinstance(e.code, int) else EXIT_USAGE

    try:
        config = config_from_args(args)
    except ArgumentError as e:
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    initialize_logging(args.log_dir, logging.DEBUG if args.verbose else logging.INFO)
    logger = get_logger('cli')
    error_tracker = create_error_tracker('sync')

    controller = SyncController(config, error_tracker=error_tracker)
    try:
        controller.run()
    except MirrorError as e:
        logger.error(f"Runtime error: {e}")
        return EXIT_RUNTIME
    finally:
        controller.close()

    summary = error_tracker.get_error_summary()
    if summary['total_errors']:
        logger.warning(f"Skipped {summary['total_errors']} post(s): {', '.join(summary['skipped_slugs'])}")
    if args.error_report:
        try:
            error_tracker.save_error_report(args.error_report)
        except OSError as e:
            logger.error(f"Failed to save error report: {e}")
            return EXIT_RUNTIME

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
