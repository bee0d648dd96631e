"""
CLI entry point for iaeste-reports.

Usage:
    python -m iaeste_reports --mode serve
    python -m iaeste_reports --mode dump --output reports.json
    python -m iaeste_reports --mode categories
    python -m iaeste_reports --mode entries --field 3 --specialization 12
    python -m iaeste_reports --mode review --review-id 1234
"""

import argparse
import asyncio
import json
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout carries the JSON output of the one-shot modes
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="IAESTE CZ student report scraper and JSON API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the dataset, refreshing it periodically
  python -m iaeste_reports --mode serve

  # Scrape everything once into a file
  python -m iaeste_reports --mode dump --output reports.json

  # Print the country categories and fields
  python -m iaeste_reports --mode categories

  # List the reports of one specialization
  python -m iaeste_reports --mode entries --field 3 --specialization 12

  # Parse a single report
  python -m iaeste_reports --mode review --review-id 1234
        """,
    )

    parser.add_argument(
        "--mode",
        choices=["serve", "dump", "categories", "entries", "review"],
        default="serve",
        help="What to do (default: serve)",
    )
    parser.add_argument("--output", type=str, help="Output file for one-shot modes (default: stdout)")
    parser.add_argument("--country", type=int, help="Country id for --mode entries")
    parser.add_argument("--field", type=int, help="Field id for --mode entries")
    parser.add_argument("--specialization", type=int, help="Specialization id for --mode entries (needs --field)")
    parser.add_argument("--review-id", type=int, help="Report id for --mode review")
    parser.add_argument("--config", type=str, help="Path to settings YAML file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Output logs as JSON (for production)")
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    args = parser.parse_args(argv)

    if args.mode == "review" and args.review_id is None:
        parser.error("--mode review requires --review-id")
    if args.mode == "entries":
        if args.specialization is not None and args.field is None:
            parser.error("--specialization requires --field")
        if args.country is None and args.field is None:
            parser.error("--mode entries requires --country or --field")

    return args


def write_output(payload, output=None) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)


async def main_async(args):
    """Async main function."""
    from .config.loader import load_settings
    from .navigators.review_list import ReviewListNavigator
    from .orchestrator import get_base_categories, get_data_dump
    from .parsers.review_detail import ReviewDetailParser
    from .server import make_http_client, run_server

    logger = structlog.get_logger(__name__)
    settings = load_settings(args.config)

    logger.info("starting_iaeste_reports", mode=args.mode)

    if args.mode == "serve":
        await run_server(settings)
        return

    async with make_http_client(settings) as client:
        if args.mode == "dump":
            payload = (await get_data_dump(client, **settings.concurrency_limits)).to_dict()
        elif args.mode == "categories":
            payload = (await get_base_categories(client)).to_dict()
        elif args.mode == "entries":
            review_list = ReviewListNavigator(client)
            if args.specialization is not None:
                entries = await review_list.get_review_entries_by_specialization(args.field, args.specialization)
            elif args.field is not None:
                entries = await review_list.get_review_entries_by_field(args.field)
            else:
                entries = await review_list.get_review_entries_by_country(args.country)
            payload = [e.to_dict() for e in entries]
        else:
            payload = (await ReviewDetailParser(client).get_review_content(args.review_id)).to_dict()

    write_output(payload, args.output)
    logger.info("done", mode=args.mode, output=args.output or "stdout", requests=client.requests_made)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    if args.version:
        from . import __version__
        print(f"iaeste-reports {__version__}")
        sys.exit(0)

    setup_logging(args.log_level, args.json_logs)

    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
