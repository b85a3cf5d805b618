"""CLI entry point for the subsidy scraper.

Provides ``main()`` as the sync entry point for the ``subsidy-scraper``
console script, and ``async_main(args)`` which sets up logging, builds
the config, runs the selected dataset, and prints an end-of-run summary.

Usage::

    subsidy-scraper --data livestock
    subsidy-scraper --data livestock-programs --output-dir out
    subsidy-scraper --data spending --browser-port 9515
    subsidy-scraper --data program --progcode total_conservation

Exit status is 0 when the run completes (skipped regions included) and 1
when it halts on a fatal error.  Unknown ``--data`` values are rejected
by argparse with status 2, and so is a ``--progcode`` that
``get_dataset`` cannot bind.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from subsidy_scraper.config import ScraperConfig
from subsidy_scraper.datasets import DATASETS, get_dataset
from subsidy_scraper.logging_config import setup_logging
from subsidy_scraper.pipeline import run

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the subsidy-scraper CLI."""
    parser = argparse.ArgumentParser(
        prog="subsidy-scraper",
        description="Scrape per-state subsidy and spending tables into TSV files",
    )
    parser.add_argument(
        "-d", "--data",
        required=True,
        choices=sorted(DATASETS),
        help="Dataset to scrape",
    )
    parser.add_argument(
        "--progcode",
        type=str,
        default=None,
        help="EWG program code (required with --data program)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=".",
        help="Directory for output tables (default: current directory)",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for run logs (default: <output-dir>/logs)",
    )
    parser.add_argument(
        "--browser-host",
        type=str,
        default=None,
        help="Browser DevTools host for rendered pages (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--browser-port",
        type=int,
        default=None,
        help="Browser DevTools port for rendered pages (default: 9515)",
    )
    parser.add_argument(
        "--launch-browser",
        action="store_true",
        help="Launch a headless browser instead of attaching to a running one",
    )
    parser.add_argument(
        "--marker-timeout",
        type=float,
        default=None,
        help="Seconds to wait for a rendered page's content (default: 60)",
    )
    parser.add_argument(
        "--max-polls",
        type=int,
        default=None,
        help="Page source polls before giving up on a rendered page (default: 60)",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=None,
        help="Per-request timeout for direct fetches in seconds (default: 30)",
    )
    return parser


def build_config(args: argparse.Namespace) -> ScraperConfig:
    """Build a ScraperConfig from parsed args, keeping defaults for unset options."""
    config_overrides = {
        "output_dir": args.output_dir,
        "launch_browser": args.launch_browser,
    }
    optional = {
        "browser_host": args.browser_host,
        "browser_port": args.browser_port,
        "marker_timeout": args.marker_timeout,
        "max_polls": args.max_polls,
        "request_timeout": args.request_timeout,
    }
    config_overrides.update({k: v for k, v in optional.items() if v is not None})
    return ScraperConfig(**config_overrides)


async def async_main(args: argparse.Namespace) -> int:
    """Async entry point: set up components, run the dataset, print summary.

    Returns:
        Process exit status.
    """
    log_dir = args.log_dir or str(Path(args.output_dir) / "logs")
    log_file = setup_logging(log_dir)

    config = build_config(args)
    dataset = get_dataset(args.data, args.progcode)
    logger.info(
        "Starting subsidy-scraper: data=%s, fetcher=%s, output_dir=%s, log=%s",
        dataset.name, dataset.fetcher, config.output_dir, log_file,
    )

    try:
        summary = await run(dataset, config)
        logger.info("\n%s", summary.format_summary())
    finally:
        logging.shutdown()

    return 1 if summary.halted else 0


def main() -> None:
    """Sync entry point for the subsidy-scraper console script."""
    parser = build_parser()
    args = parser.parse_args()
    try:
        get_dataset(args.data, args.progcode)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        status = asyncio.run(async_main(args))
    except KeyboardInterrupt:
        status = 130
    sys.exit(status)


if __name__ == "__main__":
    main()
