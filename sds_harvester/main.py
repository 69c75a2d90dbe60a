#!/usr/bin/env python3
"""Main entry point for the safety data sheet harvester."""

import argparse
import logging
import time
from contextlib import ExitStack
from pathlib import Path

from .config import (
    CACHE_DIR,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_RANDOM_COUNT,
    DEFAULT_STRATEGY,
    DEFAULT_WORKERS,
    DELAYS,
    PDFS_DIR,
    SEARCH_URL,
    STRATEGIES,
    TIMEOUTS,
    HarvestConfig,
)
from .errors import ConfigError
from .harvester import Harvester
from .keys import key_space_size
from .progress import ProgressBar, format_duration
from .result_writer import ResultWriter

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Enumerate search keys, cache results and download the linked safety data sheet PDFs"
    )
    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default=DEFAULT_STRATEGY,
        help=f"Key enumeration strategy (default: {DEFAULT_STRATEGY})",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=DEFAULT_RANDOM_COUNT,
        help=f"Number of keys for the random strategy (default: {DEFAULT_RANDOM_COUNT})",
    )
    parser.add_argument(
        "--alphabet",
        default=None,
        help="Key symbols (default: 0-9a-z for exhaustive, a-z for random strategies)",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=CACHE_DIR,
        help=f"Directory for cached search results (default: {CACHE_DIR})",
    )
    parser.add_argument(
        "--download-dir",
        type=Path,
        default=PDFS_DIR,
        help=f"Directory for downloaded PDFs (default: {PDFS_DIR})",
    )
    parser.add_argument(
        "--search-url",
        default=SEARCH_URL,
        help=f"Search endpoint (default: {SEARCH_URL})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=TIMEOUTS["download"],
        help=f"Per-request timeout in seconds (default: {TIMEOUTS['download']})",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=DELAYS["search"],
        help=f"Minimum seconds between searches (default: {DELAYS['search']})",
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Parallel download workers (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--queue-size",
        type=int,
        default=DEFAULT_QUEUE_SIZE,
        help=f"Maximum links waiting for a download worker (default: {DEFAULT_QUEUE_SIZE})",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="Append one CSV row per download outcome to this file",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar (bounded strategies only)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output, including skipped files",
    )
    args = parser.parse_args(argv)
    args.config = build_config(parser, args)
    return args


def build_config(parser: argparse.ArgumentParser, args) -> HarvestConfig:
    config = HarvestConfig(
        cache_dir=args.cache_dir,
        download_dir=args.download_dir,
        http_timeout=args.timeout,
        alphabet=args.alphabet,
        search_url=args.search_url,
        search_delay=args.delay,
        strategy=args.strategy,
        count=args.count,
        workers=args.workers,
        queue_size=args.queue_size,
    )
    try:
        return config.validate()
    except ConfigError as e:
        parser.error(str(e))


def setup_logging(verbose: bool, quiet: bool = False):
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    config = args.config
    total_keys = key_space_size(config.strategy, config.alphabet, config.count)
    show_progress = args.progress and total_keys is not None
    setup_logging(args.verbose, quiet=show_progress)

    print("=" * 60)
    print("Safety Data Sheet Harvester")
    print("=" * 60)
    print(f"Strategy: {config.strategy} ({total_keys if total_keys is not None else 'unbounded'} keys)")
    print(f"Search: {config.search_url}")
    print(f"Cache: {config.cache_dir}")
    print(f"PDFs: {config.download_dir}")
    print(f"Workers: {config.workers}")
    if args.manifest:
        print(f"Manifest: {args.manifest}")
    print("=" * 60)

    start = time.time()
    progress = ProgressBar(total=total_keys) if show_progress else None

    with ExitStack() as stack:
        harvester = stack.enter_context(Harvester(config))
        writer = stack.enter_context(ResultWriter(args.manifest)) if args.manifest else None

        def on_outcome(key, outcome):
            if writer:
                writer.write(key, outcome)

        def on_key(key, lookup):
            if progress:
                progress.update(harvester.summary, time.time() - start)

        harvester.bootstrap()
        try:
            summary = harvester.run(on_outcome=on_outcome, on_key=on_key)
        except KeyboardInterrupt:
            harvester.stop()
            summary = harvester.summary
            if progress:
                progress.finish()
                progress = None
            print("\nInterrupted; stopping.")

    if progress:
        progress.finish()

    print(f"\n{'='*60}")
    print("SUMMARY")
    print("=" * 60)
    print(f"Keys processed: {summary.keys} (cached: {summary.cache_hits}, searched: {summary.searches})")
    print(f"Search failures: {summary.search_failures}")
    print(f"PDF links: {summary.links}")
    print(f"Downloads: Downloaded: {summary.downloaded}, Skipped: {summary.skipped}, Failed: {summary.failed}")
    print(f"Elapsed: {format_duration(time.time() - start)}")
    print(f"PDFs saved to: {config.download_dir}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    main()
