"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

from politecrawler.config import SCORING_MODES, CrawlConfig
from politecrawler.core import CrawlStats, run_crawl
from politecrawler.scoring import RankedResult, rank_results

logger = logging.getLogger("politecrawler")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def log_summary(stats: CrawlStats) -> None:
    """Log crawl summary counters."""
    logger.info("Total pages crawled: %d", stats.pages_crawled)
    for reason, count in sorted(stats.skipped.items()):
        logger.info("  skipped (%s): %d", reason, count)
    if stats.error_counts:
        for error_type, count in sorted(stats.error_counts.items()):
            label = error_type if not error_type.isdigit() else f"HTTP {error_type}"
            logger.info("  errors (%s): %d", label, count)
    else:
        logger.info("No errors encountered.")


def write_results(results: List[RankedResult], out: str) -> None:
    payload = [r._asdict() for r in results]
    json_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if out == "-":
        print(json_text)
        return
    output_path = Path(out)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json_text, encoding="utf-8")
    logger.info("Results written to: %s", output_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl breadth-first from a URL, politely, and rank pages by keyword hits."
    )
    parser.add_argument("-u", "--url", required=True, help="Start URL (e.g. https://example.com)")
    parser.add_argument("-d", "--depth", type=int, default=2, help="Maximum link depth (default: 2)")
    parser.add_argument(
        "-a", "--allowed-domains", nargs="+", default=None,
        help="Only crawl hosts ending with one of these domains",
    )
    parser.add_argument("-k", "--keywords", nargs="+", default=[], help="Keywords to score pages by")
    parser.add_argument("--top", type=int, default=10, help="Number of results to print (default: 10)")
    parser.add_argument(
        "--scoring", choices=SCORING_MODES, default="crawl",
        help="'crawl': crawl-wide keyword total for every page (default); 'page': per-page hits",
    )
    parser.add_argument("--timeout", type=float, default=15.0, help="Request timeout in seconds (default: 15)")
    parser.add_argument("--min-interval", type=float, default=1.0,
                        help="Minimum seconds between requests to one domain, at least 1 (default: 1)")
    parser.add_argument("--user-agent", default="PoliteCrawler/1.0", help="User-Agent header")
    parser.add_argument("--ignore-robots", action="store_true", help="Do not consult robots.txt")
    parser.add_argument("--out", help="Write the full ranking as JSON to this path, or '-' for stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = CrawlConfig(
            user_agent=args.user_agent,
            respect_robots=not args.ignore_robots,
            min_interval_s=args.min_interval,
            timeout_s=args.timeout,
            scoring=args.scoring,
        )
    except ValueError as e:
        parser.error(str(e))

    logger.info("Crawling %s at depth %d...", args.url, args.depth)
    started = time.monotonic()
    try:
        state = run_crawl(
            args.url,
            args.depth,
            args.allowed_domains,
            args.keywords,
            config=config,
        )
    except ValueError as e:
        logger.error("Error during crawling: %s", e)
        return 1

    results = rank_results(state, config.scoring)
    logger.info("Crawling completed successfully")
    log_summary(state.stats)
    for url, score in results[: args.top]:
        print(f"URL: {url}, Score: {score}")
    if args.out:
        write_results(results, args.out)

    logger.info("Crawling took %.2fs", time.monotonic() - started)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
