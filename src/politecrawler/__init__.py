"""
Polite breadth-first web crawler with robots.txt support, per-domain pacing
and keyword-based ranking of visited pages.
"""
from politecrawler.config import CrawlConfig
from politecrawler.core import CrawlState, CrawlStats, CrawlTask, InvalidSeedError, crawl, run_crawl
from politecrawler.scoring import RankedResult, rank_results

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "run_crawl",
    "rank_results",
    "CrawlConfig",
    "CrawlState",
    "CrawlStats",
    "CrawlTask",
    "InvalidSeedError",
    "RankedResult",
]
