"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Sequence, Set
from urllib.parse import urlparse

import requests

from politecrawler.config import CrawlConfig
from politecrawler.links import WEB_SCHEMES, extract_links, is_allowed_domain
from politecrawler.robots import RobotsCache
from politecrawler.scoring import RankedResult, page_keyword_counts, rank_results, record_counts
from politecrawler.throttle import RateLimiter

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES: tuple[str, ...] = ("text/html", "application/xhtml+xml")


class InvalidSeedError(ValueError):
    """The seed URL cannot start a crawl."""


@dataclass(frozen=True, slots=True)
class CrawlTask:
    """A frontier entry."""
    url: str
    depth: int


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    skipped: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_skip(self, reason: str) -> None:
        self.skipped[reason] += 1

    def record_error(self, exc: requests.RequestException) -> None:
        """Record a fetch failure by status code or exception type."""
        response = getattr(exc, "response", None)
        if response is not None:
            self.error_counts[str(response.status_code)] += 1
        elif isinstance(exc, requests.Timeout):
            self.error_counts["timeout"] += 1
        else:
            self.error_counts["connection_error"] += 1


@dataclass(slots=True)
class CrawlState:
    """Everything one crawl run mutates. Owned by the traversal loop."""
    session: requests.Session
    robots: RobotsCache
    limiter: RateLimiter
    visited: Set[str] = field(default_factory=set)
    failed: Set[str] = field(default_factory=set)
    frontier: Deque[CrawlTask] = field(default_factory=deque)
    results: List[str] = field(default_factory=list)
    keyword_tally: Dict[str, int] = field(default_factory=dict)
    page_tally: Dict[str, int] = field(default_factory=dict)
    stats: CrawlStats = field(default_factory=CrawlStats)


def validate_seed(seed: str) -> str:
    """Return the seed stripped of whitespace, or raise InvalidSeedError."""
    candidate = (seed or "").strip()
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidSeedError(f"Invalid start URL: {seed!r}") from e
    if parsed.scheme.lower() not in WEB_SCHEMES or not hostname:
        raise InvalidSeedError(f"Invalid start URL: {seed!r}")
    return candidate


def build_session(config: CrawlConfig) -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    return session


def is_html(resp: requests.Response) -> bool:
    content_type = (resp.headers.get("content-type") or "").lower()
    return any(t in content_type for t in HTML_CONTENT_TYPES)


def fetch_page(session: requests.Session, url: str, timeout_s: float) -> requests.Response:
    """GET a page. Error statuses raise requests.HTTPError."""
    resp = session.get(url, timeout=timeout_s)
    resp.raise_for_status()
    return resp


def run_crawl(
    seed: str,
    max_depth: int,
    allowed_domains: Optional[Sequence[str]] = None,
    keywords: Sequence[str] = (),
    *,
    config: Optional[CrawlConfig] = None,
    session: Optional[requests.Session] = None,
    limiter: Optional[RateLimiter] = None,
) -> CrawlState:
    """
    Crawl breadth-first from ``seed`` and return the finished crawl state.

    Args:
        seed: Absolute http(s) URL to start from.
        max_depth: Maximum number of link hops from the seed (0 = seed only).
        allowed_domains: Host suffixes in scope, or None for no restriction.
        keywords: Keywords to tally across fetched pages.
        config: Crawl options; defaults to ``CrawlConfig()``.
        session: HTTP session used for pages and robots.txt.
        limiter: Per-domain rate limiter; built from the config if omitted.

    Raises:
        InvalidSeedError: the seed is not an absolute http(s) URL.
        ValueError: ``max_depth`` is negative.
    """
    config = config or CrawlConfig()
    start_url = validate_seed(seed)
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    session = session or build_session(config)
    state = CrawlState(
        session=session,
        robots=RobotsCache(session, config.timeout_s),
        limiter=limiter or RateLimiter(config.min_interval_s),
    )
    state.frontier.append(CrawlTask(start_url, 0))

    while state.frontier:
        task = state.frontier.popleft()
        url, depth = task.url, task.depth

        if depth > max_depth:
            state.stats.record_skip("depth")
            continue
        if url in state.visited:
            state.stats.record_skip("visited")
            continue
        if url in state.failed:
            state.stats.record_skip("failed")
            continue
        if not is_allowed_domain(url, allowed_domains):
            state.stats.record_skip("domain")
            continue
        if config.respect_robots and not state.robots.can_fetch(url):
            logger.debug("Disallowed by robots.txt: %s", url)
            state.stats.record_skip("robots")
            continue

        logger.debug("Crawling %s (depth: %d)", url, depth)
        try:
            state.limiter.wait(url)
        except ValueError as e:
            logger.error("Skipping %s: %s", url, e)
            state.stats.record_skip("no_host")
            continue

        try:
            resp = fetch_page(state.session, url, config.timeout_s)
        except requests.RequestException as e:
            logger.error("Error fetching %s: %s", url, e)
            state.stats.record_error(e)
            state.failed.add(url)
            continue

        # Only HTML bodies are scanned for keywords and links
        html = resp.text if is_html(resp) else ""
        try:
            counts = page_keyword_counts(html, keywords)
            links = extract_links(html, url)
        except Exception as e:  # bs4 and lxml raise assorted types on broken markup
            logger.error("Error parsing %s: %s", url, e)
            state.stats.error_counts["parse_error"] += 1
            state.failed.add(url)
            continue

        state.visited.add(url)
        state.results.append(url)
        state.stats.pages_crawled += 1

        record_counts(state, url, counts)
        for link in links:
            state.frontier.append(CrawlTask(link, depth + 1))

    return state


def crawl(
    seed: str,
    max_depth: int,
    allowed_domains: Optional[Sequence[str]] = None,
    keywords: Sequence[str] = (),
    *,
    config: Optional[CrawlConfig] = None,
    session: Optional[requests.Session] = None,
    limiter: Optional[RateLimiter] = None,
) -> List[RankedResult]:
    """Crawl from ``seed`` and return visited pages ranked by keyword score."""
    config = config or CrawlConfig()
    state = run_crawl(
        seed,
        max_depth,
        allowed_domains,
        keywords,
        config=config,
        session=session,
        limiter=limiter,
    )
    return rank_results(state, config.scoring)
