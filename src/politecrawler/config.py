"""
Crawl configuration.

Policy and tunables live here so the traversal loop stays lean.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

SCORING_MODES: tuple[str, ...] = ("crawl", "page")

# At most one request per domain per second
MIN_INTERVAL_FLOOR_S = 1.0


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Runtime options for a single crawl."""

    # Identity and politeness
    user_agent: str = "PoliteCrawler/1.0"
    respect_robots: bool = True
    min_interval_s: float = 1.0

    # Per-fetch timeout, applied to pages and robots.txt alike
    timeout_s: float = 15.0

    # "crawl": every page scores the crawl-wide keyword total.
    # "page": every page scores its own keyword hits.
    scoring: str = "crawl"

    def __post_init__(self) -> None:
        if self.scoring not in SCORING_MODES:
            raise ValueError(f"Unknown scoring mode: {self.scoring!r}")
        if self.min_interval_s < MIN_INTERVAL_FLOOR_S:
            raise ValueError(f"min_interval_s must be >= {MIN_INTERVAL_FLOOR_S}")

    def with_overrides(self, **kwargs) -> "CrawlConfig":
        """Return a copy with specific fields overridden."""
        return replace(self, **kwargs)
