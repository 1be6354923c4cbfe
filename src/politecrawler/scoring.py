"""
Keyword relevance: tallying keyword hits and ranking visited pages.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, NamedTuple, Sequence

from bs4 import BeautifulSoup

if TYPE_CHECKING:
    from politecrawler.core import CrawlState

# Elements whose text is never rendered
INVISIBLE_TAGS: list[str] = ["script", "style", "noscript", "template"]


class RankedResult(NamedTuple):
    url: str
    score: int


def visible_text(html: str) -> str:
    """Return the page's visible text, whitespace-separated."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(INVISIBLE_TAGS):
        tag.decompose()
    return soup.get_text(" ")


def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Whole-word pattern for a lowercase keyword."""
    return re.compile(rf"\b{re.escape(keyword.lower())}\b")


def count_keywords(text: str, keywords: Sequence[str]) -> dict[str, int]:
    """Count whole-word, case-insensitive matches of each keyword in text."""
    lowered = text.lower()
    counts: dict[str, int] = {}
    for keyword in keywords:
        key = keyword.lower()
        if not key.strip() or key in counts:
            continue
        counts[key] = len(keyword_pattern(key).findall(lowered))
    return counts


def page_keyword_counts(html: str, keywords: Sequence[str]) -> dict[str, int]:
    """Keyword hits in one page's visible text."""
    return count_keywords(visible_text(html), keywords) if keywords else {}


def record_counts(state: "CrawlState", url: str, counts: dict[str, int]) -> int:
    """
    Add a page's keyword hits to the crawl-wide tally.

    ``state.keyword_tally`` is a running total across every fetched page;
    ``state.page_tally[url]`` keeps the page's own hit count. Returns the
    page's hit count.
    """
    for key, count in counts.items():
        state.keyword_tally[key] = state.keyword_tally.get(key, 0) + count
    page_total = sum(counts.values())
    state.page_tally[url] = page_total
    return page_total


def update_tally(state: "CrawlState", url: str, html: str, keywords: Sequence[str]) -> int:
    """Count a page's keyword hits and add them to the crawl-wide tally."""
    return record_counts(state, url, page_keyword_counts(html, keywords))


def rank_results(state: "CrawlState", scoring: str = "crawl") -> List[RankedResult]:
    """
    Order visited pages by score, highest first; ties keep crawl order.

    With ``scoring="crawl"`` every page scores the total keyword hit count of
    the whole crawl, so all scores are equal. ``scoring="page"`` scores each
    page by its own hits instead.
    """
    if scoring == "crawl":
        total = sum(state.keyword_tally.values())
        ranked = [RankedResult(url, total) for url in state.results]
    elif scoring == "page":
        ranked = [RankedResult(url, state.page_tally.get(url, 0)) for url in state.results]
    else:
        raise ValueError(f"Unknown scoring mode: {scoring!r}")
    # sorted() is stable, reverse included
    return sorted(ranked, key=lambda r: r.score, reverse=True)
