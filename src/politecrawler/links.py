"""
URL helpers: link extraction and the domain allow-list.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, SoupStrainer

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

WEB_SCHEMES: frozenset[str] = frozenset(("http", "https"))


def host_of(url: str) -> str:
    """Return the lowercase hostname of a URL, or "" if it has none or fails to parse."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def authority_of(url: str) -> str:
    """
    Return the lowercase ``host[:port]`` of a URL, or "" if it has no host.

    This is the per-domain key for the robots cache and the rate limiter.
    """
    try:
        parsed = urlparse(url)
        hostname = (parsed.hostname or "").lower()
        port = parsed.port
    except ValueError:
        return ""
    if not hostname:
        return ""
    return f"{hostname}:{port}" if port else hostname


def resolve_link(href: str, base_url: str) -> Optional[str]:
    """
    Resolve one href against the page URL.

    Returns None for empty hrefs, unresolvable values and non-web schemes
    (mailto:, javascript:, ftp:, ...). The fragment is dropped.
    """
    if not href or not href.strip():
        return None
    try:
        absolute, _ = urldefrag(urljoin(base_url, href.strip()))
        parsed = urlparse(absolute)
        if parsed.scheme.lower() not in WEB_SCHEMES or not parsed.hostname:
            return None
    except ValueError:
        return None
    return absolute


def _dedupe_keep_order(urls: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for u in urls:
        if u not in seen:
            seen.add(u)
            out.append(u)
    return out


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Extract absolute, fragment-free http(s) links from a page.

    Links come back in document order with duplicates removed. Hrefs that
    cannot be resolved are skipped without affecting the others.
    """
    if not html:
        return []
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    candidates = (resolve_link(a.get("href", ""), base_url) for a in soup.find_all("a"))
    return _dedupe_keep_order(u for u in candidates if u)


def is_allowed_domain(url: str, allowed_domains: Optional[Sequence[str]]) -> bool:
    """
    Check the URL's host against the allow-list.

    No allow-list means everything is in scope. Otherwise the host must end
    with one of the entries, so subdomains are included. URLs without a
    parseable host are never in scope.
    """
    if allowed_domains is None:
        return True
    host = host_of(url)
    if not host:
        return False
    return any(host.endswith(domain.lower()) for domain in allowed_domains if domain)
