"""
Per-domain robots.txt cache.

Each domain's robots.txt is fetched once, on first encounter, and the parsed
directive set is kept for the rest of the run. Only the wildcard
user-agent group is consulted. Rule precedence follows RFC 9309: the longest
matching path pattern wins, Allow wins a tie, and patterns may use ``*`` and
a trailing ``$``.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urlparse

import requests

from politecrawler.links import authority_of

logger = logging.getLogger(__name__)

WILDCARD_AGENT = "*"


@dataclass(frozen=True, slots=True)
class RobotsRule:
    """One Allow or Disallow line."""
    pattern: str
    allow: bool

    @property
    def regex(self) -> re.Pattern[str]:
        return _compile_pattern(self.pattern)

    def matches(self, path: str) -> bool:
        return self.regex.match(path) is not None


def _compile_pattern(pattern: str) -> re.Pattern[str]:
    anchored = pattern.endswith("$")
    body = pattern[:-1] if anchored else pattern
    regex = ".*".join(re.escape(part) for part in body.split("*"))
    return re.compile(regex + ("$" if anchored else ""))


@dataclass(slots=True)
class RobotsDirectives:
    """Allow/Disallow rules of the wildcard user-agent group."""
    rules: List[RobotsRule] = field(default_factory=list)

    def can_fetch(self, url: str) -> bool:
        parsed = urlparse(url)
        path = parsed.path or "/"
        if parsed.query:
            path = f"{path}?{parsed.query}"
        if path == "/robots.txt":
            return True

        best: Optional[RobotsRule] = None
        for rule in self.rules:
            if not rule.matches(path):
                continue
            if (
                best is None
                or len(rule.pattern) > len(best.pattern)
                or (len(rule.pattern) == len(best.pattern) and rule.allow)
            ):
                best = rule
        return best is None or best.allow


def allow_all() -> RobotsDirectives:
    """Directive set used when robots.txt is unreachable or empty."""
    return RobotsDirectives()


def parse_robots(text: str) -> RobotsDirectives:
    """
    Parse robots.txt text, keeping the rules of every ``User-agent: *`` group.

    Consecutive User-agent lines open one group; the first rule line closes
    the group's agent list. Empty Disallow values allow everything and are
    dropped.
    """
    rules: List[RobotsRule] = []
    agents: List[str] = []
    in_rules = False

    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        key, value = (part.strip() for part in line.split(":", 1))
        key = key.lower()

        if key == "user-agent":
            if in_rules:
                agents, in_rules = [], False
            agents.append(value)
        elif key in ("allow", "disallow"):
            in_rules = True
            if WILDCARD_AGENT in agents and value:
                rules.append(RobotsRule(value, allow=(key == "allow")))

    return RobotsDirectives(rules)


class RobotsCache:
    """Memoized fetch-permission decisions, keyed by domain."""

    def __init__(self, session: requests.Session, timeout_s: float) -> None:
        self.session = session
        self.timeout_s = timeout_s
        self.fetch_count = 0
        self._cache: Dict[str, RobotsDirectives] = {}

    def __contains__(self, domain: str) -> bool:
        return domain in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def can_fetch(self, url: str) -> bool:
        domain = authority_of(url)
        if not domain:
            return False
        directives = self._cache.get(domain)
        if directives is None:
            directives = self._load(urlparse(url).scheme.lower(), domain)
            self._cache[domain] = directives
        return directives.can_fetch(url)

    def _load(self, scheme: str, domain: str) -> RobotsDirectives:
        robots_url = f"{scheme}://{domain}/robots.txt"
        self.fetch_count += 1
        try:
            resp = self.session.get(robots_url, timeout=self.timeout_s)
            resp.raise_for_status()
            text = resp.text
        except requests.HTTPError as e:
            logger.debug("No robots.txt at %s (%s). Allowing all.", robots_url, e)
            return allow_all()
        except requests.RequestException as e:
            logger.warning("Could not fetch %s: %s. Allowing all.", robots_url, e)
            return allow_all()

        if not text or not text.strip():
            logger.debug("Empty robots.txt at %s. Allowing all.", robots_url)
            return allow_all()

        logger.debug("Loaded robots.txt for %s", domain)
        return parse_robots(text)
