"""
Per-domain request pacing.
"""
from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from politecrawler.links import authority_of

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforce a minimum interval between requests to the same domain.

    The checkpoint is recorded when the check completes, before the fetch
    starts, so slow responses do not open a window for a second request.
    """

    def __init__(
        self,
        min_interval_s: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        history: int = 16,
    ) -> None:
        self.min_interval_s = min_interval_s
        self.clock = clock
        self.sleep = sleep
        self.last_request: Dict[str, float] = {}
        # Most recent checkpoints per domain, newest last
        self.checkpoints: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=history))

    def wait(self, url: str) -> float:
        """Block until the URL's domain may be fetched again; return the new checkpoint."""
        domain = authority_of(url)
        if not domain:
            raise ValueError(f"URL has no host: {url!r}")

        last = self.last_request.get(domain)
        if last is not None:
            elapsed = self.clock() - last
            if elapsed < self.min_interval_s:
                delay = self.min_interval_s - elapsed
                logger.debug("Throttling %s for %.3fs", domain, delay)
                self.sleep(delay)

        now = self.clock()
        self.last_request[domain] = now
        self.checkpoints[domain].append(now)
        return now
