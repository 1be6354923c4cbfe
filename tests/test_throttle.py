import pytest

from politecrawler.throttle import RateLimiter
from tests.helpers.fakes import FakeClock


def _limiter(interval: float = 1.0):
    clock = FakeClock(start=100.0)
    return RateLimiter(interval, clock=clock, sleep=clock.sleep), clock


def test_first_request_to_a_domain_does_not_wait():
    limiter, clock = _limiter()
    assert limiter.wait("https://example.com/a") == 100.0
    assert clock.sleeps == []


def test_same_domain_waits_for_the_remainder_of_the_interval():
    limiter, clock = _limiter()
    limiter.wait("https://example.com/a")
    clock.advance(0.25)

    checkpoint = limiter.wait("https://example.com/b")

    assert clock.sleeps == [pytest.approx(0.75)]
    assert checkpoint == pytest.approx(101.0)
    assert limiter.last_request["example.com"] == pytest.approx(101.0)


def test_no_wait_once_the_interval_has_passed():
    limiter, clock = _limiter()
    limiter.wait("https://example.com/a")
    clock.advance(1.5)
    limiter.wait("https://example.com/b")
    assert clock.sleeps == []


def test_domains_are_paced_independently():
    limiter, clock = _limiter()
    limiter.wait("https://example.com/a")
    limiter.wait("https://other.com/a")
    assert clock.sleeps == []
    assert set(limiter.last_request) == {"example.com", "other.com"}


def test_consecutive_checkpoints_are_at_least_one_interval_apart():
    limiter, clock = _limiter()
    for i in range(5):
        limiter.wait(f"https://example.com/{i}")
        clock.advance(0.1)

    points = limiter.checkpoints["example.com"]
    assert len(points) == 5
    assert all(b - a >= 1.0 - 1e-9 for a, b in zip(points, points[1:]))


def test_url_without_host_raises():
    limiter, _ = _limiter()
    with pytest.raises(ValueError):
        limiter.wait("mailto:someone")


def test_checkpoint_history_is_bounded():
    clock = FakeClock()
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep, history=3)
    for i in range(10):
        limiter.wait(f"https://example.com/{i}")

    assert list(limiter.checkpoints["example.com"]) == [7.0, 8.0, 9.0]
