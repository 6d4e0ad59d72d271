import ipaddress

import pytest

from stunkit.ratelimiter import RateLimiter, RateTracker


class FakeClock:
    def __init__(self, now=1000):
        self.now = now

    def __call__(self):
        return self.now


def _limiter(size=100):
    clock = FakeClock()
    return RateLimiter(size, clock=clock), clock


def test_get_time_uses_clock():
    limiter, clock = _limiter()
    clock.now = 4242.7
    assert limiter.get_time() == 4242


def test_get_rate_below_minimum_is_zero():
    limiter, _ = _limiter()
    tracker = RateTracker(count=59, first_entry_time=0, last_entry_time=0)
    assert limiter.get_rate(tracker) == 0


def test_get_rate_same_second_uses_one_second():
    limiter, _ = _limiter()
    tracker = RateTracker(count=60, first_entry_time=10, last_entry_time=10)
    assert limiter.get_rate(tracker) == 60 * 3600


def test_get_rate_over_an_hour():
    limiter, _ = _limiter()
    tracker = RateTracker(count=3600, first_entry_time=0, last_entry_time=3600)
    assert limiter.get_rate(tracker) == RateLimiter.MAX_RATE


def test_first_request_allowed_and_tracked():
    limiter, _ = _limiter()
    assert limiter.rate_check("10.0.0.1") is True
    assert len(limiter.table) == 1


def test_flood_gets_penalized():
    limiter, _ = _limiter()
    results = [limiter.rate_check("10.0.0.1") for _ in range(60)]
    assert all(results[:59])
    assert results[59] is False
    assert limiter.rate_check("10.0.0.2") is True


def test_penalty_lasts_until_penalty_time_then_parole():
    limiter, clock = _limiter()
    start = clock.now
    for _ in range(60):
        limiter.rate_check("192.0.2.5")
    clock.now = start + RateLimiter.PENALTY_TIME_SECONDS
    assert limiter.rate_check("192.0.2.5") is False
    clock.now = start + RateLimiter.PENALTY_TIME_SECONDS + 1
    assert limiter.rate_check("192.0.2.5") is True
    assert limiter.rate_check("192.0.2.5") is True


def test_address_forms_share_a_key():
    limiter, _ = _limiter()
    limiter.rate_check("192.0.2.9")
    limiter.rate_check(("192.0.2.9", 3478))
    limiter.rate_check(ipaddress.ip_address("192.0.2.9"))
    assert len(limiter.table) == 1
    assert limiter.table.lookup_value_by_index(0).count == 3


def test_ipv6_addresses_tracked():
    limiter, _ = _limiter()
    assert limiter.rate_check("2001:db8::1") is True
    assert limiter.rate_check("2001:db8::2") is True
    assert len(limiter.table) == 2


def test_good_citizen_removed_after_reset_interval():
    limiter, clock = _limiter()
    start = clock.now
    for step in range(13):
        clock.now = start + step * 10
        assert limiter.rate_check("198.51.100.7") is True
    assert len(limiter.table) == 1
    clock.now = start + 130
    assert limiter.rate_check("198.51.100.7") is True
    assert len(limiter.table) == 0


def test_full_table_is_reset():
    limiter, _ = _limiter(size=2)
    assert limiter.rate_check("10.0.0.1") is True
    assert limiter.rate_check("10.0.0.2") is True
    assert limiter.rate_check("10.0.0.3") is True
    assert len(limiter.table) == 1
    assert limiter.table.lookup_value_by_index(0).count == 1


def test_locked_limiter_behaves_the_same():
    limiter = RateLimiter(10, using_lock=True, clock=FakeClock())
    results = [limiter.rate_check("10.1.1.1") for _ in range(60)]
    assert results.count(False) == 1
    assert results[-1] is False


def test_invalid_address_raises():
    limiter, _ = _limiter()
    with pytest.raises(ValueError):
        limiter.rate_check("not an address")