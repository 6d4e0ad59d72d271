"""Per-address request rate limiting with a penalty period."""

import contextlib
import ipaddress
import threading
import time
from dataclasses import dataclass

from stunkit.fasthash import FastHash, TableFullError


@dataclass
class RateTracker:
    """Request history of one address."""

    count: int = 0
    first_entry_time: int = 0
    last_entry_time: int = 0
    penalty_time: int = 0


def _address_key(address):
    if isinstance(address, tuple):
        address = address[0]
    if not isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        address = ipaddress.ip_address(address)
    return address.packed.ljust(16, b"\0")


class RateLimiter:
    """Tracks request counts per IP address and refuses addresses that flood.

    An address sending at or above MAX_RATE requests per hour (once it has
    sent at least MIN_COUNT_FOR_CONSIDERATION) is refused for
    PENALTY_TIME_SECONDS. When the table fills up it is cleared.
    """

    MAX_RATE = 3600
    MIN_COUNT_FOR_CONSIDERATION = 60
    RESET_INTERVAL_SECONDS = 120
    PENALTY_TIME_SECONDS = 3600

    def __init__(self, tablesize, using_lock=False, clock=None):
        self.table = FastHash(tablesize, tablesize // 2)
        self._lock = threading.Lock() if using_lock else contextlib.nullcontext()
        self._clock = clock if clock is not None else time.time

    def get_time(self):
        """Return the current time in whole seconds."""
        return int(self._clock())

    def get_rate(self, tracker):
        """Return the hourly request rate of ``tracker``, 0 if too few requests."""
        if tracker.count < self.MIN_COUNT_FOR_CONSIDERATION:
            return 0
        seconds = 1
        if tracker.last_entry_time > tracker.first_entry_time:
            seconds = tracker.last_entry_time - tracker.first_entry_time
        return (tracker.count * 3600) // seconds

    def rate_check(self, address):
        """Record a request from ``address``; return True if it is allowed."""
        with self._lock:
            return self._rate_check(address)

    def _rate_check(self, address):
        key = _address_key(address)
        now = self.get_time()
        tracker = self.table.lookup(key)

        if tracker is None:
            tracker = RateTracker(count=1, first_entry_time=now, last_entry_time=now)
            try:
                self.table.insert(key, tracker)
            except TableFullError:
                self.table.reset()
                self.table.insert(key, tracker)
            return True

        tracker.count += 1
        tracker.last_entry_time = now
        rate = self.get_rate(tracker)

        if tracker.penalty_time != 0:
            if tracker.penalty_time >= now:
                return False
            if rate < self.MAX_RATE:
                tracker.penalty_time = 0
                return True
            tracker.penalty_time = now + self.PENALTY_TIME_SECONDS
            return False

        if rate >= self.MAX_RATE:
            tracker.penalty_time = now + self.PENALTY_TIME_SECONDS
            return False

        if tracker.last_entry_time - tracker.first_entry_time > self.RESET_INTERVAL_SECONDS:
            self.table.remove(key)

        return True