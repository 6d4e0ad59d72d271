"""Waiting for readiness events on many file descriptors, one event at a time."""

import abc
import select
from dataclasses import dataclass
from enum import IntEnum, IntFlag

from stunkit.fasthash import TableFullError


class PollFlag(IntFlag):
    """Portable event flags, independent of the polling mechanism underneath."""

    NONE = 0
    READ = 0x01 << 0
    WRITE = 0x01 << 1
    EDGETRIGGER = 0x01 << 2
    RDHUP = 0x01 << 3
    HUP = 0x01 << 4
    PRI = 0x01 << 5
    ERROR = 0x01 << 6


class PollingType(IntEnum):
    """Which polling mechanism to create."""

    BEST = 0x01 << 0
    EPOLL = 0x01 << 1
    POLL = 0x01 << 2


@dataclass(frozen=True)
class PollEvent:
    """One readiness notification for a file descriptor."""

    fd: int
    eventflags: PollFlag


def _fd_of(fd):
    if hasattr(fd, "fileno"):
        fd = fd.fileno()
    fd = int(fd)
    if fd < 0:
        raise ValueError(f"invalid file descriptor {fd}")
    return fd


def _to_native(eventflags, table):
    flags = PollFlag(eventflags)
    native = 0
    for portable, bit in table:
        if bit is not None and flags & portable:
            native |= bit
    return native


def _from_native(native, table):
    result = PollFlag.NONE
    for portable, bit in table:
        if bit is not None and native & bit:
            result |= portable
    return result


_POLL_TABLE = (
    (PollFlag.READ, getattr(select, "POLLIN", None)),
    (PollFlag.WRITE, getattr(select, "POLLOUT", None)),
    (PollFlag.RDHUP, getattr(select, "POLLRDHUP", None)),
    (PollFlag.HUP, getattr(select, "POLLHUP", None)),
    (PollFlag.PRI, getattr(select, "POLLPRI", None)),
    (PollFlag.ERROR, getattr(select, "POLLERR", None)),
)

_EPOLL_TABLE = (
    (PollFlag.READ, getattr(select, "EPOLLIN", None)),
    (PollFlag.WRITE, getattr(select, "EPOLLOUT", None)),
    (PollFlag.EDGETRIGGER, getattr(select, "EPOLLET", None)),
    (PollFlag.RDHUP, getattr(select, "EPOLLRDHUP", None)),
    (PollFlag.HUP, getattr(select, "EPOLLHUP", None)),
    (PollFlag.PRI, getattr(select, "EPOLLPRI", None)),
    (PollFlag.ERROR, getattr(select, "EPOLLERR", None)),
)


class Poller(abc.ABC):
    """Common interface of the polling mechanisms.

    ``wait_for_next_event`` returns a single PollEvent, or None when the
    timeout expires (or nothing is registered, for the poll mechanism).
    """

    @abc.abstractmethod
    def close(self):
        """Release the poller; further use raises RuntimeError."""

    @abc.abstractmethod
    def add(self, fd, eventflags):
        """Start watching ``fd`` for ``eventflags``."""

    @abc.abstractmethod
    def remove(self, fd):
        """Stop watching ``fd``."""

    @abc.abstractmethod
    def change_event_set(self, fd, eventflags):
        """Replace the events watched on ``fd``."""

    @abc.abstractmethod
    def wait_for_next_event(self, timeout_ms):
        """Return the next event, waiting up to ``timeout_ms`` (negative: forever)."""

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False


class PollPoller(Poller):
    """Poller built on poll(); pending events are handed out in rotating order."""

    def __init__(self, max_sockets):
        if not hasattr(select, "poll"):
            raise OSError("poll() is not available on this platform")
        self._max_sockets = max_sockets
        self._poll = select.poll()
        self._fds = []
        self._positions = {}
        self._pending = {}
        self._rotation = 0
        self._initialized = True

    def _require_open(self):
        if not self._initialized:
            raise RuntimeError("poller is closed")

    def close(self):
        for fd in self._fds:
            self._poll.unregister(fd)
        self._fds.clear()
        self._positions.clear()
        self._pending.clear()
        self._initialized = False

    def add(self, fd, eventflags):
        self._require_open()
        fd = _fd_of(fd)
        if fd in self._positions:
            raise ValueError(f"file descriptor {fd} is already registered")
        if len(self._fds) >= self._max_sockets:
            raise TableFullError(f"poller is full ({self._max_sockets} sockets)")
        self._poll.register(fd, _to_native(eventflags, _POLL_TABLE))
        self._positions[fd] = len(self._fds)
        self._fds.append(fd)

    def _position_of(self, fd):
        self._require_open()
        fd = _fd_of(fd)
        if fd not in self._positions:
            raise KeyError(fd)
        return fd, self._positions[fd]

    def remove(self, fd):
        fd, pos = self._position_of(fd)
        del self._positions[fd]
        last = self._fds.pop()
        if pos < len(self._fds):
            self._fds[pos] = last
            self._positions[last] = pos
        self._poll.unregister(fd)
        self._pending.pop(fd, None)

    def change_event_set(self, fd, eventflags):
        fd, _ = self._position_of(fd)
        self._poll.modify(fd, _to_native(eventflags, _POLL_TABLE))

    def _find_next_event(self):
        if not self._pending:
            return None
        size = len(self._fds)
        if self._rotation >= size:
            self._rotation = 0
        for offset in range(size):
            fd = self._fds[(offset + self._rotation) % size]
            revents = self._pending.pop(fd, 0)
            if revents:
                self._rotation += 1
                return PollEvent(fd, _from_native(revents, _POLL_TABLE))
        return None

    def wait_for_next_event(self, timeout_ms):
        self._require_open()
        if not self._fds:
            return None
        event = self._find_next_event()
        if event is not None:
            return event
        self._pending.clear()
        results = self._poll.poll(timeout_ms if timeout_ms >= 0 else None)
        self._pending = {
            fd: revents
            for fd, revents in results
            if revents and fd in self._positions
        }
        return self._find_next_event()


class EpollPoller(Poller):
    """Poller built on epoll; events from one wait are buffered and handed out in order."""

    def __init__(self, max_sockets):
        if not hasattr(select, "epoll"):
            raise OSError("epoll is not available on this platform")
        if max_sockets <= 0:
            raise ValueError("max_sockets must be positive")
        self._max_sockets = max_sockets
        self._epoll = select.epoll()
        self._pending = []
        self._current = 0

    def _require_open(self):
        if self._epoll is None or self._epoll.closed:
            raise RuntimeError("poller is closed")
        return self._epoll

    def close(self):
        if self._epoll is not None:
            self._epoll.close()
            self._epoll = None
        self._pending = []
        self._current = 0

    def add(self, fd, eventflags):
        fd = _fd_of(fd)
        self._require_open().register(fd, _to_native(eventflags, _EPOLL_TABLE))

    def remove(self, fd):
        fd = _fd_of(fd)
        self._require_open().unregister(fd)

    def change_event_set(self, fd, eventflags):
        fd = _fd_of(fd)
        self._require_open().modify(fd, _to_native(eventflags, _EPOLL_TABLE))

    def wait_for_next_event(self, timeout_ms):
        epoll = self._require_open()
        if self._current >= len(self._pending):
            self._current = 0
            self._pending = []
            timeout = -1 if timeout_ms < 0 else timeout_ms / 1000.0
            self._pending = epoll.poll(timeout, self._max_sockets)
            if not self._pending:
                return None
        fd, native = self._pending[self._current]
        self._current += 1
        return PollEvent(fd, _from_native(native, _EPOLL_TABLE))


def create_polling_instance(polling_type, max_sockets):
    """Create a poller of ``polling_type``; BEST picks epoll where it exists."""
    polling_type = int(polling_type)
    if polling_type == PollingType.BEST:
        polling_type = PollingType.EPOLL if hasattr(select, "epoll") else PollingType.POLL
    if polling_type == PollingType.EPOLL:
        return EpollPoller(max_sockets)
    if polling_type == PollingType.POLL:
        return PollPoller(max_sockets)
    raise ValueError(f"unknown polling type {polling_type!r}")