import select
import socket

import pytest

from stunkit.fasthash import TableFullError
from stunkit.polling import (
    EpollPoller,
    PollEvent,
    PollFlag,
    PollingType,
    PollPoller,
    create_polling_instance,
)

KINDS = [PollingType.POLL] + ([PollingType.EPOLL] if hasattr(select, "epoll") else [])


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


@pytest.fixture
def pair2():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


def test_raw_flag_values_match_header(pair):
    a, b = pair
    with create_polling_instance(4, 10) as poller:
        assert type(poller) is PollPoller
        poller.add(a.fileno(), 1)
        b.send(b"x")
        event = poller.wait_for_next_event(1000)
        assert event.fd == a.fileno()
        assert event.eventflags & 1
        assert not event.eventflags & 64
        poller.change_event_set(a.fileno(), 2)
        a.recv(1)
        event = poller.wait_for_next_event(1000)
        assert event.eventflags & 2


@pytest.mark.parametrize("kind", KINDS)
def test_timeout_returns_none(kind, pair):
    with create_polling_instance(kind, 10) as poller:
        poller.add(pair[0].fileno(), PollFlag.READ)
        assert poller.wait_for_next_event(10) is None


@pytest.mark.parametrize("kind", KINDS)
def test_read_event(kind, pair):
    a, b = pair
    with create_polling_instance(kind, 10) as poller:
        poller.add(a.fileno(), PollFlag.READ)
        b.send(b"x")
        event = poller.wait_for_next_event(1000)
        assert event.fd == a.fileno()
        assert event.eventflags & PollFlag.READ


@pytest.mark.parametrize("kind", KINDS)
def test_accepts_socket_object(kind, pair):
    a, b = pair
    with create_polling_instance(kind, 10) as poller:
        poller.add(a, PollFlag.WRITE)
        event = poller.wait_for_next_event(1000)
        assert event == PollEvent(a.fileno(), event.eventflags)
        assert event.eventflags & PollFlag.WRITE


@pytest.mark.parametrize("kind", KINDS)
def test_remove_stops_events(kind, pair):
    a, b = pair
    with create_polling_instance(kind, 10) as poller:
        poller.add(a.fileno(), PollFlag.READ)
        poller.add(b.fileno(), PollFlag.READ)
        poller.remove(a.fileno())
        b.send(b"x")
        assert poller.wait_for_next_event(10) is None


@pytest.mark.parametrize("kind", KINDS)
def test_change_event_set(kind, pair):
    a, _ = pair
    with create_polling_instance(kind, 10) as poller:
        poller.add(a.fileno(), PollFlag.READ)
        assert poller.wait_for_next_event(10) is None
        poller.change_event_set(a.fileno(), PollFlag.WRITE)
        event = poller.wait_for_next_event(1000)
        assert event.fd == a.fileno()
        assert event.eventflags & PollFlag.WRITE


@pytest.mark.parametrize("kind", KINDS)
def test_multiple_ready_fds_all_reported(kind, pair, pair2):
    a, b = pair
    c, d = pair2
    with create_polling_instance(kind, 10) as poller:
        poller.add(a.fileno(), PollFlag.READ)
        poller.add(c.fileno(), PollFlag.READ)
        b.send(b"x")
        d.send(b"y")
        first = poller.wait_for_next_event(1000)
        second = poller.wait_for_next_event(1000)
        assert {first.fd, second.fd} == {a.fileno(), c.fileno()}


@pytest.mark.parametrize("kind", KINDS)
def test_closed_poller_raises(kind, pair):
    poller = create_polling_instance(kind, 10)
    poller.close()
    with pytest.raises(RuntimeError):
        poller.add(pair[0].fileno(), PollFlag.READ)
    with pytest.raises(RuntimeError):
        poller.wait_for_next_event(0)


@pytest.mark.parametrize("kind", KINDS)
def test_negative_fd_rejected(kind):
    with create_polling_instance(kind, 10) as poller:
        with pytest.raises(ValueError):
            poller.add(-1, PollFlag.READ)


def test_poll_duplicate_add_raises(pair):
    with PollPoller(10) as poller:
        poller.add(pair[0].fileno(), PollFlag.READ)
        with pytest.raises(ValueError):
            poller.add(pair[0].fileno(), PollFlag.READ)


def test_poll_remove_unknown_raises(pair):
    with PollPoller(10) as poller:
        with pytest.raises(KeyError):
            poller.remove(pair[0].fileno())
        poller.add(pair[0].fileno(), PollFlag.READ)
        with pytest.raises(KeyError):
            poller.change_event_set(pair[1].fileno(), PollFlag.READ)


def test_poll_capacity_limit(pair):
    with PollPoller(1) as poller:
        poller.add(pair[0].fileno(), PollFlag.READ)
        with pytest.raises(TableFullError):
            poller.add(pair[1].fileno(), PollFlag.READ)


def test_poll_empty_returns_none():
    with PollPoller(4) as poller:
        assert poller.wait_for_next_event(-1) is None


def test_poll_remove_keeps_other_fd_working(pair, pair2):
    a, b = pair
    c, d = pair2
    with PollPoller(10) as poller:
        poller.add(a.fileno(), PollFlag.READ)
        poller.add(c.fileno(), PollFlag.READ)
        poller.remove(a.fileno())
        d.send(b"z")
        event = poller.wait_for_next_event(1000)
        assert event.fd == c.fileno()


def test_create_best_picks_epoll_when_available(pair):
    a, b = pair
    expected = EpollPoller if hasattr(select, "epoll") else PollPoller
    with create_polling_instance(PollingType.BEST, 4) as poller:
        assert type(poller) is expected
        poller.add(a.fileno(), PollFlag.READ)
        b.send(b"x")
        event = poller.wait_for_next_event(1000)
        assert event.fd == a.fileno()
        assert event.eventflags & PollFlag.READ


def test_create_unknown_type_raises():
    with pytest.raises(ValueError):
        create_polling_instance(99, 4)