# stunkit

Building blocks for writing STUN clients and servers in Python on POSIX
systems: bound sockets that track their addresses, receiving datagrams
with their destination address, readiness polling, interface and host-name
lookup, per-address rate limiting, and a few console helpers.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

- `stunkit.stringhelper`: `is_null_or_empty`, `to_lower` (ASCII letters
  only), `trim` (a string of only whitespace comes back unchanged),
  `parse_int_prefix` (reads a leading integer like C's `atoi`, 0 when there
  is none) and `validate_number_string`, which raises `ValueError` for an
  empty string or a number outside the given range.
- `stunkit.logger`: a process-wide log level (`LogLevel`, `get_log_level`,
  `set_log_level`, which rejects negative levels) and `log_msg`, which
  prints a printf-style message to stdout when its level is at or below the
  current one.
- `stunkit.oshelper`: `get_millisecond_counter` (wall-clock milliseconds
  truncated to 32 bits) and `get_console_width` (the terminal width of
  stdin, 80 when unknown).
- `stunkit.prettyprint`: word-wraps text to a width, keeping each
  paragraph's leading indent: `split_paragraphs`, `wrap_paragraph`,
  `pretty_lines` and `pretty_print`.
- `stunkit.cmdlineparser`: `CmdLineParser` accepts options written with one
  or two dashes, matched by full name or an unambiguous prefix, plus named
  positional arguments. `parse` returns a `ParseResult` whose `values` maps
  names to strings (an option without an argument gets `"1"`) and whose
  `error` flag is set for unknown options or missing arguments. `ArgKind`
  says whether an option takes an argument.
- `stunkit.fasthash`: `FastHash`, a fixed-capacity hash table with access by
  position, raising `TableFullError` when full; also `find_prime`,
  `get_hash_table_width` and `fast_hash`.
- `stunkit.ratelimiter`: `RateLimiter` tracks requests per IP address in a
  `RateTracker` and refuses an address for an hour once it reaches 3600
  requests per hour (after at least 60 requests). The table is cleared when
  it fills up.
- `stunkit.resolve`: `SocketAddress` (a frozen IPv4/IPv6 address and port,
  with `with_port`, `to_sockaddr` and `from_sockaddr`),
  `resolve_host_name` and `numeric_ip_to_address`.
- `stunkit.adapters`: picks local interface addresses with
  `has_at_least_two_adapters`, `get_best_address_for_socket_bind` and
  `get_socket_address_for_adapter` (by interface name or by IP address);
  the last two raise `AdapterNotFoundError` when nothing matches.
- `stunkit.recvfromex`: `recvfromex(sock, bufsize, flags=0)` returns a
  `ReceivedDatagram` with the data, the sender and the local IP address the
  datagram arrived on (known when packet-info reporting is enabled).
- `stunkit.stunsocket`: `StunSocket` creates a bound UDP or TCP socket
  (`udp_init`, `tcp_init`), keeps `local_address` and `remote_address`
  up to date, can enable packet-info reporting, and closes its socket when
  used as a context manager.
- `stunkit.polling`: `create_polling_instance` returns a `PollPoller` or
  `EpollPoller` (`PollingType.BEST` chooses epoll where available) whose
  `wait_for_next_event` hands back one `PollEvent` at a time, or `None` on
  timeout. Event flags are `PollFlag` values.

## Examples

```python
from stunkit.cmdlineparser import ArgKind, CmdLineParser
from stunkit.prettyprint import pretty_print

parser = CmdLineParser()
parser.add_non_option("server")
parser.add_option("mode", ArgKind.REQUIRED)
parser.add_option("help", ArgKind.NONE)

result = parser.parse(["stun.example.com", "--mode", "full"])
# result.values == {"mode": "full", "server": "stun.example.com"}

pretty_print("A paragraph of text that will be wrapped to the width given.", 30)
```

```python
from stunkit.ratelimiter import RateLimiter

limiter = RateLimiter(1000)
if limiter.rate_check("192.0.2.10"):
    ...  # handle the request
```

```python
import socket

from stunkit.polling import PollFlag, PollingType, create_polling_instance
from stunkit.resolve import SocketAddress
from stunkit.stunsocket import StunSocket

with StunSocket() as stun_socket, create_polling_instance(PollingType.BEST, 16) as poller:
    stun_socket.udp_init(SocketAddress(socket.AF_INET, "127.0.0.1", 0))
    poller.add(stun_socket.fileno(), PollFlag.READ)
    event = poller.wait_for_next_event(500)  # None if nothing arrived
```

## What this package does not do

stunkit has no STUN message encoding or decoding, no NAT behaviour or
filtering tests, and no ready-made STUN client or server command. It
provides the networking pieces such programs are built from.