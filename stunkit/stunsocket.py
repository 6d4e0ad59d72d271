"""A bound UDP or TCP socket that remembers its local and remote addresses."""

import socket
import sys

from stunkit.resolve import SocketAddress

_IP_PKTINFO = getattr(
    socket, "IP_PKTINFO", 8 if sys.platform.startswith("linux") else None
)
_IP_RECVDSTADDR = getattr(socket, "IP_RECVDSTADDR", None)
_IPV6_RECVPKTINFO = getattr(socket, "IPV6_RECVPKTINFO", None)
_IPV6_PKTINFO = getattr(socket, "IPV6_PKTINFO", None)
_IPV6_V6ONLY = getattr(socket, "IPV6_V6ONLY", None)

_INET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def _address_of(family, query):
    """Return the SocketAddress reported by ``query``, or None if unavailable."""
    if family not in _INET_FAMILIES:
        return None
    try:
        return SocketAddress.from_sockaddr(family, query())
    except (OSError, ValueError):
        return None


class StunSocket:
    """Owns one socket together with its role and its cached addresses.

    The role is an opaque value supplied by the caller. Addresses are
    refreshed by ``update_addresses`` and after ``attach``.
    """

    def __init__(self):
        self._sock = None
        self.role = None
        self._reset()

    def _reset(self):
        self._sock = None
        self.local_address = SocketAddress(socket.AF_INET, "0.0.0.0", 0)
        self.remote_address = SocketAddress(socket.AF_INET, "0.0.0.0", 0)
        self.role = None

    @property
    def sock(self):
        """The underlying socket object, or None."""
        return self._sock

    @property
    def is_valid(self):
        """True while a socket is held."""
        return self._sock is not None

    def close(self):
        """Close the held socket, if any, and forget all state."""
        if self._sock is not None:
            self._sock.close()
        self._reset()

    def attach(self, sock):
        """Take ownership of ``sock``, closing any other socket held before."""
        if sock is None:
            raise ValueError("no socket to attach")
        if sock is not self._sock:
            self.close()
            self._sock = sock
        self.update_addresses()

    def detach(self):
        """Give up ownership of the socket without closing it and return it."""
        sock = self._sock
        self._reset()
        return sock

    def fileno(self):
        """Return the socket's file descriptor, or -1 when none is held."""
        return self._sock.fileno() if self._sock is not None else -1

    def _require_socket(self):
        if self._sock is None:
            raise OSError("socket is not initialized")
        return self._sock

    def _enable_pkt_info(self, level, options, enable):
        sock = self._require_socket()
        candidates = [option for option in options if option is not None]
        if not candidates:
            raise OSError("packet info reporting is not supported on this platform")
        error = None
        for option in candidates:
            try:
                sock.setsockopt(level, option, 1 if enable else 0)
                return
            except OSError as exc:
                error = exc
        raise error

    def enable_pkt_info_option(self, enable):
        """Ask the socket to report the destination address of received packets."""
        if self.local_address.family == socket.AF_INET:
            self._enable_pkt_info(
                socket.IPPROTO_IP, (_IP_PKTINFO, _IP_RECVDSTADDR), enable
            )
        else:
            self._enable_pkt_info(
                socket.IPPROTO_IPV6, (_IPV6_RECVPKTINFO, _IPV6_PKTINFO), enable
            )

    def set_non_blocking(self, enable):
        """Switch the socket between blocking and non-blocking mode."""
        self._require_socket().setblocking(not enable)

    def update_addresses(self):
        """Refresh the cached local and remote addresses from the socket."""
        sock = self._sock
        if sock is None:
            return
        local = _address_of(sock.family, sock.getsockname)
        if local is not None:
            self.local_address = local
        remote = _address_of(sock.family, sock.getpeername)
        if remote is not None:
            self.remote_address = remote

    def _init_common(self, socktype, local, role, reuse):
        sock = socket.socket(local.family, socktype, 0)
        try:
            if local.family == socket.AF_INET6 and _IPV6_V6ONLY is not None:
                # Keep IPv4 clients off IPv6 sockets so they never see mapped addresses.
                try:
                    sock.setsockopt(socket.IPPROTO_IPV6, _IPV6_V6ONLY, 1)
                except OSError:
                    pass
            if reuse:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(local.to_sockaddr())
        except BaseException:
            sock.close()
            raise
        self.attach(sock)
        self.role = role

    def udp_init(self, local, role=None, reuse=False):
        """Create a UDP socket bound to ``local``."""
        self._init_common(socket.SOCK_DGRAM, local, role, reuse)

    def tcp_init(self, local, role=None, reuse=False):
        """Create a TCP socket bound to ``local``."""
        self._init_common(socket.SOCK_STREAM, local, role, reuse)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False