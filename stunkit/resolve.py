"""Socket addresses and host-name resolution."""

import socket
from dataclasses import dataclass, replace

from stunkit.stringhelper import trim

_FAMILIES = (socket.AF_INET, socket.AF_INET6)


@dataclass(frozen=True)
class SocketAddress:
    """An IPv4 or IPv6 address with a port."""

    family: int
    ip: str
    port: int = 0
    flowinfo: int = 0
    scope_id: int = 0

    def __post_init__(self):
        if self.family not in _FAMILIES:
            raise ValueError(f"unsupported address family {self.family!r}")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port {self.port} is out of range")

    def with_port(self, port):
        """Return a copy of this address with ``port``."""
        return replace(self, port=port)

    @property
    def packed(self):
        """The raw address bytes (4 for IPv4, 16 for IPv6)."""
        return socket.inet_pton(self.family, self.ip.split("%", 1)[0])

    def to_sockaddr(self):
        """Return the address tuple the socket module expects."""
        if self.family == socket.AF_INET:
            return (self.ip, self.port)
        return (self.ip, self.port, self.flowinfo, self.scope_id)

    @staticmethod
    def from_sockaddr(family, sockaddr):
        """Build an address from a socket-module address tuple."""
        if family == socket.AF_INET:
            host, port = sockaddr[0], sockaddr[1]
            return SocketAddress(socket.AF_INET, host, port)
        if family == socket.AF_INET6:
            host, port = sockaddr[0], sockaddr[1]
            flowinfo = sockaddr[2] if len(sockaddr) > 2 else 0
            scope_id = sockaddr[3] if len(sockaddr) > 3 else 0
            return SocketAddress(socket.AF_INET6, host, port, flowinfo, scope_id)
        raise ValueError(f"unsupported address family {family!r}")

    def __str__(self):
        if self.family == socket.AF_INET6:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"


def resolve_host_name(host, family, numeric_only=False):
    """Resolve a host name or numeric address to its first socket address.

    With ``numeric_only`` no DNS lookup is made. Raises ValueError for an
    empty name and socket.gaierror when resolution fails.
    """
    name = trim(host or "")
    if not name:
        raise ValueError("host name is empty")
    flags = socket.AI_NUMERICHOST if numeric_only else 0
    results = socket.getaddrinfo(name, None, family, socket.SOCK_STREAM, 0, flags)
    if not results:
        raise OSError(f"no addresses found for {name}")
    result_family, _, _, _, sockaddr = results[0]
    return SocketAddress.from_sockaddr(result_family, sockaddr)


def numeric_ip_to_address(family, ip):
    """Convert a numeric IP string to a SocketAddress with port 0.

    Raises ValueError for an unsupported family or an unparsable address.
    """
    if family not in _FAMILIES:
        raise ValueError(f"unsupported address family {family!r}")
    try:
        packed = socket.inet_pton(family, ip)
    except (OSError, TypeError) as exc:
        raise ValueError(f"invalid IP address {ip!r}") from exc
    return SocketAddress(family, socket.inet_ntop(family, packed))