"""Receiving datagrams together with the local address they were sent to."""

import socket
import sys
from dataclasses import dataclass

from stunkit.resolve import SocketAddress

_ANCILLARY_BUFSIZE = 1000

_IP_PKTINFO = getattr(
    socket, "IP_PKTINFO", 8 if sys.platform.startswith("linux") else None
)
_IP_RECVDSTADDR = getattr(socket, "IP_RECVDSTADDR", None)
_IPV6_PKTINFO = getattr(socket, "IPV6_PKTINFO", None)


@dataclass(frozen=True)
class ReceivedDatagram:
    """A datagram, who sent it and the local address it arrived on.

    The destination carries only the IP address; its port is 0.
    """

    data: bytes
    source: SocketAddress
    destination: SocketAddress


def _unspecified(family):
    any_ip = "::" if family == socket.AF_INET6 else "0.0.0.0"
    return SocketAddress(family, any_ip)


def _destination_from_ancillary(family, ancdata):
    for level, kind, data in ancdata:
        if level == socket.IPPROTO_IPV6 and kind == _IPV6_PKTINFO and len(data) >= 16:
            return SocketAddress(socket.AF_INET6, socket.inet_ntop(socket.AF_INET6, data[:16]))
        if level == socket.IPPROTO_IP and _IP_PKTINFO is not None and kind == _IP_PKTINFO:
            # in_pktinfo: ifindex, spec_dst, addr
            if len(data) >= 12:
                return SocketAddress(socket.AF_INET, socket.inet_ntop(socket.AF_INET, data[8:12]))
        if level == socket.IPPROTO_IP and _IP_RECVDSTADDR is not None and kind == _IP_RECVDSTADDR:
            if len(data) >= 4:
                return SocketAddress(socket.AF_INET, socket.inet_ntop(socket.AF_INET, data[:4]))
    return _unspecified(family)


def recvfromex(sock, bufsize, flags=0):
    """Receive one datagram from ``sock`` with its source and destination addresses.

    The destination is known only when packet-info reporting is enabled on
    the socket; otherwise it is the unspecified address of the socket's family.
    Socket errors propagate as OSError.
    """
    data, ancdata, _, address = sock.recvmsg(bufsize, _ANCILLARY_BUFSIZE, flags)
    family = sock.family
    source = SocketAddress.from_sockaddr(family, address) if address else None
    destination = _destination_from_ancillary(family, ancdata)
    return ReceivedDatagram(data, source, destination)