"""Lookup of local network interfaces and their addresses."""

import ipaddress
import socket

import psutil

from stunkit.resolve import SocketAddress


class AdapterNotFoundError(LookupError):
    """Raised when no interface matches the request."""


def _scope_id(scope):
    try:
        return socket.if_nametoindex(scope)
    except OSError:
        return 0


def _to_socket_address(family, address, port):
    host, _, scope = address.partition("%")
    if family == socket.AF_INET6:
        return SocketAddress(family, host, port, 0, _scope_id(scope) if scope else 0)
    return SocketAddress(family, host, port)


def _is_loopback(stats, address):
    flags = getattr(stats, "flags", "") or ""
    if "loopback" in flags.split(","):
        return True
    try:
        return ipaddress.ip_address(address.partition("%")[0]).is_loopback
    except ValueError:
        return False


def _interfaces(family):
    """Yield (name, address, is_up, is_loopback) for every address of ``family``."""
    all_stats = psutil.net_if_stats()
    for name, addresses in psutil.net_if_addrs().items():
        stats = all_stats.get(name)
        for entry in addresses:
            if entry.family != family or not entry.address:
                continue
            is_up = bool(stats.isup) if stats is not None else False
            yield name, entry.address, is_up, _is_loopback(stats, entry.address)


def _default_adapters(family):
    candidates = [
        address
        for _, address, is_up, is_loopback in _interfaces(family)
        if is_up and not is_loopback
    ]
    return candidates[:2]


def has_at_least_two_adapters(family):
    """True when two or more up, non-loopback interfaces have ``family`` addresses."""
    try:
        return len(_default_adapters(family)) >= 2
    except OSError:
        return False


def get_best_address_for_socket_bind(primary, family, port):
    """Suggest an address to bind to: the first suitable interface, or the second."""
    adapters = _default_adapters(family)
    position = 0 if primary else 1
    if len(adapters) <= position:
        raise AdapterNotFoundError(
            f"no {'primary' if primary else 'alternate'} adapter for family {family}"
        )
    return _to_socket_address(family, adapters[position], port)


def get_socket_address_for_adapter(family, adapter_name, port):
    """Find the address of an interface given by name or by one of its IP addresses."""
    if not adapter_name:
        raise ValueError("adapter name is empty")

    entries = list(_interfaces(family))
    for name, address, _, _ in entries:
        if name == adapter_name:
            return _to_socket_address(family, address, port)

    if family in (socket.AF_INET, socket.AF_INET6):
        try:
            wanted = socket.inet_pton(family, adapter_name)
        except OSError:
            wanted = None
        if wanted is not None:
            for _, address, _, _ in entries:
                try:
                    packed = socket.inet_pton(family, address.partition("%")[0])
                except OSError:
                    continue
                if packed == wanted:
                    return _to_socket_address(family, address, port)

    raise AdapterNotFoundError(f"no adapter matches {adapter_name!r}")