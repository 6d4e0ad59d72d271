"""Networking building blocks for STUN clients and servers: sockets, polling, address lookup, rate limiting and console helpers."""

__version__ = "0.1.0"