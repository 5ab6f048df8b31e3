"""Networking building blocks: byte streams, buffers, network-order parsing, sockets, TUN/TAP handles and a poll-based event loop."""

__version__ = "0.1.0"