"""Fetch a URL over HTTP and print everything the server sends back."""

from __future__ import annotations

import socket
import sys
from typing import BinaryIO

from sponge.address import Address
from sponge.sockets import TCPSocket


def get_url(host: str, path: str, out: BinaryIO | None = None) -> None:
    """Send a GET for ``path`` to ``host``'s http service and copy the reply to ``out``."""
    if out is None:
        out = sys.stdout.buffer
    sock = TCPSocket()
    try:
        sock.connect(Address.resolve(host, "http"))
        sock.write(f"GET {path} HTTP/1.1\r\n".encode())
        sock.write(f"HOST: {host}\r\n".encode())
        sock.write(b"Connection: close\r\n")
        sock.write(b"\r\n")
        sock.shutdown(socket.SHUT_WR)
        while not sock.eof():
            out.write(sock.read())
        out.flush()
    finally:
        if not sock.closed():
            sock.close()


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point: ``webget HOST PATH``."""
    if argv is None:
        argv = sys.argv[1:]
    program = "webget"
    if len(argv) != 2:
        print(f"Usage: {program} HOST PATH", file=sys.stderr)
        print(f"\tExample: {program} stanford.edu /class/cs144", file=sys.stderr)
        return 1
    host, path = argv
    try:
        get_url(host, path)
    except Exception as exc:  # noqa: BLE001 - report any failure and exit non-zero
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())