"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from sponge.util import TaggedError


def _lookup(node: str, service: str, flags: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(
            f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)
        ) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address: an IPv4 address and port, or another family's raw address.

    ``Address(ip, port)`` takes a dotted-quad string and never consults DNS;
    ``Address.resolve`` looks up host and service names.
    """

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        family, sockaddr = _lookup(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )
        self._family, self._sockaddr = family, self._normalise(family, sockaddr)

    @staticmethod
    def _normalise(family: int, sockaddr: Any) -> Any:
        if family == socket.AF_INET:
            host, port = sockaddr[:2]
            return (str(host), int(port))
        if family == socket.AF_INET6:
            return tuple(sockaddr)
        return sockaddr

    @classmethod
    def _from_sockaddr(cls, family: int, sockaddr: Any) -> Address:
        """Wrap an address as returned by the socket module for ``family``."""
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = cls._normalise(family, sockaddr)
        return address

    @classmethod
    def resolve(cls, hostname: str, service: str | int) -> Address:
        """Resolve a host name and a service name (e.g. "http") or number."""
        family, sockaddr = _lookup(hostname, str(service), socket.AI_ALL)
        return cls._from_sockaddr(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """An IPv4 address (port 0) from its 32-bit numeric value."""
        return cls._from_sockaddr(
            socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0)
        )

    def ip_port(self) -> tuple[str, int]:
        """The numeric IP address string and the port number."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError(
                "getnameinfo", socket.EAI_FAMILY, "ai_family not supported"
            )
        host, port = self._sockaddr[:2]
        return host, port

    def ip(self) -> str:
        """The numeric IP address string, e.g. "18.243.0.1"."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def sockaddr(self) -> Any:
        """The address in the form the socket module's calls accept."""
        return self._sockaddr

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address(family={self._family!r}, sockaddr={self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))