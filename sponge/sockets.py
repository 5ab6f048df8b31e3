"""Network sockets built on reference-counted file descriptors."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sponge.address import Address
from sponge.buffer import Buffer, BufferList, BufferViewList, BytesLike
from sponge.file_descriptor import FileDescriptor
from sponge.util import TaggedError, UnixError

Payload = BufferViewList | BufferList | Buffer | BytesLike

_DEFAULT_MTU = 65536


@contextmanager
def _system_call(attempt: str) -> Iterator[None]:
    try:
        yield
    except TaggedError:
        raise
    except OSError as exc:
        raise UnixError(attempt, exc.errno or 0) from exc


def _as_views(payload: Payload) -> BufferViewList:
    return payload if isinstance(payload, BufferViewList) else BufferViewList(payload)


class Socket(FileDescriptor):
    """Base class for network sockets; use one of the subclasses.

    With ``fd`` given, the socket takes over that descriptor after checking
    that its domain and type are the ones expected.
    """

    def __init__(
        self, domain: int, sock_type: int, fd: FileDescriptor | None = None
    ) -> None:
        if fd is None:
            with _system_call("socket"):
                number = socket.socket(domain, sock_type).detach()
            super().__init__(number)
            return
        self._internal = fd._internal
        with self._borrowed("getsockopt") as sock:
            if hasattr(socket, "SO_DOMAIN"):
                actual_domain = sock.getsockopt(socket.SOL_SOCKET, socket.SO_DOMAIN)
            else:
                actual_domain = int(sock.family)
            actual_type = sock.getsockopt(socket.SOL_SOCKET, socket.SO_TYPE)
        if actual_domain != domain:
            raise RuntimeError("socket domain mismatch")
        if actual_type != sock_type:
            raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrowed(self, attempt: str) -> Iterator[socket.socket]:
        """A socket object over this descriptor that does not own it."""
        with _system_call(attempt):
            sock = socket.socket(fileno=self.fd_num())
            try:
                yield sock
            finally:
                sock.detach()

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._borrowed("bind") as sock:
            sock.bind(address.sockaddr())

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrowed("connect") as sock:
            sock.connect(address.sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (``socket.SHUT_RD`` and friends)."""
        with self._borrowed("shutdown") as sock:
            sock.shutdown(how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket::shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The address this socket is bound to."""
        with self._borrowed("getsockname") as sock:
            return Address._from_sockaddr(sock.family, sock.getsockname())

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        with self._borrowed("getpeername") as sock:
            return Address._from_sockaddr(sock.family, sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (``SO_REUSEADDR``)."""
        with self._borrowed("setsockopt") as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: FileDescriptor | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = _DEFAULT_MTU) -> ReceivedDatagram:
        """Receive one datagram; raises ``RuntimeError`` if it exceeds ``mtu``."""
        with self._borrowed("recvfrom") as sock:
            payload, _ancdata, flags, source = sock.recvmsg(mtu)
            family = sock.family
        if flags & socket.MSG_TRUNC:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address._from_sockaddr(family, source), payload)

    def _sendmsg(self, payload: Payload, destination: Address | None) -> None:
        views = _as_views(payload)
        with self._borrowed("sendmsg") as sock:
            if destination is None:
                sent = sock.sendmsg(views.views())
            else:
                sent = sock.sendmsg(views.views(), [], 0, destination.sockaddr())
        if sent != views.size():
            raise RuntimeError("datagram payload too big for sendmsg()")
        self._register_write()

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer (``connect`` first)."""
        self._sendmsg(payload, None)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: FileDescriptor | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        with self._borrowed("listen") as sock:
            sock.listen(backlog)

    def accept(self) -> TCPSocket:
        """Block until a connection arrives; return a socket connected to it."""
        self._register_read()
        with self._borrowed("accept") as sock:
            connection, _peer = sock.accept()
            number = connection.detach()
        return TCPSocket(FileDescriptor(number))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket over an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)