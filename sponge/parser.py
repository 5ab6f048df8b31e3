"""Parsing and unparsing of big-endian (network order) integers."""

from __future__ import annotations

from enum import Enum

from sponge.buffer import Buffer, BytesLike


class ParseResult(Enum):
    """The result of parsing or unparsing a datagram, segment, frame or message."""

    NO_ERROR = 0
    BAD_CHECKSUM = 1
    PACKET_TOO_SHORT = 2
    WRONG_IP_VERSION = 3
    HEADER_TOO_SHORT = 4
    TRUNCATED_PACKET = 5
    UNSUPPORTED = 6


_NAMES = {
    ParseResult.NO_ERROR: "NoError",
    ParseResult.BAD_CHECKSUM: "BadChecksum",
    ParseResult.PACKET_TOO_SHORT: "PacketTooShort",
    ParseResult.WRONG_IP_VERSION: "WrongIPVersion",
    ParseResult.HEADER_TOO_SHORT: "HeaderTooShort",
    ParseResult.TRUNCATED_PACKET: "TruncatedPacket",
    ParseResult.UNSUPPORTED: "Unsupported",
}


def as_string(result: ParseResult) -> str:
    """A short name for a ``ParseResult``."""
    return _NAMES[result]


class NetParser:
    """Reads network-order integers from the front of a buffer.

    A read past the end records ``PACKET_TOO_SHORT``; once an error is
    recorded every further read returns 0 and consumes nothing.
    """

    def __init__(self, buffer: Buffer | BytesLike) -> None:
        self._buffer = copy_buffer(buffer)
        self._error = ParseResult.NO_ERROR

    def buffer(self) -> Buffer:
        """The bytes not yet consumed."""
        return copy_buffer(self._buffer)

    def get_error(self) -> ParseResult:
        """The result of parsing so far."""
        return self._error

    def set_error(self, result: ParseResult) -> None:
        """Record a parse result."""
        self._error = result

    def error(self) -> bool:
        """True if an error has been recorded."""
        return self._error is not ParseResult.NO_ERROR

    def _check_size(self, size: int) -> None:
        if size > self._buffer.size():
            self.set_error(ParseResult.PACKET_TOO_SHORT)

    def _parse_int(self, width: int) -> int:
        self._check_size(width)
        if self.error():
            return 0
        value = int.from_bytes(self._buffer.str()[:width], "big")
        self._buffer.remove_prefix(width)
        return value

    def u32(self) -> int:
        """Parse a 32-bit unsigned integer."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit unsigned integer."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit unsigned integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, recording an error if fewer remain."""
        self._check_size(n)
        if self.error():
            return
        self._buffer.remove_prefix(n)


def copy_buffer(source: Buffer | BytesLike) -> Buffer:
    """A ``Buffer`` over ``source`` that does not share its read position."""
    if isinstance(source, Buffer):
        clone = Buffer()
        clone._storage = source._storage  # noqa: SLF001 - same package
        clone._offset = source._offset  # noqa: SLF001
        return clone
    return Buffer(source)


class NetUnparser:
    """Appends network-order integers to a ``bytearray``."""

    @staticmethod
    def _unparse_int(buffer: bytearray, value: int, width: int) -> None:
        mask = (1 << (8 * width)) - 1
        buffer += (value & mask).to_bytes(width, "big")

    @staticmethod
    def u32(buffer: bytearray, value: int) -> None:
        """Append a 32-bit unsigned integer (truncated to 32 bits)."""
        NetUnparser._unparse_int(buffer, value, 4)

    @staticmethod
    def u16(buffer: bytearray, value: int) -> None:
        """Append a 16-bit unsigned integer (truncated to 16 bits)."""
        NetUnparser._unparse_int(buffer, value, 2)

    @staticmethod
    def u8(buffer: bytearray, value: int) -> None:
        """Append an 8-bit unsigned integer (truncated to 8 bits)."""
        NetUnparser._unparse_int(buffer, value, 1)