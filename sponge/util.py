"""Miscellaneous helpers: errors, timing, randomness, checksums and hexdumps."""

from __future__ import annotations

import os
import random
import sys
import time

_PROGRAM_START = time.monotonic()

_MT_STATE_WORDS = 624


class TaggedError(OSError):
    """An ``OSError`` that also names what was being attempted."""

    def __init__(self, attempt: str, error_code: int, message: str) -> None:
        super().__init__(error_code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A ``TaggedError`` for a failed system call, described by its errno."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error, os.strerror(error))


def timestamp_ms() -> int:
    """Milliseconds elapsed since the program started (monotonic)."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator fully seeded from system entropy."""
    seed = int.from_bytes(os.urandom(4 * _MT_STATE_WORDS), "big")
    return random.Random(seed)


class InternetChecksum:
    """The Internet (one's complement) checksum used by IP and TCP.

    Feeding a packet that already carries a correct checksum yields zero.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._odd = False

    def add(self, data: bytes) -> None:
        """Add bytes to the running sum, continuing byte parity across calls."""
        total = self._sum
        odd = self._odd
        for byte in data:
            total += byte if odd else byte << 8
            odd = not odd
        self._sum = total & 0xFFFFFFFF
        self._odd = odd

    def value(self) -> int:
        """The checksum of everything added so far, in host byte order."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7F else "."


def hexdump(data: bytes, indent: int = 0) -> None:
    """Print ``data`` to standard output as offset, hex words and characters."""
    indent_string = " " * indent
    out: list[str] = []
    chars: list[str] = []
    printed = 0
    for byte in data:
        if printed % 16 == 0:
            if printed:
                out.append("    " + "".join(chars) + "\n")
                chars = []
            out.append(f"{indent_string}{printed:08x}:    ")
        elif printed % 2 == 0:
            out.append(" ")
        out.append(f"{byte:02x}")
        chars.append(_printable(byte))
        printed += 1
    remainder = (16 - printed % 16) % 16
    out.append(" " * (2 * remainder + remainder // 2 + 4))
    out.append("".join(chars) if printed else " ")
    out.append("\n\n")
    sys.stdout.write("".join(out))
    sys.stdout.flush()