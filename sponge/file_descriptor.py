"""Reference-counted handles to kernel file descriptors."""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from typing import Iterator

from sponge.buffer import Buffer, BufferList, BufferViewList, BytesLike
from sponge.util import UnixError

_MAX_READ = 1024 * 1024


@contextmanager
def _system_call(attempt: str) -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        raise UnixError(attempt, exc.errno or 0) from exc


class _FDWrapper:
    """The shared state of a kernel descriptor; closes it when collected."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        with _system_call("close"):
            os.close(self.fd)
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except OSError as exc:
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a file descriptor that tracks EOF and read/write counts.

    Handles made with ``duplicate`` share one descriptor and its state; the
    descriptor is closed when the last handle goes away or on ``close``.
    """

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    @classmethod
    def _sharing(cls, internal: _FDWrapper) -> FileDescriptor:
        handle = FileDescriptor.__new__(FileDescriptor)
        handle._internal = internal
        return handle

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); fewer may be returned."""
        size = _MAX_READ if limit is None else min(_MAX_READ, max(limit, 0))
        with _system_call("read"):
            data = os.read(self.fd_num(), size)
        if size > 0 and not data:
            self._internal.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(
        self,
        data: BufferViewList | BufferList | Buffer | BytesLike,
        write_all: bool = True,
    ) -> int:
        """Write ``data``; unless ``write_all`` is false, keep going until all is written."""
        views = data if isinstance(data, BufferViewList) else BufferViewList(data)
        total = 0
        while True:
            remaining = views.size()
            with _system_call("writev"):
                written = os.writev(self.fd_num(), views.views())
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            views.remove_prefix(written)
            total += written
            if not (write_all and views.size()):
                return total

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing this descriptor and its state."""
        return FileDescriptor._sharing(self._internal)

    def set_blocking(self, blocking_state: bool) -> None:
        """Make the descriptor blocking (True) or non-blocking (False)."""
        with _system_call("fcntl"):
            os.set_blocking(self.fd_num(), blocking_state)

    def fd_num(self) -> int:
        """The kernel's descriptor number."""
        return self._internal.fd

    def eof(self) -> bool:
        """True once a read has reached end of file."""
        return self._internal.eof

    def closed(self) -> bool:
        """True once the descriptor has been closed."""
        return self._internal.closed

    def read_count(self) -> int:
        """How many times the descriptor has been read."""
        return self._internal.read_count

    def write_count(self) -> int:
        """How many times the descriptor has been written."""
        return self._internal.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.closed():
            self.close()

    def __repr__(self) -> str:
        return (
            f"FileDescriptor(fd={self.fd_num()}, eof={self.eof()}, "
            f"closed={self.closed()})"
        )