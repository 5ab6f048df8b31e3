"""Read-only byte buffers that can cheaply discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterator, Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """An immutable byte string that can drop bytes from its front without copying.

    Copies made with ``copy.copy`` or by the list classes share the underlying
    storage but keep their own starting offset.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesLike = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def _share(self) -> Buffer:
        clone = Buffer.__new__(Buffer)
        clone._storage = self._storage
        clone._offset = self._offset
        return clone

    __copy__ = _share

    def str(self) -> memoryview:
        """A read-only view of the remaining bytes."""
        return memoryview(self._storage)[self._offset :]

    def at(self, n: int) -> int:
        """The byte at position ``n``; raises ``IndexError`` when out of range."""
        if not 0 <= n < self.size():
            raise IndexError(f"Buffer.at: index {n} out of range")
        return self._storage[self._offset + n]

    def size(self) -> int:
        """Number of remaining bytes."""
        return len(self._storage) - self._offset

    def copy(self) -> bytes:
        """A fresh ``bytes`` object holding the remaining bytes."""
        return self._storage[self._offset :]

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes; raises ``IndexError`` if fewer remain."""
        if n < 0 or n > self.size():
            raise IndexError("Buffer::remove_prefix")
        self._offset += n
        if self._storage and self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0

    def __len__(self) -> int:
        return self.size()

    def __bytes__(self) -> bytes:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return self.copy() == other.copy()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.copy() == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer({self.copy()!r})"


class BufferList:
    """A discontiguous byte string made of a sequence of ``Buffer`` objects.

    Headers can be prepended to a payload without copying the payload.
    """

    __slots__ = ("_buffers",)

    def __init__(self, data: Buffer | BytesLike | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is None:
            return
        if isinstance(data, Buffer):
            self._buffers.append(data._share())
        else:
            self._buffers.append(Buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying buffers, front first."""
        return tuple(self._buffers)

    def append(self, other: BufferList | Buffer | BytesLike) -> None:
        """Append every buffer of ``other`` (sharing their storage)."""
        if not isinstance(other, BufferList):
            other = BufferList(other)
        self._buffers.extend(buf._share() for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Convert to a single ``Buffer``; only allowed with at most one buffer."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._share()
        raise ValueError(
            "BufferList: please use concatenate() to combine a multi-Buffer "
            "BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes; raises ``IndexError`` if fewer remain."""
        if n < 0:
            raise IndexError("BufferList::remove_prefix")
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList::remove_prefix")
            front = self._buffers[0]
            if n < front.size():
                front.remove_prefix(n)
                n = 0
            else:
                n -= front.size()
                self._buffers.popleft()

    def size(self) -> int:
        """Total number of bytes across all buffers."""
        return sum(buf.size() for buf in self._buffers)

    def concatenate(self) -> bytes:
        """All bytes copied into one ``bytes`` object."""
        return b"".join(buf.str() for buf in self._buffers)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[Buffer]:
        return iter(tuple(self._buffers))

    def __repr__(self) -> str:
        return f"BufferList({[buf.copy() for buf in self._buffers]!r})"


class BufferViewList:
    """A non-owning view of a discontiguous byte string, for scatter writes."""

    __slots__ = ("_views",)

    def __init__(self, data: BufferList | Buffer | BytesLike) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(data, BufferList):
            self._views.extend(buf.str() for buf in data.buffers())
        elif isinstance(data, Buffer):
            self._views.append(data.str())
        else:
            self._views.append(memoryview(data).cast("B"))

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes; raises ``IndexError`` if fewer remain."""
        if n < 0:
            raise IndexError("BufferListView::remove_prefix")
        while n > 0:
            if not self._views:
                raise IndexError("BufferListView::remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def size(self) -> int:
        """Total number of bytes viewed."""
        return sum(len(view) for view in self._views)

    def views(self) -> list[memoryview]:
        """The views as a list, suitable for ``os.writev`` or ``socket.sendmsg``."""
        return list(self._views)

    def __len__(self) -> int:
        return self.size()

    def __bytes__(self) -> bytes:
        return b"".join(self._views)