"""A flow-controlled, in-memory, in-order byte stream."""

from __future__ import annotations


class ByteStream:
    """Bytes are written on the input side and read from the output side.

    The stream holds at most ``capacity`` unread bytes. The writer may end
    the input, after which the stream reaches EOF once the buffer drains.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self._capacity = capacity
        self._buffer = bytearray()
        self._written = 0
        self._read = 0
        self._input_ended = False
        self._error = False

    def __repr__(self) -> str:
        return (
            f"ByteStream(capacity={self._capacity}, buffered={len(self._buffer)}, "
            f"written={self._written}, read={self._read}, "
            f"input_ended={self._input_ended})"
        )

    # Writer side

    def write(self, data: bytes) -> int:
        """Write as many bytes of ``data`` as fit; return how many were accepted."""
        accepted = min(len(data), self.remaining_capacity())
        self._buffer += data[:accepted]
        self._written += accepted
        return accepted

    def remaining_capacity(self) -> int:
        """Number of additional bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Reader side

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[: max(length, 0)])

    def pop_output(self, length: int) -> None:
        """Discard up to ``length`` bytes from the front."""
        count = min(max(length, 0), len(self._buffer))
        del self._buffer[:count]
        self._read += count

    def read(self, length: int) -> bytes:
        """Return and remove up to ``length`` bytes from the front."""
        data = self.peek_output(length)
        self.pop_output(length)
        return data

    def input_ended(self) -> bool:
        """True once the writer has ended the input."""
        return self._input_ended

    def error(self) -> bool:
        """True if the stream has suffered an error."""
        return self._error

    def buffer_size(self) -> int:
        """Number of bytes that can currently be read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        """True if no bytes are buffered."""
        return not self._buffer

    def eof(self) -> bool:
        """True once the input has ended and every byte has been read."""
        return self.buffer_empty() and self._input_ended

    # Accounting

    def bytes_written(self) -> int:
        """Total number of bytes accepted by ``write``."""
        return self._written

    def bytes_read(self) -> int:
        """Total number of bytes popped from the stream."""
        return self._read