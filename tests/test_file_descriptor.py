import errno
import gc
import os

import pytest

from sponge.buffer import BufferList
from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError


@pytest.fixture
def pipe():
    read_end, write_end = os.pipe()
    reader, writer = FileDescriptor(read_end), FileDescriptor(write_end)
    yield reader, writer
    for handle in (reader, writer):
        if not handle.closed():
            handle.close()


def test_write_then_read_round_trip(pipe):
    reader, writer = pipe
    assert writer.write(b"hello") == len(b"hello")
    assert reader.read() == b"hello"
    assert writer.write_count() == 1
    assert reader.read_count() == 1


def test_read_respects_limit(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.read(2) == b"ab"
    assert reader.read(10) == b"cdef"


def test_eof_after_writer_closes(pipe):
    reader, writer = pipe
    writer.write(b"xy")
    writer.close()
    assert reader.read() == b"xy"
    assert not reader.eof()
    assert reader.read() == b""
    assert reader.eof()
    assert not reader.closed()


def test_zero_limit_read_does_not_set_eof(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read(0) == b""
    assert not reader.eof()
    assert reader.read_count() == 1


def test_write_buffer_list(pipe):
    reader, writer = pipe
    payload = BufferList(b"head")
    payload.append(b"-body")
    assert writer.write(payload) == payload.size()
    assert reader.read() == b"head-body"


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    copy = writer.duplicate()
    assert copy.fd_num() == writer.fd_num()
    copy.write(b"z")
    assert writer.write_count() == copy.write_count() == 1
    copy.close()
    assert writer.closed()
    assert writer.eof()


def test_close_twice_raises(pipe):
    _reader, writer = pipe
    writer.close()
    with pytest.raises(UnixError) as info:
        writer.close()
    assert info.value.errno == errno.EBADF


def test_read_closed_raises(pipe):
    reader, _writer = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.attempt == "read"


def test_nonblocking_read_on_empty_pipe(pipe):
    reader, _writer = pipe
    reader.set_blocking(False)
    assert os.get_blocking(reader.fd_num()) is False
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.errno == errno.EAGAIN
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num()) is True


def test_invalid_fd_number():
    with pytest.raises(ValueError):
        FileDescriptor(-1)


def test_context_manager_closes():
    read_end, write_end = os.pipe()
    os.close(write_end)
    with FileDescriptor(read_end) as handle:
        assert not handle.closed()
    assert handle.closed()
    with pytest.raises(OSError):
        os.fstat(read_end)


def test_collected_handle_closes_descriptor():
    read_end, write_end = os.pipe()
    os.close(write_end)
    handle = FileDescriptor(read_end)
    copy = handle.duplicate()
    del handle
    gc.collect()
    assert os.fstat(read_end) is not None and not copy.closed()
    del copy
    gc.collect()
    with pytest.raises(OSError):
        os.fstat(read_end)