import copy

import pytest

from sponge.buffer import Buffer, BufferList, BufferViewList


def test_buffer_contents_and_size():
    buf = Buffer(b"hello")
    assert buf.size() == 5
    assert len(buf) == 5
    assert buf.copy() == b"hello"
    assert bytes(buf.str()) == b"hello"


def test_buffer_default_is_empty():
    buf = Buffer()
    assert buf.size() == 0
    assert buf.copy() == b""


def test_buffer_at_returns_byte_values():
    buf = Buffer(b"abc")
    assert [buf.at(i) for i in range(3)] == list(b"abc")


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_buffer_at_out_of_range(index):
    with pytest.raises(IndexError):
        Buffer(b"abc").at(index)


def test_buffer_remove_prefix_drops_front():
    buf = Buffer(b"hello world")
    buf.remove_prefix(6)
    assert buf.copy() == b"world"
    assert buf.at(0) == ord("w")


def test_buffer_remove_whole_prefix_empties():
    buf = Buffer(b"data")
    buf.remove_prefix(4)
    assert buf.size() == 0
    assert buf.copy() == b""


def test_buffer_remove_prefix_too_long_raises_and_keeps_data():
    buf = Buffer(b"ab")
    with pytest.raises(IndexError):
        buf.remove_prefix(3)
    assert buf.copy() == b"ab"


def test_buffer_copies_are_independent():
    original = Buffer(b"abcdef")
    clone = copy.copy(original)
    clone.remove_prefix(2)
    assert original.copy() == b"abcdef"
    assert clone.copy() == b"cdef"


def test_buffer_equality():
    assert Buffer(b"xyz") == Buffer(b"xyz")
    assert Buffer(b"xyz") == b"xyz"
    assert not (Buffer(b"xyz") == b"xy")


def test_bufferlist_concatenate_in_order():
    bl = BufferList(b"head")
    bl.append(BufferList(b"er"))
    bl.append(b"payload")
    assert bl.concatenate() == b"header" + b"payload"
    assert bl.size() == len(b"headerpayload")
    assert len(bl.buffers()) == 3


def test_bufferlist_empty():
    bl = BufferList()
    assert bl.size() == 0
    assert bl.concatenate() == b""
    assert bl.buffers() == ()
    assert bl.to_buffer().size() == 0


def test_bufferlist_to_buffer_single():
    bl = BufferList(Buffer(b"one"))
    assert bl.to_buffer().copy() == b"one"


def test_bufferlist_to_buffer_multiple_raises():
    bl = BufferList(b"a")
    bl.append(b"b")
    with pytest.raises(ValueError):
        bl.to_buffer()


def test_bufferlist_remove_prefix_across_buffers():
    bl = BufferList(b"abc")
    bl.append(b"def")
    bl.append(b"ghi")
    bl.remove_prefix(4)
    assert bl.concatenate() == b"efghi"
    assert len(bl.buffers()) == 2


def test_bufferlist_remove_prefix_exact_boundary():
    bl = BufferList(b"abc")
    bl.append(b"def")
    bl.remove_prefix(3)
    assert bl.concatenate() == b"def"
    assert len(bl.buffers()) == 1


def test_bufferlist_remove_prefix_too_long_raises():
    bl = BufferList(b"abc")
    with pytest.raises(IndexError):
        bl.remove_prefix(4)


def test_bufferlist_append_does_not_alias_other():
    source = BufferList(b"shared")
    target = BufferList()
    target.append(source)
    target.remove_prefix(3)
    assert source.concatenate() == b"shared"
    assert target.concatenate() == b"red"


def test_bufferviewlist_from_bytes():
    views = BufferViewList(b"hi there")
    assert views.size() == 8
    assert b"".join(views.views()) == b"hi there"


def test_bufferviewlist_from_bufferlist_matches_concatenate():
    bl = BufferList(b"abc")
    bl.append(b"defg")
    views = BufferViewList(bl)
    assert views.size() == bl.size()
    assert b"".join(views.views()) == bl.concatenate()
    assert len(views.views()) == 2


def test_bufferviewlist_remove_prefix():
    bl = BufferList(b"abc")
    bl.append(b"defg")
    views = BufferViewList(bl)
    views.remove_prefix(2)
    assert bytes(views) == b"cdefg"
    views.remove_prefix(1)
    assert bytes(views) == b"defg"
    assert len(views.views()) == 1
    # the viewed list is untouched
    assert bl.concatenate() == b"abcdefg"


def test_bufferviewlist_remove_prefix_too_long_raises():
    views = BufferViewList(b"ab")
    with pytest.raises(IndexError):
        views.remove_prefix(3)