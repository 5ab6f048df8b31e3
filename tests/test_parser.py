import pytest

from sponge.buffer import Buffer
from sponge.parser import NetParser, NetUnparser, ParseResult, as_string


def test_serialize_then_parse_example():
    val1 = 0xDEADBEEF
    val2 = 0xC0C0
    val3 = 0xFF
    val4 = 0x0C05FEFE

    buffer = bytearray([0x32])
    NetUnparser.u32(buffer, val1)
    NetUnparser.u16(buffer, val2)
    NetUnparser.u8(buffer, val3)
    NetUnparser.u32(buffer, val4)

    p = NetParser(bytes(buffer))
    assert p.u8() == 0x32
    assert p.u32() == val1
    assert p.u16() == val2
    assert p.u8() == val3
    assert p.u32() == val4
    assert not p.error()
    assert p.buffer().size() == 0


def test_unparse_is_big_endian():
    buffer = bytearray()
    NetUnparser.u32(buffer, 0xDEADBEEF)
    NetUnparser.u16(buffer, 0xC0C0)
    assert bytes(buffer) == b"\xde\xad\xbe\xef\xc0\xc0"


def test_unparse_truncates_to_width():
    buffer = bytearray()
    NetUnparser.u8(buffer, 0x1FF)
    NetUnparser.u16(buffer, 0x12345)
    assert len(buffer) == 3
    p = NetParser(bytes(buffer))
    assert p.u8() == 0x1FF & 0xFF
    assert p.u16() == 0x12345 & 0xFFFF


def test_parse_too_short_sets_error_and_returns_zero():
    p = NetParser(b"\x01")
    assert p.u16() == 0
    assert p.error()
    assert p.get_error() is ParseResult.PACKET_TOO_SHORT
    assert p.buffer().copy() == b"\x01"


def test_after_error_every_read_returns_zero():
    p = NetParser(b"\x07")
    p.u32()
    assert p.u8() == 0
    assert p.buffer().size() == 1


def test_remove_prefix_skips_bytes():
    p = NetParser(b"\xaa\xbb\xcc")
    p.remove_prefix(2)
    assert p.u8() == 0xCC
    assert not p.error()


def test_remove_prefix_too_long_sets_error():
    p = NetParser(b"\xaa")
    p.remove_prefix(2)
    assert p.get_error() is ParseResult.PACKET_TOO_SHORT
    assert p.buffer().copy() == b"\xaa"


def test_parser_does_not_consume_callers_buffer():
    source = Buffer(b"\x00\x01\x02")
    p = NetParser(source)
    p.u16()
    assert source.copy() == b"\x00\x01\x02"
    assert p.buffer().copy() == b"\x02"


def test_set_error_and_clear():
    p = NetParser(b"")
    p.set_error(ParseResult.BAD_CHECKSUM)
    assert p.error()
    assert p.get_error() is ParseResult.BAD_CHECKSUM
    p.set_error(ParseResult.NO_ERROR)
    assert not p.error()


@pytest.mark.parametrize(
    ("result", "name"),
    [
        (ParseResult.NO_ERROR, "NoError"),
        (ParseResult.BAD_CHECKSUM, "BadChecksum"),
        (ParseResult.PACKET_TOO_SHORT, "PacketTooShort"),
        (ParseResult.WRONG_IP_VERSION, "WrongIPVersion"),
        (ParseResult.HEADER_TOO_SHORT, "HeaderTooShort"),
        (ParseResult.TRUNCATED_PACKET, "TruncatedPacket"),
    ],
)
def test_as_string(result, name):
    assert as_string(result) == name


@pytest.mark.parametrize("value", [0, 1, 0x7FFFFFFF, 0xFFFFFFFF])
def test_u32_round_trip(value):
    buffer = bytearray()
    NetUnparser.u32(buffer, value)
    assert NetParser(bytes(buffer)).u32() == value