# sponge

Small, dependency-free building blocks for user-space networking in Python. It runs on POSIX
systems. The event loop needs `select.poll`, and the TUN/TAP handles need Linux.

- `sponge.bytestream.ByteStream`: a finite, flow-controlled in-memory byte stream with a fixed
  capacity. Writers push bytes in and readers peek, pop or read them out.
- `sponge.buffer`: byte strings that can drop bytes from the front without copying.
  - `Buffer` is a single contiguous string.
  - `BufferList` is a sequence of buffers.
  - `BufferViewList` is a list of views, suitable for `os.writev` and `socket.sendmsg`.
- `sponge.parser`: `NetParser` reads big-endian (network order) integers and `NetUnparser`
  appends them to a `bytearray`. A `ParseResult` records parse errors, and `as_string` gives each
  result a short name.
- `sponge.util` provides:
  - `InternetChecksum`, the one's-complement checksum used by IP and TCP.
  - `hexdump`, which prints bytes to standard output.
  - `timestamp_ms`, the milliseconds elapsed since start-up.
  - `get_random_generator`, a `random.Random` seeded from system entropy.
  - The `TaggedError` and `UnixError` exceptions, which are subclasses of `OSError`.
- `sponge.address.Address`: socket addresses.
  - `Address(ip, port)` takes a numeric IPv4 address.
  - `Address.resolve(host, service)` looks up names.
  - `Address.from_ipv4_numeric` and `ipv4_numeric` convert to and from 32-bit integers.
- `sponge.file_descriptor.FileDescriptor`: a shared file-descriptor handle.
  - It tracks EOF and counts reads and writes.
  - `duplicate` returns another handle that shares the same descriptor.
  - It can be used as a context manager.
- `sponge.sockets`: `UDPSocket`, `TCPSocket` and `LocalStreamSocket`, built on
  `FileDescriptor`. `UDPSocket.recv` returns a `ReceivedDatagram`.
- `sponge.tun`: `TunFD` and `TapFD` attach to TUN or TAP devices that already exist.
- `sponge.eventloop.EventLoop`: a `poll`-based loop that runs callbacks when descriptors become
  readable or writable (`Direction.IN` / `Direction.OUT`). Each call to `wait_next_event`
  returns a `Result`: `SUCCESS`, `TIMEOUT` or `EXIT`.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Using the byte stream

```python
from sponge.bytestream import ByteStream

stream = ByteStream(capacity=4)
stream.write(b"catdog")        # returns 4: only b"catd" fits
stream.peek_output(2)          # b"ca"
stream.read(3)                 # b"cat"
stream.remaining_capacity()    # 3
stream.end_input()
stream.pop_output(1)
stream.eof()                   # True
```

## Parsing network integers

```python
from sponge.parser import NetParser, NetUnparser

buf = bytearray(b"\x32")
NetUnparser.u32(buf, 0xDEADBEEF)
NetUnparser.u16(buf, 0xC0C0)

parser = NetParser(bytes(buf))
parser.u8()    # 0x32
parser.u32()   # 0xDEADBEEF
parser.u16()   # 0xC0C0
```

When the parser runs out of data, it records `ParseResult.PACKET_TOO_SHORT` and returns 0. It
does not raise an exception. Once an error has been recorded, every later read also returns 0.
Check `parser.error()` or `parser.get_error()` after parsing.

## Sockets

```python
from sponge.address import Address
from sponge.sockets import UDPSocket

receiver = UDPSocket()
receiver.bind(Address("127.0.0.1", 0))
sender = UDPSocket()
sender.sendto(receiver.local_address(), b"hi there")
datagram = receiver.recv()
datagram.payload               # b"hi there"
```

## Fetching a web page

The `webget` command sends an HTTP/1.1 GET for PATH to the `http` service (port 80) on HOST. It
then writes the raw response, headers included, to standard output until the server closes the
connection:

```
webget example.com /
```

It takes exactly two arguments, HOST and PATH. With any other number of arguments it prints a
usage message and exits with status 1. Any error during the fetch is printed to standard error,
and the command then exits with status 1.

The same fetch is available from Python as `sponge.webget.get_url(host, path, out)`.

## What this package does not do

These are primitives only. The package does not contain:

- a TCP implementation: no stream reassembler, receiver, sender, connection state machine or
  retransmission;
- parsers for IP, TCP, Ethernet or ARP headers;
- a network interface or a router.

`webget` speaks plain HTTP only. It does not use TLS and does not follow redirects.