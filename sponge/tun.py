"""Handles on existing persistent Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct
from contextlib import contextmanager
from typing import Iterator

from sponge.file_descriptor import FileDescriptor
from sponge.util import TaggedError, UnixError

_CLONE_DEVICE = "/dev/net/tun"

_IFNAMSIZ = 16
_IFF_TUN = 0x0001
_IFF_TAP = 0x0002
_IFF_NO_PI = 0x1000
_TUNSETIFF = 0x400454CA
_IFREQ_SIZE = 40


@contextmanager
def _system_call(attempt: str) -> Iterator[None]:
    try:
        yield
    except TaggedError:
        raise
    except OSError as exc:
        raise UnixError(attempt, exc.errno or 0) from exc


def _interface_request(devname: str, is_tun: bool) -> bytes:
    """A ``struct ifreq`` naming ``devname`` with TUN or TAP flags and no packet info."""
    name = devname.encode()[: _IFNAMSIZ - 1]
    flags = (_IFF_TUN if is_tun else _IFF_TAP) | _IFF_NO_PI
    return struct.pack(f"{_IFNAMSIZ}sH", name, flags).ljust(_IFREQ_SIZE, b"\0")


class TunTapFD(FileDescriptor):
    """A descriptor attached to a TUN (IP datagrams) or TAP (Ethernet frames) device.

    The device must already exist, e.g. created with
    ``ip tuntap add mode tun user USER name DEVNAME``.
    """

    def __init__(self, devname: str, is_tun: bool) -> None:
        with _system_call("open"):
            number = os.open(_CLONE_DEVICE, os.O_RDWR)
        super().__init__(number)
        try:
            with _system_call("ioctl"):
                fcntl.ioctl(number, _TUNSETIFF, _interface_request(devname, is_tun))
        except BaseException:
            self.close()
            raise


class TunFD(TunTapFD):
    """A descriptor attached to an existing TUN device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor attached to an existing TAP device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)