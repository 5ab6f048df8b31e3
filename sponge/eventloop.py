"""Waits for readiness on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable

from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError

Callback = Callable[[], None]
Interest = Callable[[], bool]


class Direction(IntEnum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(Enum):
    """The outcome of one call to ``EventLoop.wait_next_event``."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


def _always_interested() -> bool:
    return True


def _do_nothing() -> None:
    return None


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Callback

    def service_count(self) -> int:
        """How many times the descriptor has been read or written, by direction."""
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()


class EventLoop:
    """Polls a set of rules and calls back the ones whose descriptor is ready.

    A rule is cancelled (its ``cancel`` callback runs and it is dropped) when
    its descriptor is closed, reaches EOF while reading, or hangs up.
    Every callback must read or write its descriptor, or its ``interest``
    must turn false; otherwise the loop reports a busy wait.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest = _always_interested,
        cancel: Callback = _do_nothing,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds."""
        self._rules.append(
            _Rule(fd.duplicate(), Direction(direction), callback, interest, cancel)
        )

    def _drop(self, rule: _Rule) -> None:
        rule.cancel()
        self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once for up to ``timeout_ms`` milliseconds and run ready callbacks.

        A negative timeout waits indefinitely.
        """
        polled: list[tuple[_Rule, int]] = []
        something_to_poll = False

        for rule in list(self._rules):
            if rule.direction is Direction.IN and rule.fd.eof():
                self._drop(rule)
                continue
            if rule.fd.closed():
                self._drop(rule)
                continue
            # an uninterested rule is still polled with no events, to catch errors
            events = int(rule.direction) if rule.interest() else 0
            something_to_poll = something_to_poll or bool(events)
            polled.append((rule, events))

        if not something_to_poll:
            return Result.EXIT

        masks: dict[int, int] = {}
        for rule, events in polled:
            number = rule.fd.fd_num()
            masks[number] = masks.get(number, 0) | events

        poller = select.poll()
        for number, mask in masks.items():
            poller.register(number, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.EXIT
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc

        if not ready:
            return Result.TIMEOUT

        revents_by_fd = dict(ready)

        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0)

            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # the only condition was a hangup: this descriptor is defunct
                self._drop(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write "
                        "fd and is still interested"
                    )

        return Result.SUCCESS