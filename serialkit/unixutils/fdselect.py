"""File descriptor sets and a select call over them."""

from __future__ import annotations

import select
from dataclasses import dataclass


class FDSet:
    """A set of file descriptors suitable for select_fds."""

    def __init__(self, *fds: int) -> None:
        self._fds: set[int] = set()
        self._max = 0
        self.add(*fds)

    def add(self, *args: int) -> None:
        """Add the given file descriptors to the set."""
        for fd in args:
            self._fds.add(fd)
            if fd > self._max:
                self._max = fd

    @property
    def fds(self) -> frozenset[int]:
        return frozenset(self._fds)

    @property
    def max(self) -> int:
        return self._max

    def __contains__(self, fd: object) -> bool:
        return fd in self._fds

    def __iter__(self):
        return iter(sorted(self._fds))

    def __len__(self) -> int:
        return len(self._fds)


@dataclass(frozen=True)
class FDResultSets:
    """The descriptors with pending events after a select_fds call."""

    readable: frozenset[int] | None = None
    writeable: frozenset[int] | None = None
    errors: frozenset[int] | None = None

    @staticmethod
    def _has(group: frozenset[int] | None, fd: int) -> bool:
        return group is not None and fd in group

    def is_readable(self, fd: int) -> bool:
        """Tell whether fd is ready to be read."""
        return self._has(self.readable, fd)

    def is_writable(self, fd: int) -> bool:
        """Tell whether fd is ready to be written."""
        return self._has(self.writeable, fd)

    def is_error(self, fd: int) -> bool:
        """Tell whether fd is in an error state."""
        return self._has(self.errors, fd)


def select_fds(
    rd: FDSet | None,
    wr: FDSet | None,
    er: FDSet | None,
    timeout: float | None,
) -> FDResultSets:
    """Wait for read, write or error events on the given sets.

    ``timeout`` is in seconds; None or a negative value blocks until an
    event happens. The input sets are left untouched.
    """
    rlist = list(rd) if rd is not None else []
    wlist = list(wr) if wr is not None else []
    xlist = list(er) if er is not None else []
    wait = None if timeout is None or timeout < 0 else timeout
    ready_r, ready_w, ready_x = select.select(rlist, wlist, xlist, wait)
    return FDResultSets(
        readable=frozenset(ready_r) if rd is not None else None,
        writeable=frozenset(ready_w) if wr is not None else None,
        errors=frozenset(ready_x) if er is not None else None,
    )