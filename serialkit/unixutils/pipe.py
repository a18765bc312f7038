"""A unix pipe used to signal other threads."""

from __future__ import annotations

import os


class Pipe:
    """A unix pipe with a read side and a write side."""

    def __init__(self) -> None:
        self._opened = False
        self._rd = -1
        self._wr = -1

    @property
    def opened(self) -> bool:
        return self._opened

    def open(self) -> None:
        """Create the pipe."""
        self._rd, self._wr = os.pipe()
        self._opened = True

    def read_fd(self) -> int:
        """Return the read side descriptor, or -1 if the pipe is not open."""
        return self._rd if self._opened else -1

    def write_fd(self) -> int:
        """Return the write side descriptor, or -1 if the pipe is not open."""
        return self._wr if self._opened else -1

    def _require_open(self) -> None:
        if not self._opened:
            raise ValueError("Pipe not opened")

    def write(self, data: bytes) -> int:
        """Write data to the pipe and return the number of bytes written."""
        self._require_open()
        return os.write(self._wr, data)

    def read(self, size: int) -> bytes:
        """Read up to size bytes from the pipe."""
        self._require_open()
        return os.read(self._rd, size)

    def close(self) -> None:
        """Close both sides of the pipe."""
        self._require_open()
        errors: list[OSError] = []
        for fd in (self._rd, self._wr):
            try:
                os.close(fd)
            except OSError as exc:
                errors.append(exc)
        self._opened = False
        if errors:
            raise errors[0]

    def __enter__(self) -> Pipe:
        if not self._opened:
            self.open()
        return self

    def __exit__(self, *args) -> None:
        if self._opened:
            self.close()