"""Detailed description of a serial port and the enumeration error."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PortDetails:
    """Detailed information about a serial port, including USB metadata.

    ``product`` is an OS-dependent description of the port. It may not
    always be available and may differ between systems.
    """

    name: str = ""
    is_usb: bool = False
    vid: str = ""
    pid: str = ""
    serial_number: str = ""
    product: str = ""


class PortEnumerationError(Exception):
    """Raised when the detailed list of serial ports cannot be built."""

    _REASON = "Error while enumerating serial ports"

    def __init__(self, caused_by: BaseException | None = None) -> None:
        self.caused_by = caused_by
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.caused_by is not None:
            return f"{self._REASON}: {self.caused_by}"
        return self._REASON

    def __repr__(self) -> str:
        return f"PortEnumerationError(caused_by={self.caused_by!r})"