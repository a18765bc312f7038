"""Error type shared by every serial port operation."""

from __future__ import annotations

from enum import IntEnum


class PortErrorCode(IntEnum):
    """Identifies the kind of failure behind a PortError."""

    PORT_BUSY = 0
    PORT_NOT_FOUND = 1
    INVALID_SERIAL_PORT = 2
    PERMISSION_DENIED = 3
    INVALID_SPEED = 4
    INVALID_DATA_BITS = 5
    INVALID_PARITY = 6
    INVALID_STOP_BITS = 7
    INVALID_TIMEOUT_VALUE = 8
    ERROR_ENUMERATING_PORTS = 9
    PORT_CLOSED = 10
    FUNCTION_NOT_IMPLEMENTED = 11


_DESCRIPTIONS = {
    PortErrorCode.PORT_BUSY: "Serial port busy",
    PortErrorCode.PORT_NOT_FOUND: "Serial port not found",
    PortErrorCode.INVALID_SERIAL_PORT: "Invalid serial port",
    PortErrorCode.PERMISSION_DENIED: "Permission denied",
    PortErrorCode.INVALID_SPEED: "Port speed invalid or not supported",
    PortErrorCode.INVALID_DATA_BITS: "Port data bits invalid or not supported",
    PortErrorCode.INVALID_PARITY: "Port parity invalid or not supported",
    PortErrorCode.INVALID_STOP_BITS: "Port stop bits invalid or not supported",
    PortErrorCode.INVALID_TIMEOUT_VALUE: "Timeout value invalid or not supported",
    PortErrorCode.ERROR_ENUMERATING_PORTS: "Could not enumerate serial ports",
    PortErrorCode.PORT_CLOSED: "Port has been closed",
    PortErrorCode.FUNCTION_NOT_IMPLEMENTED: "Function not implemented",
}


class PortError(Exception):
    """A platform independent serial port error with an optional cause."""

    def __init__(self, code: PortErrorCode | int, caused_by: BaseException | None = None) -> None:
        try:
            code = PortErrorCode(code)
        except ValueError:
            pass
        self.code = code
        self.caused_by = caused_by
        super().__init__(self._message())

    def encoded_error_string(self) -> str:
        """Return the fixed description of the error code."""
        return _DESCRIPTIONS.get(self.code, "Other error")

    def _message(self) -> str:
        if self.caused_by is not None:
            return f"{self.encoded_error_string()}: {self.caused_by}"
        return self.encoded_error_string()

    def __str__(self) -> str:
        return self._message()

    def __repr__(self) -> str:
        return f"PortError(code={self.code!r}, caused_by={self.caused_by!r})"