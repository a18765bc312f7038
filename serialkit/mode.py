"""Serial port configuration and modem status bits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Parity(IntEnum):
    """Parity setting of a serial port."""

    NONE = 0
    ODD = 1
    EVEN = 2
    MARK = 3
    SPACE = 4


class StopBits(IntEnum):
    """Number of stop bits of a serial port."""

    ONE = 0
    ONE_POINT_FIVE = 1
    TWO = 2


@dataclass
class ModemStatusBits:
    """Modem input status bits (CTS, DSR, RI, DCD)."""

    cts: bool = False
    dsr: bool = False
    ri: bool = False
    dcd: bool = False


@dataclass
class ModemOutputBits:
    """Modem output bits used to set the initial state of RTS and DTR."""

    rts: bool = False
    dtr: bool = False


@dataclass
class Mode:
    """A serial port configuration.

    A baud rate or data bits value of 0 selects the platform default
    (9600 baud, 8 data bits). When ``initial_status_bits`` is None the
    modem output bits are left as the system sets them.
    """

    baud_rate: int = 0
    data_bits: int = 0
    parity: Parity = Parity.NONE
    stop_bits: StopBits = StopBits.ONE
    initial_status_bits: ModemOutputBits | None = None