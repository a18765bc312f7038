"""Terminal attribute manipulation for unix serial ports.

A :class:`TermSettings` holds the same fields as the list returned by
``termios.tcgetattr``. A :class:`PlatformProfile` carries the flag values and
speed tables of one operating system, so that settings can be prepared for
any supported system regardless of the one running the code.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Sequence

from .errors import PortError, PortErrorCode
from .mode import Parity, StopBits

_CC_SIZE = 32


@dataclass
class TermSettings:
    """The attributes of a terminal device."""

    iflag: int = 0
    oflag: int = 0
    cflag: int = 0
    lflag: int = 0
    ispeed: int = 0
    ospeed: int = 0
    cc: list[int] = field(default_factory=lambda: [0] * _CC_SIZE)

    def to_attrs(self) -> list:
        """Return the settings in the list form taken by ``termios.tcsetattr``."""
        return [
            self.iflag,
            self.oflag,
            self.cflag,
            self.lflag,
            self.ispeed,
            self.ospeed,
            list(self.cc),
        ]


def _cc_value(value: int | bytes) -> int:
    if isinstance(value, (bytes, bytearray)):
        return value[0] if value else 0
    return int(value)


def from_attrs(attrs: Sequence) -> TermSettings:
    """Build settings from the list returned by ``termios.tcgetattr``."""
    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = attrs
    return TermSettings(
        iflag=int(iflag),
        oflag=int(oflag),
        cflag=int(cflag),
        lflag=int(lflag),
        ispeed=int(ispeed),
        ospeed=int(ospeed),
        cc=[_cc_value(c) for c in cc],
    )


@dataclass(frozen=True)
class PlatformProfile:
    """Flag values and speed tables of one operating system."""

    system: str
    baudrates: Mapping[int, int]
    databits: Mapping[int, int]
    consts: Mapping[str, int]
    cmspar: int
    iuclc: int
    crtscts: int
    baud_in_cflag: bool

    def const(self, name: str) -> int:
        """Return the value of the named termios flag."""
        return self.consts[name]


_LINUX_CONSTS = {
    "CSIZE": 0o60,
    "CS5": 0o0,
    "CS6": 0o20,
    "CS7": 0o40,
    "CS8": 0o60,
    "CSTOPB": 0o100,
    "CREAD": 0o200,
    "PARENB": 0o400,
    "PARODD": 0o1000,
    "CLOCAL": 0o4000,
    "IGNBRK": 0o1,
    "BRKINT": 0o2,
    "IGNPAR": 0o4,
    "PARMRK": 0o10,
    "INPCK": 0o20,
    "ISTRIP": 0o40,
    "INLCR": 0o100,
    "IGNCR": 0o200,
    "ICRNL": 0o400,
    "IXON": 0o2000,
    "IXANY": 0o4000,
    "IXOFF": 0o10000,
    "OPOST": 0o1,
    "ISIG": 0o1,
    "ICANON": 0o2,
    "ECHO": 0o10,
    "ECHOE": 0o20,
    "ECHOK": 0o40,
    "ECHONL": 0o100,
    "ECHOCTL": 0o1000,
    "ECHOPRT": 0o2000,
    "ECHOKE": 0o4000,
    "IEXTEN": 0o100000,
    "VTIME": 5,
    "VMIN": 6,
}

_LINUX_BAUDS = {
    50: 0o1,
    75: 0o2,
    110: 0o3,
    134: 0o4,
    150: 0o5,
    200: 0o6,
    300: 0o7,
    600: 0o10,
    1200: 0o11,
    1800: 0o12,
    2400: 0o13,
    4800: 0o14,
    9600: 0o15,
    19200: 0o16,
    38400: 0o17,
    57600: 0o10001,
    115200: 0o10002,
    230400: 0o10003,
    460800: 0o10004,
    500000: 0o10005,
    576000: 0o10006,
    921600: 0o10007,
    1000000: 0o10010,
    1152000: 0o10011,
    1500000: 0o10012,
    2000000: 0o10013,
    2500000: 0o10014,
    3000000: 0o10015,
    3500000: 0o10016,
    4000000: 0o10017,
}

_BSD_CONSTS = {
    "CSIZE": 0x300,
    "CS5": 0x000,
    "CS6": 0x100,
    "CS7": 0x200,
    "CS8": 0x300,
    "CSTOPB": 0x400,
    "CREAD": 0x800,
    "PARENB": 0x1000,
    "PARODD": 0x2000,
    "CLOCAL": 0x8000,
    "IGNBRK": 0x1,
    "BRKINT": 0x2,
    "IGNPAR": 0x4,
    "PARMRK": 0x8,
    "INPCK": 0x10,
    "ISTRIP": 0x20,
    "INLCR": 0x40,
    "IGNCR": 0x80,
    "ICRNL": 0x100,
    "IXON": 0x200,
    "IXOFF": 0x400,
    "IXANY": 0x800,
    "OPOST": 0x1,
    "ECHOKE": 0x1,
    "ECHOE": 0x2,
    "ECHOK": 0x4,
    "ECHO": 0x8,
    "ECHONL": 0x10,
    "ECHOPRT": 0x20,
    "ECHOCTL": 0x40,
    "ISIG": 0x80,
    "ICANON": 0x100,
    "IEXTEN": 0x400,
    "VMIN": 16,
    "VTIME": 17,
}

_BSD_RATES = (
    50, 75, 110, 134, 150, 200, 300, 600, 1200, 1800,
    2400, 4800, 9600, 19200, 38400, 57600, 115200, 230400,
)

_CCTS_OFLOW = 0x00010000
_CRTS_IFLOW = 0x00020000

_SYSTEM_NAMES = {
    "linux": "Linux",
    "darwin": "Darwin",
    "freebsd": "FreeBSD",
    "openbsd": "OpenBSD",
}


def _host_termios():
    try:
        import termios
    except ImportError:
        return None
    return termios


def _build_profile(
    system: str,
    consts: Mapping[str, int],
    bauds: Mapping[int, int],
    *,
    cmspar: int,
    iuclc: int,
    crtscts: int,
    baud_in_cflag: bool,
) -> PlatformProfile:
    termios = _host_termios() if platform.system() == system else None
    if termios is not None:
        consts = {name: getattr(termios, name, value) for name, value in consts.items()}
        bauds = {rate: getattr(termios, f"B{rate}", value) for rate, value in bauds.items()}
    baudrates = {0: bauds[9600], **bauds}
    databits = {
        0: consts["CS8"],
        5: consts["CS5"],
        6: consts["CS6"],
        7: consts["CS7"],
        8: consts["CS8"],
    }
    return PlatformProfile(
        system=system,
        baudrates=MappingProxyType(baudrates),
        databits=MappingProxyType(databits),
        consts=MappingProxyType(dict(consts)),
        cmspar=cmspar,
        iuclc=iuclc,
        crtscts=crtscts,
        baud_in_cflag=baud_in_cflag,
    )


@lru_cache(maxsize=None)
def _profile_for(system: str) -> PlatformProfile:
    if system == "Linux":
        termios = _host_termios() if platform.system() == "Linux" else None
        cmspar = getattr(termios, "CMSPAR", 0o10000000000)
        iuclc = getattr(termios, "IUCLC", 0o1000)
        crtscts = getattr(termios, "CRTSCTS", 0o20000000000)
        return _build_profile(
            system,
            _LINUX_CONSTS,
            _LINUX_BAUDS,
            cmspar=cmspar,
            iuclc=iuclc,
            crtscts=crtscts,
            baud_in_cflag=True,
        )
    if system == "Darwin":
        return _build_profile(
            system,
            _BSD_CONSTS,
            {rate: rate for rate in _BSD_RATES},
            cmspar=0,
            iuclc=0,
            crtscts=_CCTS_OFLOW | _CRTS_IFLOW,
            baud_in_cflag=False,
        )
    if system == "FreeBSD":
        return _build_profile(
            system,
            _BSD_CONSTS,
            {rate: rate for rate in (*_BSD_RATES, 460800, 921600)},
            cmspar=0,
            iuclc=0,
            crtscts=_CCTS_OFLOW,
            baud_in_cflag=True,
        )
    # OpenBSD
    return _build_profile(
        system,
        _BSD_CONSTS,
        {rate: rate for rate in _BSD_RATES},
        cmspar=0,
        iuclc=0,
        crtscts=_CCTS_OFLOW,
        baud_in_cflag=True,
    )


def platform_profile(system: str | None) -> PlatformProfile:
    """Return the profile of the named system, or of the running one if None."""
    name = platform.system() if system is None else system
    canonical = _SYSTEM_NAMES.get(name.lower())
    if canonical is None:
        raise PortError(
            PortErrorCode.FUNCTION_NOT_IMPLEMENTED,
            ValueError(f"unsupported system: {name}"),
        )
    return _profile_for(canonical)


def set_parity(settings: TermSettings, parity: Parity | int, profile: PlatformProfile) -> None:
    """Configure the parity bits of the settings."""
    try:
        parity = Parity(parity)
    except ValueError:
        raise PortError(PortErrorCode.INVALID_PARITY) from None
    parenb = profile.const("PARENB")
    parodd = profile.const("PARODD")
    inpck = profile.const("INPCK")
    cmspar = profile.cmspar

    if parity in (Parity.MARK, Parity.SPACE) and cmspar == 0:
        raise PortError(PortErrorCode.INVALID_PARITY)

    if parity is Parity.NONE:
        settings.cflag &= ~(parenb | parodd | cmspar)
        settings.iflag &= ~inpck
        return

    settings.cflag |= parenb
    if parity in (Parity.ODD, Parity.MARK):
        settings.cflag |= parodd
    else:
        settings.cflag &= ~parodd
    if parity in (Parity.MARK, Parity.SPACE):
        settings.cflag |= cmspar
    else:
        settings.cflag &= ~cmspar
    settings.iflag |= inpck


def set_data_bits(settings: TermSettings, bits: int, profile: PlatformProfile) -> None:
    """Configure the character size; 0 selects 8 bits."""
    databits = profile.databits.get(bits)
    if databits is None:
        raise PortError(PortErrorCode.INVALID_DATA_BITS)
    settings.cflag &= ~profile.const("CSIZE")
    settings.cflag |= databits


def set_stop_bits(settings: TermSettings, bits: StopBits | int) -> None:
    """Configure the stop bits using the running system's flag values.

    One and a half stop bits are not supported on unix systems.
    """
    try:
        bits = StopBits(bits)
    except ValueError:
        raise PortError(PortErrorCode.INVALID_STOP_BITS) from None
    if bits is StopBits.ONE_POINT_FIVE:
        raise PortError(PortErrorCode.INVALID_STOP_BITS)
    cstopb = platform_profile(None).const("CSTOPB")
    if bits is StopBits.ONE:
        settings.cflag &= ~cstopb
    else:
        settings.cflag |= cstopb


def set_cts_rts(settings: TermSettings, enable: bool, profile: PlatformProfile) -> None:
    """Enable or disable RTS/CTS hardware flow control."""
    if enable:
        settings.cflag |= profile.crtscts
    else:
        settings.cflag &= ~profile.crtscts


def set_raw_mode(settings: TermSettings, profile: PlatformProfile) -> None:
    """Put the settings in raw mode with blocking single-byte reads."""
    c = profile.const
    settings.cflag |= c("CREAD") | c("CLOCAL")

    for name in ("ICANON", "ECHO", "ECHOE", "ECHOK", "ECHONL",
                 "ECHOCTL", "ECHOPRT", "ECHOKE", "ISIG", "IEXTEN"):
        settings.lflag &= ~c(name)

    for name in ("IXON", "IXOFF", "IXANY", "INPCK", "IGNPAR", "PARMRK",
                 "ISTRIP", "IGNBRK", "BRKINT", "INLCR", "IGNCR", "ICRNL"):
        settings.iflag &= ~c(name)
    settings.iflag &= ~profile.iuclc

    settings.oflag &= ~c("OPOST")

    vmin, vtime = c("VMIN"), c("VTIME")
    needed = max(vmin, vtime) + 1
    if len(settings.cc) < needed:
        settings.cc.extend([0] * (needed - len(settings.cc)))
    settings.cc[vmin] = 1
    settings.cc[vtime] = 0


def set_baudrate(settings: TermSettings, speed: int, profile: PlatformProfile) -> bool:
    """Set a standard speed; return True when the speed needs special handling.

    A speed of 0 selects 9600 baud. Speeds missing from the profile's table
    leave the settings untouched.
    """
    baudrate = profile.baudrates.get(speed)
    if baudrate is None:
        return True
    if profile.baud_in_cflag:
        for rate in profile.baudrates.values():
            settings.cflag &= ~rate
        settings.cflag |= baudrate
    settings.ispeed = baudrate
    settings.ospeed = baudrate
    return False