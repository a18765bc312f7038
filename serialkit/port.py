"""Serial ports on unix systems: opening, configuration, I/O and listing."""

from __future__ import annotations

import contextlib
import errno
import fcntl
import os
import platform
import re
import struct
import termios
import threading
import time
from typing import Iterator

from .errors import PortError, PortErrorCode
from .mode import Mode, ModemStatusBits
from .termsettings import (
    PlatformProfile,
    TermSettings,
    from_attrs,
    platform_profile,
    set_baudrate,
    set_cts_rts,
    set_data_bits,
    set_parity,
    set_raw_mode,
    set_stop_bits,
)
from .unixutils.fdselect import FDSet, select_fds
from .unixutils.pipe import Pipe

NO_TIMEOUT = None
"""Pass to :meth:`UnixPort.set_read_timeout` to make reads block forever."""

DEV_FOLDER = "/dev"

_LINUX_IOCTLS = {
    "TIOCMGET": 0x5415,
    "TIOCMSET": 0x5418,
    "TIOCEXCL": 0x540C,
    "TIOCNXCL": 0x540D,
    "TIOCSBRK": 0x5427,
    "TIOCCBRK": 0x5428,
}

_BSD_IOCTLS = {
    "TIOCMGET": 0x4004746A,
    "TIOCMSET": 0x8004746D,
    "TIOCEXCL": 0x2000740D,
    "TIOCNXCL": 0x2000740E,
    "TIOCSBRK": 0x2000747B,
    "TIOCCBRK": 0x2000747A,
}

_MODEM_BITS = {
    "TIOCM_DTR": 0x002,
    "TIOCM_RTS": 0x004,
    "TIOCM_CTS": 0x020,
    "TIOCM_CD": 0x040,
    "TIOCM_RI": 0x080,
    "TIOCM_DSR": 0x100,
}

# Linux termios2 handling for speeds outside the standard table.
_TCGETS2 = 0x802C542A
_TCSETS2 = 0x402C542B
_CBAUD = 0o10017
_BOTHER = 0o10000
_TERMIOS2 = struct.Struct("4IB19s2I")

_IOSSIOSPEED = 0x80045402

_LINUX_PORT_FILTER = re.compile(r"(ttyS|ttyHS|ttyUSB|ttyACM|ttyAMA|rfcomm|ttyO|ttymxc)[0-9]{1,3}")
_BSD_PORT_FILTER = re.compile(r"^(cu|tty)\..*")


def _ioctl_number(name: str, system: str) -> int:
    value = getattr(termios, name, None)
    if value is not None:
        return value
    if name in _MODEM_BITS:
        return _MODEM_BITS[name]
    table = _LINUX_IOCTLS if system == "Linux" else _BSD_IOCTLS
    return table[name]


def _wrapped(context: str, exc: BaseException) -> PortError:
    cause = RuntimeError(f"{context}: {exc}")
    cause.__cause__ = exc
    return PortError(PortErrorCode.INVALID_SERIAL_PORT, cause)


class _CloseLock:
    """Readers-writer lock: reads share it, closing takes it alone."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False

    @contextlib.contextmanager
    def reading(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                self._cond.notify_all()

    @contextlib.contextmanager
    def writing(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._writer = True
            while self._readers:
                self._cond.wait()
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class UnixPort:
    """An open serial port on a unix system."""

    def __init__(self, name: str, fd: int, profile: PlatformProfile) -> None:
        self.name = name
        self._fd = fd
        self._profile = profile
        self._read_timeout: float | None = NO_TIMEOUT
        self._close_lock = _CloseLock()
        self._close_signal: Pipe | None = None
        self._state_lock = threading.Lock()
        self._opened = True

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def closed(self) -> bool:
        return not self._opened

    @property
    def read_timeout(self) -> float | None:
        return self._read_timeout

    def _ioctl(self, name: str) -> int:
        return _ioctl_number(name, self._profile.system)

    # terminal attributes and modem bits

    def _get_term_settings(self) -> TermSettings:
        return from_attrs(termios.tcgetattr(self._fd))

    def _set_term_settings(self, settings: TermSettings) -> None:
        termios.tcsetattr(self._fd, termios.TCSANOW, settings.to_attrs())

    def _get_modem_bits(self) -> int:
        buf = fcntl.ioctl(self._fd, self._ioctl("TIOCMGET"), struct.pack("i", 0))
        return struct.unpack("i", buf)[0]

    def _set_modem_bits(self, status: int) -> None:
        fcntl.ioctl(self._fd, self._ioctl("TIOCMSET"), struct.pack("i", status))

    def _set_modem_bit(self, name: str, value: bool) -> None:
        status = self._get_modem_bits()
        bit = self._ioctl(name)
        status = status | bit if value else status & ~bit
        self._set_modem_bits(status)

    def _acquire_exclusive_access(self) -> None:
        fcntl.ioctl(self._fd, self._ioctl("TIOCEXCL"), 0)

    def _release_exclusive_access(self) -> None:
        fcntl.ioctl(self._fd, self._ioctl("TIOCNXCL"), 0)

    def _set_special_baudrate(self, speed: int) -> None:
        system = self._profile.system
        if system == "Linux" and platform.machine() != "ppc64le":
            buf = fcntl.ioctl(self._fd, _TCGETS2, bytes(_TERMIOS2.size))
            iflag, oflag, cflag, lflag, line, cc, _, _ = _TERMIOS2.unpack(buf)
            cflag = (cflag & ~_CBAUD) | _BOTHER
            packed = _TERMIOS2.pack(iflag, oflag, cflag, lflag, line, cc, speed, speed)
            fcntl.ioctl(self._fd, _TCSETS2, packed)
        elif system == "Darwin":
            fcntl.ioctl(self._fd, _IOSSIOSPEED, struct.pack("L", speed))
        else:
            raise PortError(PortErrorCode.INVALID_SPEED)

    # public interface

    def set_mode(self, mode: Mode) -> None:
        """Apply baud rate, parity, data bits and stop bits."""
        settings = self._get_term_settings()
        set_parity(settings, mode.parity, self._profile)
        set_data_bits(settings, mode.data_bits, self._profile)
        set_stop_bits(settings, mode.stop_bits)
        special = set_baudrate(settings, mode.baud_rate, self._profile)
        self._set_term_settings(settings)
        if special:
            # Must come last, otherwise some systems reject the port.
            self._set_special_baudrate(mode.baud_rate)

    def read(self, size: int) -> bytes:
        """Read up to size bytes.

        Blocks until data arrives; returns b"" when the read timeout expires
        and raises PortError(PORT_CLOSED) if the port is or gets closed.
        """
        with self._close_lock.reading():
            if not self._opened or self._close_signal is None:
                raise PortError(PortErrorCode.PORT_CLOSED)
            signal_fd = self._close_signal.read_fd()
            deadline = None
            if self._read_timeout is not NO_TIMEOUT:
                deadline = time.monotonic() + self._read_timeout
            fds = FDSet(self._fd, signal_fd)
            while True:
                timeout = None
                if deadline is not None:
                    timeout = max(0.0, deadline - time.monotonic())
                result = select_fds(fds, None, fds, timeout)
                if result.is_readable(signal_fd):
                    raise PortError(PortErrorCode.PORT_CLOSED)
                if not result.is_readable(self._fd):
                    return b""
                data = os.read(self._fd, size)
                if not data:
                    # A disconnected device stays readable with no data.
                    raise PortError(PortErrorCode.PORT_CLOSED)
                return data

    def write(self, data: bytes) -> int:
        """Write data and return the number of bytes written."""
        return os.write(self._fd, data)

    def drain(self) -> None:
        """Wait until all output has been transmitted."""
        termios.tcdrain(self._fd)

    def reset_input_buffer(self) -> None:
        """Discard received data that has not been read."""
        termios.tcflush(self._fd, termios.TCIFLUSH)

    def reset_output_buffer(self) -> None:
        """Discard written data that has not been transmitted."""
        termios.tcflush(self._fd, termios.TCOFLUSH)

    def set_dtr(self, dtr: bool) -> None:
        """Set the DataTerminalReady modem bit."""
        self._set_modem_bit("TIOCM_DTR", dtr)

    def set_rts(self, rts: bool) -> None:
        """Set the RequestToSend modem bit."""
        self._set_modem_bit("TIOCM_RTS", rts)

    def get_modem_status_bits(self) -> ModemStatusBits:
        """Return the modem input status bits."""
        status = self._get_modem_bits()
        return ModemStatusBits(
            cts=bool(status & self._ioctl("TIOCM_CTS")),
            dsr=bool(status & self._ioctl("TIOCM_DSR")),
            ri=bool(status & self._ioctl("TIOCM_RI")),
            dcd=bool(status & self._ioctl("TIOCM_CD")),
        )

    def set_read_timeout(self, timeout: float | None) -> None:
        """Set the read timeout in seconds, or NO_TIMEOUT to block forever."""
        if timeout is not NO_TIMEOUT and timeout < 0:
            raise PortError(PortErrorCode.INVALID_TIMEOUT_VALUE)
        self._read_timeout = timeout

    def send_break(self, duration: float) -> None:
        """Send a break condition lasting duration seconds."""
        fcntl.ioctl(self._fd, self._ioctl("TIOCSBRK"), 0)
        time.sleep(duration)
        fcntl.ioctl(self._fd, self._ioctl("TIOCCBRK"), 0)

    def close(self) -> None:
        """Close the port; pending reads fail with PORT_CLOSED. Idempotent."""
        with self._state_lock:
            if not self._opened:
                return
            self._opened = False
        with contextlib.suppress(OSError):
            self._release_exclusive_access()
        os.close(self._fd)
        if self._close_signal is not None:
            with contextlib.suppress(OSError):
                self._close_signal.write(b"\0")
            with self._close_lock.writing():
                self._close_signal.close()

    def __enter__(self) -> UnixPort:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"UnixPort({self.name!r}, {state})"


def open_port(port_name: str, mode: Mode | None = None) -> UnixPort:
    """Open and configure the serial port at port_name."""
    mode = Mode() if mode is None else mode
    profile = platform_profile(None)
    try:
        fd = os.open(port_name, os.O_RDWR | os.O_NOCTTY | os.O_NONBLOCK)
    except OSError as exc:
        if exc.errno == errno.EBUSY:
            raise PortError(PortErrorCode.PORT_BUSY) from exc
        if exc.errno == errno.EACCES:
            raise PortError(PortErrorCode.PERMISSION_DENIED) from exc
        raise

    port = UnixPort(port_name, fd, profile)

    def fail(context: str, exc: BaseException) -> PortError:
        with contextlib.suppress(OSError):
            port.close()
        return _wrapped(context, exc)

    try:
        settings = port._get_term_settings()
    except termios.error as exc:
        raise fail("error getting term settings", exc) from exc

    set_raw_mode(settings, profile)
    set_cts_rts(settings, False, profile)

    try:
        port._set_term_settings(settings)
    except termios.error as exc:
        raise fail("error setting term settings", exc) from exc

    bits = mode.initial_status_bits
    if bits is not None:
        try:
            status = port._get_modem_bits()
        except OSError as exc:
            raise fail("error getting modem bits status", exc) from exc
        for name, value in (("TIOCM_DTR", bits.dtr), ("TIOCM_RTS", bits.rts)):
            bit = port._ioctl(name)
            status = status | bit if value else status & ~bit
        try:
            port._set_modem_bits(status)
        except OSError as exc:
            raise fail("error setting modem bits status", exc) from exc

    try:
        port.set_mode(mode)
    except (PortError, OSError, termios.error) as exc:
        raise fail("error configuring port", exc) from exc

    os.set_blocking(fd, True)
    with contextlib.suppress(OSError):
        port._acquire_exclusive_access()

    pipe = Pipe()
    try:
        pipe.open()
    except OSError as exc:
        raise fail("error opening signaling pipe", exc) from exc
    port._close_signal = pipe
    return port


def _port_filter(system: str) -> re.Pattern[str]:
    return _LINUX_PORT_FILTER if system == "Linux" else _BSD_PORT_FILTER


def get_ports_list(dev_folder: str = DEV_FOLDER) -> list[str]:
    """List the serial ports found in dev_folder, sorted by name.

    Placeholder ``ttyS``/``ttyHS`` devices that cannot be opened are skipped.
    """
    pattern = _port_filter(platform_profile(None).system)
    with os.scandir(dev_folder) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    ports = []
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            continue
        if not pattern.search(entry.name):
            continue
        port_name = f"{dev_folder}/{entry.name}"
        if entry.name.startswith(("ttyS", "ttyHS")):
            try:
                port = open_port(port_name, Mode())
            except (PortError, OSError):
                continue
            port.close()
        ports.append(port_name)
    return ports