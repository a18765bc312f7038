import os
import pty
import termios
import threading
import time

import pytest

from serialkit.errors import PortError, PortErrorCode
from serialkit.mode import Mode, Parity, StopBits
from serialkit.port import NO_TIMEOUT, get_ports_list, open_port


@pytest.fixture
def fake_tty():
    master, slave = pty.openpty()
    try:
        yield master, os.ttyname(slave), slave
    finally:
        for fd in (master, slave):
            try:
                os.close(fd)
            except OSError:
                pass


def test_read_and_close_concurrency(fake_tty):
    _, name, _ = fake_tty
    port = open_port(name, Mode())
    assert not port.closed
    result = {}

    def reader():
        try:
            result["data"] = port.read(100)
        except PortError as exc:
            result["code"] = exc.code

    thread = threading.Thread(target=reader)
    thread.start()
    time.sleep(0.2)
    port.close()
    thread.join(5)
    assert not thread.is_alive()
    assert port.closed
    assert "data" not in result
    assert result.get("code") == PortErrorCode.PORT_CLOSED


def test_double_close_is_noop(fake_tty):
    _, name, _ = fake_tty
    port = open_port(name, Mode())
    port.close()
    port.close()
    assert port.closed


def test_read_after_close_raises(fake_tty):
    _, name, _ = fake_tty
    port = open_port(name, Mode())
    port.close()
    with pytest.raises(PortError) as info:
        port.read(10)
    assert info.value.code == PortErrorCode.PORT_CLOSED


def test_context_manager_closes(fake_tty):
    _, name, _ = fake_tty
    with open_port(name, Mode()) as port:
        assert not port.closed
    assert port.closed


def test_write_reaches_other_side(fake_tty):
    master, name, _ = fake_tty
    with open_port(name, Mode(baud_rate=9600)) as port:
        assert port.write(b"10,20,30\n\r") == 10
        port.drain()
        assert os.read(master, 100) == b"10,20,30\n\r"


def test_read_receives_data(fake_tty):
    master, name, _ = fake_tty
    with open_port(name, Mode()) as port:
        port.set_read_timeout(2)
        os.write(master, b"abc")
        data = b""
        while len(data) < 3:
            chunk = port.read(100)
            assert chunk
            data += chunk
        assert data == b"abc"


def test_read_timeout_returns_empty(fake_tty):
    _, name, _ = fake_tty
    with open_port(name, Mode()) as port:
        port.set_read_timeout(0.05)
        start = time.monotonic()
        assert port.read(10) == b""
        assert time.monotonic() - start < 2


def test_reset_input_buffer_discards_data(fake_tty):
    master, name, _ = fake_tty
    with open_port(name, Mode()) as port:
        os.write(master, b"xyz")
        time.sleep(0.1)
        port.reset_input_buffer()
        port.set_read_timeout(0.05)
        assert port.read(10) == b""


def test_invalid_read_timeout(fake_tty):
    _, name, _ = fake_tty
    with open_port(name, Mode()) as port:
        with pytest.raises(PortError) as info:
            port.set_read_timeout(-2)
        assert info.value.code == PortErrorCode.INVALID_TIMEOUT_VALUE
        port.set_read_timeout(NO_TIMEOUT)
        assert port.read_timeout is None


def test_open_applies_defaults_and_raw_mode(fake_tty):
    _, name, slave = fake_tty
    with open_port(name, Mode()) as port:
        assert not port.closed
        assert port.read_timeout is None
        iflag, oflag, cflag, lflag, ispeed, ospeed, cc = termios.tcgetattr(slave)
        assert ospeed == termios.B9600
        assert cflag & termios.CSIZE == termios.CS8
        assert lflag & termios.ICANON == 0
        assert lflag & termios.ECHO == 0
        assert oflag & termios.OPOST == 0
        assert cc[termios.VMIN] == 1
    assert port.closed


def test_set_mode_rejects_bad_data_bits(fake_tty):
    _, name, _ = fake_tty
    with open_port(name, Mode()) as port:
        with pytest.raises(PortError) as info:
            port.set_mode(Mode(data_bits=9))
        assert info.value.code == PortErrorCode.INVALID_DATA_BITS


def test_set_mode_rejects_one_and_half_stop_bits(fake_tty):
    _, name, _ = fake_tty
    with open_port(name, Mode()) as port:
        with pytest.raises(PortError) as info:
            port.set_mode(Mode(stop_bits=StopBits.ONE_POINT_FIVE))
        assert info.value.code == PortErrorCode.INVALID_STOP_BITS


def test_open_with_bad_mode_is_invalid_serial_port(fake_tty):
    _, name, _ = fake_tty
    with pytest.raises(PortError) as info:
        open_port(name, Mode(data_bits=9))
    assert info.value.code == PortErrorCode.INVALID_SERIAL_PORT
    assert "error configuring port" in str(info.value)


def test_open_missing_port_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_port(str(tmp_path / "ttyUSB9"), Mode())


def test_open_regular_file_is_invalid_serial_port(tmp_path):
    path = tmp_path / "plain"
    path.write_bytes(b"")
    with pytest.raises(PortError) as info:
        open_port(str(path), Mode())
    assert info.value.code == PortErrorCode.INVALID_SERIAL_PORT
    assert "error getting term settings" in str(info.value)


def test_get_ports_list_filters_names(tmp_path):
    for name in ("ttyUSB0", "ttyACM12", "random", "ttyS0"):
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "ttyUSB1").mkdir()
    folder = str(tmp_path)
    assert get_ports_list(folder) == [f"{folder}/ttyACM12", f"{folder}/ttyUSB0"]


def test_get_ports_list_missing_folder(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_ports_list(str(tmp_path / "absent"))