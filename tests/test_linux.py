import os

import pytest

from serialkit.enumerator.details import PortDetails
from serialkit.enumerator.linux import get_port_details, parse_usb_sysfs, read_line


def _usb_device(root, vid="2341", pid="0043", serial="FAKE0001"):
    device = root / "devices" / "usb1" / "1-1"
    device.mkdir(parents=True)
    (device / "idVendor").write_text(vid + "\n")
    (device / "idProduct").write_text(pid + "\n")
    if serial is not None:
        (device / "serial").write_text(serial + "\n")
    return device


def _bus(root, name):
    bus = root / "bus" / name
    bus.mkdir(parents=True)
    return bus


def _tty_link(root, port_name, target):
    tty = root / "class" / "tty" / port_name
    tty.mkdir(parents=True)
    os.symlink(target, tty / "device")
    return root / "class" / "tty"


def test_usb_subsystem(tmp_path):
    device = _usb_device(tmp_path)
    interface = device / "1-1:1.0"
    interface.mkdir()
    os.symlink(_bus(tmp_path, "usb"), interface / "subsystem")
    sys_tty = _tty_link(tmp_path, "ttyACM0", interface)

    details = get_port_details("/dev/ttyACM0", str(sys_tty))
    assert details == PortDetails(
        name="/dev/ttyACM0", is_usb=True, vid="2341", pid="0043", serial_number="FAKE0001"
    )


def test_usb_serial_subsystem(tmp_path):
    device = _usb_device(tmp_path, vid="0403", pid="6001", serial="FAKE0002")
    port_dir = device / "1-1:1.0" / "ttyUSB0"
    port_dir.mkdir(parents=True)
    os.symlink(_bus(tmp_path, "usb-serial"), port_dir / "subsystem")
    sys_tty = _tty_link(tmp_path, "ttyUSB0", port_dir)

    details = get_port_details("/dev/ttyUSB0", str(sys_tty))
    assert details.name == "/dev/ttyUSB0"
    assert details.is_usb is True
    assert (details.vid, details.pid, details.serial_number) == ("0403", "6001", "FAKE0002")


def test_other_subsystem_keeps_only_name(tmp_path):
    device = tmp_path / "devices" / "pnp0" / "00:04"
    device.mkdir(parents=True)
    os.symlink(_bus(tmp_path, "pnp"), device / "subsystem")
    sys_tty = _tty_link(tmp_path, "ttyS0", device)

    details = get_port_details("/dev/ttyS0", str(sys_tty))
    assert details == PortDetails(name="/dev/ttyS0")


def test_missing_device_entry_gives_empty_details(tmp_path):
    (tmp_path / "class" / "tty").mkdir(parents=True)
    details = get_port_details("/dev/ttyUSB9", str(tmp_path / "class" / "tty"))
    assert details == PortDetails()


def test_missing_subsystem_raises(tmp_path):
    device = tmp_path / "devices" / "x"
    device.mkdir(parents=True)
    sys_tty = _tty_link(tmp_path, "ttyUSB0", device)
    with pytest.raises(OSError, match="Can't determine real path"):
        get_port_details("/dev/ttyUSB0", str(sys_tty))


def test_parse_usb_sysfs_missing_serial(tmp_path):
    device = _usb_device(tmp_path, serial=None)
    details = PortDetails(name="/dev/ttyACM1")
    result = parse_usb_sysfs(str(device), details)
    assert result is details
    assert details.is_usb is True
    assert (details.vid, details.pid, details.serial_number) == ("2341", "0043", "")


def test_read_line_missing_file(tmp_path):
    assert read_line(str(tmp_path / "absent")) == ""


def test_read_line_strips_line_endings(tmp_path):
    crlf = tmp_path / "crlf"
    crlf.write_bytes(b"abc\r\nsecond\n")
    plain = tmp_path / "plain"
    plain.write_bytes(b"xyz")
    assert read_line(str(crlf)) == "abc"
    assert read_line(str(plain)) == "xyz"


def test_read_line_empty_file_raises(tmp_path):
    empty = tmp_path / "empty"
    empty.write_bytes(b"")
    with pytest.raises(EOFError):
        read_line(str(empty))