"""USB details of serial ports read from the Linux sysfs tree."""

from __future__ import annotations

import os

from .details import PortDetails

SYS_CLASS_TTY = "/sys/class/tty"


def _real_path(path: str) -> str:
    try:
        return os.path.realpath(path, strict=True)
    except OSError as exc:
        raise OSError(f"Can't determine real path of {path}: {exc}") from exc


def get_port_details(port_path: str, sys_class_tty: str = SYS_CLASS_TTY) -> PortDetails:
    """Return the details of the port at port_path.

    Ports without a sysfs device entry yield an empty PortDetails.
    """
    port_name = os.path.basename(port_path)
    device_path = os.path.join(sys_class_tty, port_name, "device")
    try:
        os.stat(device_path)
    except OSError:
        return PortDetails()

    real_device_path = _real_path(device_path)
    subsystem = os.path.basename(_real_path(os.path.join(real_device_path, "subsystem")))

    result = PortDetails(name=port_path)
    if subsystem == "usb-serial":
        parse_usb_sysfs(os.path.dirname(os.path.dirname(real_device_path)), result)
    elif subsystem == "usb":
        parse_usb_sysfs(os.path.dirname(real_device_path), result)
    return result


def parse_usb_sysfs(usb_device_path: str, details: PortDetails) -> PortDetails:
    """Fill details with the VID, PID and serial number of a USB device directory."""
    vid = read_line(os.path.join(usb_device_path, "idVendor"))
    pid = read_line(os.path.join(usb_device_path, "idProduct"))
    serial_number = read_line(os.path.join(usb_device_path, "serial"))
    details.is_usb = True
    details.vid = vid
    details.pid = pid
    details.serial_number = serial_number
    return details


def read_line(filename: str) -> str:
    """Return the first line of a file without its line ending.

    A missing file yields an empty string; an empty file raises EOFError.
    """
    try:
        with open(filename, encoding="utf-8", errors="replace", newline="") as handle:
            line = handle.readline()
    except FileNotFoundError:
        return ""
    if not line:
        raise EOFError(f"{filename}: unexpected end of file")
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line