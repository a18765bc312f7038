"""Parsing of Windows device instance identifiers."""

from __future__ import annotations

import re

from .details import PortDetails

_USB_ID = re.compile(r"VID_(....)&PID_(....)(\\(\w+)\Z)?", re.ASCII)
_FTDI_ID = re.compile(r"VID_(....)\+PID_(....)(\+(\w+))?", re.ASCII)


def parse_device_id(device_id: str) -> PortDetails:
    """Extract USB VID, PID and serial number from a device instance id.

    Ids of the stock USB driver (``USB\\...``) and of the FTDI driver
    (``FTDIBUS\\...``) are understood; anything else, or an id that does
    not parse, gives details with ``is_usb`` False.
    """
    if device_id.startswith("USB"):
        pattern = _USB_ID
    elif device_id.startswith("FTDIBUS"):
        pattern = _FTDI_ID
    else:
        return PortDetails()
    match = pattern.search(device_id)
    if match is None:
        return PortDetails()
    return PortDetails(
        is_usb=True,
        vid=match[1],
        pid=match[2],
        serial_number=match[4] or "",
    )