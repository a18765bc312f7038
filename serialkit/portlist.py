"""Command that lists the available serial ports with their details."""

from __future__ import annotations

import argparse
import sys

from .enumerator.details import PortDetails, PortEnumerationError
from .enumerator.listing import get_detailed_ports_list


def format_port(port: PortDetails) -> str:
    """Return the lines describing one port."""
    lines = [f"Port: {port.name}"]
    if port.product:
        lines.append(f"   Product Name: {port.product}")
    if port.is_usb:
        lines.append(f"   USB ID      : {port.vid}:{port.pid}")
        lines.append(f"   USB serial  : {port.serial_number}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """Print every serial port found; return the exit status."""
    parser = argparse.ArgumentParser(
        prog="portlist",
        description="List the available serial ports with their USB details.",
    )
    parser.parse_args(argv)
    try:
        ports = get_detailed_ports_list()
    except PortEnumerationError as exc:
        print(exc, file=sys.stderr)
        return 1
    for port in ports:
        print(format_port(port))
    return 0


if __name__ == "__main__":
    sys.exit(main())