"""Detailed listing of the serial ports of the running system."""

from __future__ import annotations

import platform

from ..errors import PortError, PortErrorCode
from .details import PortDetails, PortEnumerationError
from .linux import get_port_details


def get_detailed_ports_list() -> list[PortDetails]:
    """Return the serial ports with their USB details.

    Only Linux is supported; on other systems PortEnumerationError is raised.
    """
    system = platform.system()
    if system != "Linux":
        cause = None
        if system not in ("FreeBSD", "OpenBSD"):
            cause = PortError(PortErrorCode.FUNCTION_NOT_IMPLEMENTED)
        raise PortEnumerationError(cause)

    from ..port import get_ports_list

    try:
        ports = get_ports_list()
    except (PortError, OSError) as exc:
        raise PortEnumerationError(exc) from exc

    details = []
    for port in ports:
        try:
            details.append(get_port_details(port))
        except (OSError, EOFError) as exc:
            raise PortEnumerationError(exc) from exc
    return details