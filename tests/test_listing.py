from unittest import mock

import pytest

from serialkit.enumerator.details import PortEnumerationError
from serialkit.enumerator.listing import get_detailed_ports_list
from serialkit.errors import PortError, PortErrorCode
from serialkit.port import get_ports_list


@pytest.mark.parametrize("system", ["FreeBSD", "OpenBSD"])
def test_bsd_systems_raise_without_cause(system):
    with mock.patch("platform.system", return_value=system):
        with pytest.raises(PortEnumerationError) as info:
            get_detailed_ports_list()
    assert info.value.caused_by is None
    assert str(info.value) == "Error while enumerating serial ports"


def test_unsupported_system_reports_not_implemented():
    with mock.patch("platform.system", return_value="Windows"):
        with pytest.raises(PortEnumerationError) as info:
            get_detailed_ports_list()
    cause = info.value.caused_by
    assert isinstance(cause, PortError)
    assert cause.code is PortErrorCode.FUNCTION_NOT_IMPLEMENTED


def test_linux_listing_matches_port_list():
    with mock.patch("platform.system", return_value="Linux"):
        ports = get_ports_list()
        details = get_detailed_ports_list()
    assert len(details) == len(ports)
    assert {d.name for d in details} <= set(ports) | {""}
    assert all(d.vid == "" for d in details if not d.is_usb)