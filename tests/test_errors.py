import pytest

from serialkit.errors import PortError, PortErrorCode


@pytest.mark.parametrize(
    "code, text",
    [
        (PortErrorCode.PORT_BUSY, "Serial port busy"),
        (PortErrorCode.PORT_NOT_FOUND, "Serial port not found"),
        (PortErrorCode.INVALID_SERIAL_PORT, "Invalid serial port"),
        (PortErrorCode.PERMISSION_DENIED, "Permission denied"),
        (PortErrorCode.INVALID_SPEED, "Port speed invalid or not supported"),
        (PortErrorCode.INVALID_DATA_BITS, "Port data bits invalid or not supported"),
        (PortErrorCode.INVALID_PARITY, "Port parity invalid or not supported"),
        (PortErrorCode.INVALID_STOP_BITS, "Port stop bits invalid or not supported"),
        (PortErrorCode.INVALID_TIMEOUT_VALUE, "Timeout value invalid or not supported"),
        (PortErrorCode.ERROR_ENUMERATING_PORTS, "Could not enumerate serial ports"),
        (PortErrorCode.PORT_CLOSED, "Port has been closed"),
        (PortErrorCode.FUNCTION_NOT_IMPLEMENTED, "Function not implemented"),
    ],
)
def test_encoded_error_string(code, text):
    err = PortError(code)
    assert err.encoded_error_string() == text
    assert str(err) == text


def test_unknown_code_is_other_error():
    err = PortError(99)
    assert err.encoded_error_string() == "Other error"
    assert err.code == 99


def test_message_includes_cause():
    cause = OSError("boom")
    err = PortError(PortErrorCode.INVALID_SERIAL_PORT, caused_by=cause)
    assert str(err) == "Invalid serial port: boom"
    assert err.caused_by is cause


def test_int_code_is_converted_to_enum():
    err = PortError(10)
    assert err.code is PortErrorCode.PORT_CLOSED


def test_can_be_raised_and_caught():
    err = PortError(PortErrorCode.PORT_CLOSED, caused_by=ValueError("x"))
    assert err.encoded_error_string() == "Port has been closed"
    with pytest.raises(PortError, match="^Port has been closed: x$") as info:
        raise err
    assert info.value.code == PortErrorCode.PORT_CLOSED
    assert info.value.caused_by.args == ("x",)