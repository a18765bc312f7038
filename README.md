# serialkit

Serial port access for Linux, macOS, FreeBSD and OpenBSD, using only the
standard library. Open a port, set its speed, parity, data bits and stop
bits, read and write bytes, drive the DTR/RTS lines, read the modem status
lines, and list the ports on the machine, with USB vendor/product IDs and
serial numbers on Linux.

## Installation

```
pip install serialkit
```

## Listing ports

From the shell:

```
serialkit-portlist
```

Each port is printed as `Port: <name>`, followed by its product name when
known and, for USB devices, its `VID:PID` and serial number. If the ports
cannot be listed, the error is printed on standard error and the exit status
is 1.

From Python:

```python
from serialkit.port import get_ports_list
from serialkit.enumerator.listing import get_detailed_ports_list

for name in get_ports_list("/dev"):
    print(name)

for details in get_detailed_ports_list():
    print(details.name, details.is_usb, details.vid, details.pid, details.serial_number)
```

`get_ports_list()` scans a device folder (`/dev` by default) and returns the
matching device paths sorted by name: `ttyS`, `ttyUSB`, `ttyACM`, `ttyAMA`,
`rfcomm` and similar names on Linux, `cu.*` and `tty.*` on macOS and the
BSDs. `ttyS`/`ttyHS` placeholders that cannot be opened are left out.

`get_detailed_ports_list()` returns `PortDetails` objects
(`serialkit.enumerator.details`) with `name`, `is_usb`, `vid`, `pid`,
`serial_number` and `product`, read from `/sys/class/tty`. The lower-level
helpers are in `serialkit.enumerator.linux`: `get_port_details(port_path,
sys_class_tty)`, `parse_usb_sysfs(usb_device_path, details)` and
`read_line(filename)`.

`serialkit.enumerator.windows_ids.parse_device_id(device_id)` turns a Windows
device instance id such as `USB\VID_16C0&PID_0483\12345` or
`FTDIBUS\VID_0403+PID_6001+A6004CCFA\0000` into a `PortDetails`.

## Opening and configuring a port

A `Mode` with no arguments means 9600 baud, 8 data bits, no parity, one stop
bit (9600 N81). Setting `initial_status_bits` to a `ModemOutputBits(rts=...,
dtr=...)` sets those lines when the port is opened.

```python
from serialkit.mode import Mode, Parity, StopBits
from serialkit.port import open_port

mode = Mode(baud_rate=57600, data_bits=7, parity=Parity.EVEN, stop_bits=StopBits.ONE)

with open_port("/dev/ttyUSB0", mode) as port:
    port.write(b"10,20,30\n\r")
    port.set_read_timeout(1.0)
    data = port.read(100)  # b"" when the timeout expires
    print(data)
```

The port is opened in raw mode with RTS/CTS flow control off and exclusive
access. On an open `UnixPort`:

- `set_mode(mode)` changes the configuration.
- `read(size)` blocks until data arrives, or until the timeout given to
  `set_read_timeout(seconds)` expires; `set_read_timeout(NO_TIMEOUT)`
  (from `serialkit.port`) makes it block forever again.
- `write(data)` returns the number of bytes written.
- `set_dtr(bool)` and `set_rts(bool)` drive the output lines;
  `get_modem_status_bits()` returns a `ModemStatusBits` with `cts`, `dsr`,
  `ri` and `dcd`.
- `drain()`, `reset_input_buffer()`, `reset_output_buffer()` and
  `send_break(seconds)`.
- `close()` may be called more than once. A `read` running in another thread
  when the port is closed raises `PortError` with code `PORT_CLOSED`.

Speeds outside the standard table are set with termios2 on Linux and with
`IOSSIOSPEED` on macOS; elsewhere they raise `INVALID_SPEED`.

The termios flag handling lives in `serialkit.termsettings`
(`TermSettings`, `platform_profile`, `set_parity`, `set_data_bits`,
`set_stop_bits`, `set_cts_rts`, `set_raw_mode`, `set_baudrate`), and
`serialkit.unixutils` holds the `Pipe` and `FDSet`/`select_fds` helpers used
to interrupt blocking reads.

## Errors

A failure on a port raises `serialkit.errors.PortError`. Its `code` is a
`PortErrorCode` such as `PORT_BUSY`, `PERMISSION_DENIED`,
`INVALID_SERIAL_PORT`, `INVALID_SPEED`, `INVALID_PARITY` or `PORT_CLOSED`,
and `caused_by` holds the underlying error when there is one. A failure while
listing ports in detail raises
`serialkit.enumerator.details.PortEnumerationError`.

## Limitations

- Only POSIX systems are supported; ports cannot be opened on Windows.
- The detailed listing works on Linux only; on other systems
  `get_detailed_ports_list()` raises `PortEnumerationError`.
- One and a half stop bits are not supported, and mark and space parity are
  supported on Linux only.

## Running the tests

```
pip install serialkit[test]
pytest
```