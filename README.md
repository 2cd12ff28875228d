# serialline

Read and change the settings of a serial line on Linux by working directly
on an open file descriptor. The package covers line speed, parity, data
and stop bits, flow control, read timing, modem-control signals and queue
management.

## Installation

```
pip install serialline
```

The package depends only on the standard library. It uses `termios` and
`fcntl` and so runs on POSIX systems. The baud rates and flags it relies on
are those found on Linux.

## Usage

Open the device yourself and pass the file descriptor to the functions in
`serialline.lineconfig`:

```python
import os
from datetime import timedelta

from serialline.lineconfig import (
    Parity,
    Queue,
    data_bits,
    flush,
    line_speed,
    set_data_bits,
    set_line_speed,
    set_parity,
    set_raw_mode,
    set_read_mode,
    set_stop_bits,
)

fd = os.open("/dev/ttyUSB0", os.O_RDWR | os.O_NOCTTY)
try:
    set_raw_mode(fd)
    set_line_speed(fd, 115_200)
    set_data_bits(fd, 8)
    set_parity(fd, Parity.NONE)
    set_stop_bits(fd, 1)
    set_read_mode(fd, 0, timedelta(milliseconds=500))
    flush(fd, Queue.BOTH)

    print(line_speed(fd), data_bits(fd))
finally:
    os.close(fd)
```

Each setter reads the current attributes, changes only what it is about,
and applies the result at once (`TCSANOW`). `attributes` and
`set_attributes` give direct access to the attribute list that
`termios.tcgetattr` returns.

### Settings

- `line_speed` / `set_line_speed`: the standard rates from 0 up to
  4,000,000 baud. Only rates that the platform defines are accepted. Any
  other rate raises `InvalidValueError`. The setter sets input and output
  speed together, and the getter reports the output speed.
- `parity` / `set_parity`: `set_parity` accepts `Parity.NONE`, `EVEN`,
  `ODD`, `MARK` and `SPACE`. `parity` reports only `NONE`, `EVEN` or `ODD`,
  so a line set to mark parity reads back as `ODD` and one set to space
  parity reads back as `EVEN`.
- `parity_check` / `set_parity_check`: `ParityCheck.NONE`, `STRIP`,
  `REPLACE`, `MARK`.
- `data_bits` / `set_data_bits`: 5 to 8.
- `stop_bits` / `set_stop_bits`: 1 or 2.
- `read_mode` / `set_read_mode`: the minimum byte count (0–255) and the
  timeout that a blocking read waits for. `read_mode` returns a tuple of
  `(int, timedelta)`. `set_read_mode` takes the timeout as a `timedelta` or
  as a number of seconds. It is stored in whole tenths of a second, rounded
  down and capped at 25.5 seconds. A negative timeout raises
  `InvalidValueError`.
- `hardware_flow_control` / `set_hardware_flow_control`: RTS/CTS.
- `software_flow_control` / `set_software_flow_control`: XON/XOFF, given as
  a pair of flags `(incoming, outgoing)`. The setter also clears `IXANY`
  and sets the start and stop characters to XON (17) and XOFF (19).
- `set_raw_mode`: non-canonical raw mode with 8 data bits and no parity.
  It also sets a minimum read length of 1 and no timeout.
- `enable_read`: turns the receiver on (`CREAD`).
- `ignore_carrier_detect`: sets `CLOCAL`.

### Signals

`cts`, `rts`, `dcd`, `ri`, `dsr` and `dtr` report the state of each signal
as a `bool`. `set_rts` and `set_dtr` assert or release a line. `status`
returns the raw modem-control bit mask.

### Queues

`flush(fd, queue_type)` throws away pending data in `Queue.INPUT`,
`Queue.OUTPUT` or `Queue.BOTH`. `drain` waits until all output has been
sent. `input_len` and `output_len` report how many bytes are waiting.
`send_stop` and `send_start` send XOFF and XON.

### Errors

`InvalidValueError` is raised in two cases: when the device rejects a
setting with `EINVAL`, and when a value has no matching setting, such as an
unknown speed, data-bit count, stop-bit count or enum member.
`InvalidValueError` is a subclass of both `UartError` and `ValueError`.
Other failures of the underlying system call are raised as `UartError`,
with the system error number in its `errno` attribute and the original
exception attached as the cause.

## What it does not do

The package only configures and queries a line that is already open. It
does not open or close devices, list available ports, or read and write
data. For those, use `os.open`, `os.read` and `os.write` on the same file
descriptor.