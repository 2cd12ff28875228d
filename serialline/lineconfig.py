"""Serial line configuration on top of POSIX terminal attributes and modem ioctls."""

from __future__ import annotations

import errno as _errno
import fcntl
import struct
import termios
from contextlib import contextmanager
from datetime import timedelta
from enum import Enum
from typing import Iterator

__all__ = [
    "UartError",
    "InvalidValueError",
    "Parity",
    "ParityCheck",
    "Queue",
    "attributes",
    "set_attributes",
    "line_speed",
    "set_line_speed",
    "parity",
    "set_parity",
    "parity_check",
    "set_parity_check",
    "data_bits",
    "set_data_bits",
    "stop_bits",
    "set_stop_bits",
    "set_raw_mode",
    "read_mode",
    "set_read_mode",
    "enable_read",
    "ignore_carrier_detect",
    "hardware_flow_control",
    "set_hardware_flow_control",
    "status",
    "cts",
    "rts",
    "set_rts",
    "dcd",
    "ri",
    "dsr",
    "dtr",
    "set_dtr",
    "software_flow_control",
    "set_software_flow_control",
    "send_stop",
    "send_start",
    "flush",
    "drain",
    "input_len",
    "output_len",
]

XON = 17
XOFF = 19

# Indices into the list returned by termios.tcgetattr().
_IFLAG, _OFLAG, _CFLAG, _LFLAG, _ISPEED, _OSPEED, _CC = range(7)

CMSPAR = getattr(termios, "CMSPAR", 0o10000000000)
TIOCINQ = getattr(termios, "TIOCINQ", termios.FIONREAD)
TIOCOUTQ = termios.TIOCOUTQ

_SPEEDS = (
    0, 50, 75, 110, 134, 150, 200, 300, 600, 1_200, 1_800, 2_400, 4_800,
    9_600, 19_200, 38_400, 57_600, 115_200, 230_400, 460_800, 500_000,
    576_000, 921_600, 1_000_000, 1_152_000, 1_500_000, 2_000_000,
    2_500_000, 3_000_000, 3_500_000, 4_000_000,
)

_SPEED_TO_BAUD = {
    speed: getattr(termios, f"B{speed}")
    for speed in _SPEEDS
    if hasattr(termios, f"B{speed}")
}
_BAUD_TO_SPEED = {baud: speed for speed, baud in _SPEED_TO_BAUD.items()}

_DATA_BITS_TO_CSIZE = {
    5: termios.CS5,
    6: termios.CS6,
    7: termios.CS7,
    8: termios.CS8,
}
_CSIZE_TO_DATA_BITS = {value: bits for bits, value in _DATA_BITS_TO_CSIZE.items()}


class UartError(Exception):
    """An operation on the serial line failed."""

    def __init__(self, message: str, errno: int | None = None) -> None:
        super().__init__(message)
        self.errno = errno


class InvalidValueError(UartError, ValueError):
    """A setting was out of range or rejected by the device."""

    def __init__(self, message: str = "invalid value", errno: int | None = None) -> None:
        super().__init__(message, errno)


class Parity(Enum):
    NONE = "none"
    EVEN = "even"
    ODD = "odd"
    MARK = "mark"
    SPACE = "space"


class ParityCheck(Enum):
    NONE = "none"
    STRIP = "strip"
    REPLACE = "replace"
    MARK = "mark"


class Queue(Enum):
    INPUT = "input"
    OUTPUT = "output"
    BOTH = "both"


def _os_error(exc: BaseException) -> UartError:
    if isinstance(exc, OSError):
        code, message = exc.errno, exc.strerror or str(exc)
    else:
        args = exc.args
        code = args[0] if args and isinstance(args[0], int) else None
        message = args[1] if len(args) > 1 else str(exc)
    return UartError(str(message), code)


def _cc_int(value: bytes | int) -> int:
    return value[0] if isinstance(value, (bytes, bytearray)) else int(value)


def _ioctl_int(fd: int, request: int, value: int = 0) -> int:
    try:
        result = fcntl.ioctl(fd, request, struct.pack("i", value))
    except OSError as exc:
        raise _os_error(exc) from exc
    return struct.unpack("i", result)[0]


@contextmanager
def _modify(fd: int) -> Iterator[list]:
    attr = attributes(fd)
    yield attr
    set_attributes(fd, attr)


def attributes(fd: int) -> list:
    """Return the terminal attributes of ``fd`` in termios list form."""
    try:
        return termios.tcgetattr(fd)
    except (termios.error, OSError) as exc:
        raise _os_error(exc) from exc


def set_attributes(fd: int, attr: list) -> None:
    """Apply terminal attributes immediately."""
    try:
        termios.tcsetattr(fd, termios.TCSANOW, attr)
    except (termios.error, OSError) as exc:
        error = _os_error(exc)
        if error.errno == _errno.EINVAL:
            raise InvalidValueError(errno=error.errno) from exc
        raise error from exc


def line_speed(fd: int) -> int:
    """Return the output line speed in bits per second."""
    baud = attributes(fd)[_OSPEED]
    try:
        return _BAUD_TO_SPEED[baud]
    except KeyError:
        raise InvalidValueError(f"unknown line speed code {baud}") from None


def set_line_speed(fd: int, line_speed: int) -> None:
    """Set both input and output line speed."""
    try:
        baud = _SPEED_TO_BAUD[line_speed]
    except (KeyError, TypeError):
        raise InvalidValueError(f"unsupported line speed {line_speed!r}") from None
    with _modify(fd) as attr:
        attr[_ISPEED] = baud
        attr[_OSPEED] = baud


def parity(fd: int) -> Parity:
    """Return the configured parity."""
    cflag = attributes(fd)[_CFLAG]
    if not cflag & termios.PARENB:
        return Parity.NONE
    if cflag & termios.PARODD:
        return Parity.ODD
    return Parity.EVEN


def set_parity(fd: int, parity: Parity) -> None:
    """Set the parity mode."""
    with _modify(fd) as attr:
        cflag = attr[_CFLAG]
        if parity is Parity.NONE:
            cflag &= ~(termios.PARENB | termios.PARODD)
        elif parity is Parity.EVEN:
            cflag |= termios.PARENB
            cflag &= ~termios.PARODD
        elif parity is Parity.ODD:
            cflag |= termios.PARENB | termios.PARODD
        elif parity is Parity.MARK:
            cflag |= termios.PARENB | termios.PARODD | CMSPAR
        elif parity is Parity.SPACE:
            cflag |= termios.PARENB | CMSPAR
            cflag &= ~termios.PARODD
        else:
            raise InvalidValueError(f"unknown parity {parity!r}")
        attr[_CFLAG] = cflag


def parity_check(fd: int) -> ParityCheck:
    """Return how received parity errors are handled."""
    iflag = attributes(fd)[_IFLAG]
    if not iflag & termios.INPCK:
        return ParityCheck.NONE
    ignpar = bool(iflag & termios.IGNPAR)
    parmrk = bool(iflag & termios.PARMRK)
    if ignpar and not parmrk:
        return ParityCheck.STRIP
    if not ignpar and not parmrk:
        return ParityCheck.REPLACE
    if not ignpar and parmrk:
        return ParityCheck.MARK
    return ParityCheck.NONE


def set_parity_check(fd: int, parity_check: ParityCheck) -> None:
    """Set how received parity errors are handled."""
    with _modify(fd) as attr:
        iflag = attr[_IFLAG]
        if parity_check is ParityCheck.NONE:
            iflag &= ~(termios.INPCK | termios.IGNPAR | termios.PARMRK)
        elif parity_check is ParityCheck.STRIP:
            iflag |= termios.INPCK | termios.IGNPAR
            iflag &= ~termios.PARMRK
        elif parity_check is ParityCheck.REPLACE:
            iflag |= termios.INPCK
            iflag &= ~(termios.IGNPAR | termios.PARMRK)
        elif parity_check is ParityCheck.MARK:
            iflag |= termios.INPCK | termios.PARMRK
            iflag &= ~termios.IGNPAR
        else:
            raise InvalidValueError(f"unknown parity check {parity_check!r}")
        attr[_IFLAG] = iflag


def data_bits(fd: int) -> int:
    """Return the number of data bits per character."""
    csize = attributes(fd)[_CFLAG] & termios.CSIZE
    try:
        return _CSIZE_TO_DATA_BITS[csize]
    except KeyError:
        raise InvalidValueError(f"unknown character size {csize}") from None


def set_data_bits(fd: int, data_bits: int) -> None:
    """Set the number of data bits per character (5 to 8)."""
    with _modify(fd) as attr:
        try:
            csize = _DATA_BITS_TO_CSIZE[data_bits]
        except (KeyError, TypeError):
            raise InvalidValueError(f"unsupported data bits {data_bits!r}") from None
        attr[_CFLAG] = (attr[_CFLAG] & ~termios.CSIZE) | csize


def stop_bits(fd: int) -> int:
    """Return the number of stop bits (1 or 2)."""
    return 2 if attributes(fd)[_CFLAG] & termios.CSTOPB else 1


def set_stop_bits(fd: int, stop_bits: int) -> None:
    """Set the number of stop bits (1 or 2)."""
    with _modify(fd) as attr:
        if stop_bits == 1:
            attr[_CFLAG] &= ~termios.CSTOPB
        elif stop_bits == 2:
            attr[_CFLAG] |= termios.CSTOPB
        else:
            raise InvalidValueError(f"unsupported stop bits {stop_bits!r}")


def set_raw_mode(fd: int) -> None:
    """Switch the line to non-canonical raw mode."""
    with _modify(fd) as attr:
        attr[_IFLAG] &= ~(
            termios.IGNBRK | termios.BRKINT | termios.PARMRK | termios.ISTRIP
            | termios.INLCR | termios.IGNCR | termios.ICRNL | termios.IXON
        )
        attr[_OFLAG] &= ~termios.OPOST
        attr[_LFLAG] &= ~(
            termios.ECHO | termios.ECHONL | termios.ICANON | termios.ISIG | termios.IEXTEN
        )
        attr[_CFLAG] = (attr[_CFLAG] & ~(termios.CSIZE | termios.PARENB)) | termios.CS8
        attr[_CC][termios.VMIN] = 1
        attr[_CC][termios.VTIME] = 0


def read_mode(fd: int) -> tuple[int, timedelta]:
    """Return the minimum read length and the read timeout."""
    cc = attributes(fd)[_CC]
    deciseconds = _cc_int(cc[termios.VTIME])
    return _cc_int(cc[termios.VMIN]), timedelta(milliseconds=deciseconds * 100)


def set_read_mode(fd: int, min_length: int, timeout: timedelta | float) -> None:
    """Set the minimum read length and the read timeout (in tenths of a second, at most 25.5 s)."""
    if not 0 <= min_length <= 255:
        raise InvalidValueError(f"minimum length {min_length} out of range")
    if not isinstance(timeout, timedelta):
        timeout = timedelta(seconds=timeout)
    if timeout < timedelta(0):
        raise InvalidValueError("timeout must not be negative")
    deciseconds = min(timeout // timedelta(milliseconds=100), 255)
    with _modify(fd) as attr:
        attr[_CC][termios.VMIN] = min_length
        attr[_CC][termios.VTIME] = deciseconds


def enable_read(fd: int) -> None:
    """Enable the receiver; without it all input is discarded."""
    with _modify(fd) as attr:
        attr[_CFLAG] |= termios.CREAD


def ignore_carrier_detect(fd: int) -> None:
    """Ignore the carrier detect signal."""
    with _modify(fd) as attr:
        attr[_CFLAG] |= termios.CLOCAL


def hardware_flow_control(fd: int) -> bool:
    """Return whether RTS/CTS flow control is enabled."""
    return bool(attributes(fd)[_CFLAG] & termios.CRTSCTS)


def set_hardware_flow_control(fd: int, enabled: bool) -> None:
    """Enable or disable RTS/CTS flow control."""
    with _modify(fd) as attr:
        if enabled:
            attr[_CFLAG] |= termios.CRTSCTS
        else:
            attr[_CFLAG] &= ~termios.CRTSCTS


def status(fd: int) -> int:
    """Return the raw modem control line bits."""
    return _ioctl_int(fd, termios.TIOCMGET)


def cts(fd: int) -> bool:
    """Return the CTS state."""
    return bool(status(fd) & termios.TIOCM_CTS)


def rts(fd: int) -> bool:
    """Return the RTS state."""
    return bool(status(fd) & termios.TIOCM_RTS)


def set_rts(fd: int, rts: bool) -> None:
    """Assert or release the RTS line."""
    _ioctl_int(fd, termios.TIOCMBIS if rts else termios.TIOCMBIC, termios.TIOCM_RTS)


def dcd(fd: int) -> bool:
    """Return the DCD state."""
    return bool(status(fd) & termios.TIOCM_CAR)


def ri(fd: int) -> bool:
    """Return the RI state."""
    return bool(status(fd) & termios.TIOCM_RNG)


def dsr(fd: int) -> bool:
    """Return the DSR state."""
    return bool(status(fd) & termios.TIOCM_DSR)


def dtr(fd: int) -> bool:
    """Return the DTR state."""
    return bool(status(fd) & termios.TIOCM_DTR)


def set_dtr(fd: int, dtr: bool) -> None:
    """Assert or release the DTR line."""
    _ioctl_int(fd, termios.TIOCMBIS if dtr else termios.TIOCMBIC, termios.TIOCM_DTR)


def software_flow_control(fd: int) -> tuple[bool, bool]:
    """Return (incoming, outgoing) XON/XOFF flow control settings."""
    iflag = attributes(fd)[_IFLAG]
    return bool(iflag & termios.IXOFF), bool(iflag & termios.IXON)


def set_software_flow_control(fd: int, incoming_enabled: bool, outgoing_enabled: bool) -> None:
    """Configure XON/XOFF flow control for each direction."""
    with _modify(fd) as attr:
        attr[_IFLAG] &= ~(termios.IXON | termios.IXOFF | termios.IXANY)
        attr[_CC][termios.VSTART] = XON
        attr[_CC][termios.VSTOP] = XOFF
        if incoming_enabled:
            attr[_IFLAG] |= termios.IXOFF
        if outgoing_enabled:
            attr[_IFLAG] |= termios.IXON


def _tcflow(fd: int, action: int) -> None:
    try:
        termios.tcflow(fd, action)
    except (termios.error, OSError) as exc:
        raise _os_error(exc) from exc


def send_stop(fd: int) -> None:
    """Transmit an XOFF character."""
    _tcflow(fd, termios.TCIOFF)


def send_start(fd: int) -> None:
    """Transmit an XON character."""
    _tcflow(fd, termios.TCION)


_QUEUE_SELECTORS = {
    Queue.INPUT: termios.TCIFLUSH,
    Queue.OUTPUT: termios.TCOFLUSH,
    Queue.BOTH: termios.TCIOFLUSH,
}


def flush(fd: int, queue_type: Queue) -> None:
    """Discard waiting data in the given queue."""
    try:
        selector = _QUEUE_SELECTORS[queue_type]
    except KeyError:
        raise InvalidValueError(f"unknown queue {queue_type!r}") from None
    try:
        termios.tcflush(fd, selector)
    except (termios.error, OSError) as exc:
        raise _os_error(exc) from exc


def drain(fd: int) -> None:
    """Wait until all outgoing data has been transmitted."""
    try:
        termios.tcdrain(fd)
    except (termios.error, OSError) as exc:
        raise _os_error(exc) from exc


def input_len(fd: int) -> int:
    """Return the number of bytes waiting in the input queue."""
    return _ioctl_int(fd, TIOCINQ)


def output_len(fd: int) -> int:
    """Return the number of bytes waiting in the output queue."""
    return _ioctl_int(fd, TIOCOUTQ)