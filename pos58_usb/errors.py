# errors.py — типы ошибок принтера и трансляция ошибок pyusb
from __future__ import annotations
import errno
from typing import Optional
import usb.core  # type: ignore


class PrinterError(Exception):
    """Base class for everything the POS58 driver raises."""


class DeviceNotFound(PrinterError):
    pass


class EndpointNotFound(PrinterError):
    pass


class InterfaceClaimFailed(PrinterError):
    pass


class TransferError(PrinterError, OSError):
    """A bulk transfer failed. Used as-is for unclassified transport errors.

    ``bytes_written`` holds what the chunks before the failing one transferred.
    """
    bytes_written = 0


class NotConnected(TransferError, ConnectionError):
    pass


class WouldBlock(TransferError, BlockingIOError):
    pass


class TimedOut(TransferError, TimeoutError):
    pass


class Interrupted(TransferError, InterruptedError):
    pass


# errno (как его выставляет libusb1 backend) -> тип ошибки
ERRNO_MAP = {
    errno.ENODEV: NotConnected,
    errno.EBUSY: WouldBlock,
    errno.ETIMEDOUT: TimedOut,
    errno.EIO: Interrupted,
}

# сырые коды libusb, если errno не выставлен (другие backends)
LIBUSB_CODE_MAP = {
    -4: NotConnected,   # LIBUSB_ERROR_NO_DEVICE
    -6: WouldBlock,     # LIBUSB_ERROR_BUSY
    -7: TimedOut,       # LIBUSB_ERROR_TIMEOUT
    -1: Interrupted,    # LIBUSB_ERROR_IO
}


def classify(err: usb.core.USBError) -> type:
    if isinstance(err, usb.core.USBTimeoutError):
        return TimedOut
    cls = ERRNO_MAP.get(getattr(err, 'errno', None))
    if cls is None:
        cls = LIBUSB_CODE_MAP.get(getattr(err, 'backend_error_code', None))
    return cls or TransferError


def translate_error(err: usb.core.USBError, bytes_written: int = 0) -> TransferError:
    """Map a pyusb error onto the printer error taxonomy.

    The caller is expected to ``raise translate_error(e) from e``.
    """
    cls = classify(err)
    code: Optional[int] = getattr(err, 'errno', None)
    msg = getattr(err, 'strerror', None) or str(err)
    out = cls(code, msg) if code is not None else cls(msg)
    out.bytes_written = bytes_written
    return out
