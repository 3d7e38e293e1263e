import errno
import pytest
import usb.core  # type: ignore

from pos58_usb.errors import (
    Interrupted, NotConnected, PrinterError, TimedOut, TransferError, WouldBlock, translate_error,
)


@pytest.mark.parametrize('code, cls', [
    (errno.ENODEV, NotConnected),
    (errno.EBUSY, WouldBlock),
    (errno.ETIMEDOUT, TimedOut),
    (errno.EIO, Interrupted),
])
def test_errno_table(code, cls):
    out = translate_error(usb.core.USBError('boom', None, code))
    assert type(out) is cls
    assert out.errno == code


@pytest.mark.parametrize('libusb_code, cls', [
    (-4, NotConnected),
    (-6, WouldBlock),
    (-7, TimedOut),
    (-1, Interrupted),
])
def test_libusb_code_table_without_errno(libusb_code, cls):
    assert type(translate_error(usb.core.USBError('boom', libusb_code))) is cls


def test_timeout_error_type_wins():
    assert type(translate_error(usb.core.USBTimeoutError('Operation timed out'))) is TimedOut


def test_other_errors():
    out = translate_error(usb.core.USBError('Pipe error', -9, errno.EPIPE))
    assert type(out) is TransferError
    assert 'Pipe error' in str(out)


def test_builtin_hierarchy():
    assert issubclass(NotConnected, ConnectionError)
    assert issubclass(WouldBlock, BlockingIOError)
    assert issubclass(TimedOut, TimeoutError)
    assert issubclass(Interrupted, InterruptedError)
    for cls in (NotConnected, WouldBlock, TimedOut, Interrupted):
        assert issubclass(cls, TransferError)
        assert issubclass(cls, PrinterError)


def test_bytes_written_recorded():
    assert translate_error(usb.core.USBError('x'), 128).bytes_written == 128
