"""POS58 USB thermal printer driver (0416:5011) on top of PyUSB."""
from .errors import (
    PrinterError, DeviceNotFound, EndpointNotFound, InterfaceClaimFailed,
    TransferError, NotConnected, WouldBlock, TimedOut, Interrupted, translate_error,
)
from .printer import (
    VENDOR_ID, PRODUCT_ID, PAPER_WIDTH_MM, PRINTABLE_WIDTH_MM, DOTS_PER_MM, PRINTABLE_WIDTH_DOTS,
    Endpoint, POS58USB, find_device, find_writeable_endpoint, open_printer,
)

__version__ = '0.1.0'
