#!/usr/bin/env python3
# printer.py — POS58 (0416:5011) через PyUSB: поиск устройства, bulk OUT EP, запись чанками
from __future__ import annotations
import errno
import logging
from typing import NamedTuple, Optional
import usb.core, usb.util  # type: ignore

from .config import DEFAULT_TIMEOUT_S, load_config
from .errors import DeviceNotFound, EndpointNotFound, InterfaceClaimFailed, translate_error

log = logging.getLogger(__name__)

VENDOR_ID = 0x0416
PRODUCT_ID = 0x5011
PAPER_WIDTH_MM = 58
PRINTABLE_WIDTH_MM = 48
DOTS_PER_MM = 8
PRINTABLE_WIDTH_DOTS = PRINTABLE_WIDTH_MM * DOTS_PER_MM  # 384

# младшие 11 бит wMaxPacketSize — размер пакета
MAX_PACKET_MASK = 0x07FF


class Endpoint(NamedTuple):
    address: int
    interface: int
    packet_size: int
    configuration: int = 1
    alternate: int = 0


def is_bulk_out(ep) -> bool:
    return (usb.util.endpoint_direction(ep.bEndpointAddress) == usb.util.ENDPOINT_OUT
            and usb.util.endpoint_type(ep.bmAttributes) == usb.util.ENDPOINT_TYPE_BULK)


def udev_rule(vid: int = VENDOR_ID, pid: int = PRODUCT_ID) -> str:
    return f'SUBSYSTEM=="usb", ATTR{{idVendor}}=="{vid:04x}", ATTR{{idProduct}}=="{pid:04x}", MODE="0666"'


def find_device(backend=None):
    """Return the first POS58 printer that can be opened.

    ``backend`` is a pyusb backend owned by the caller; ``None`` lets pyusb
    pick its default one. Raises DeviceNotFound.
    """
    try:
        candidates = list(usb.core.find(find_all=True, idVendor=VENDOR_ID,
                                        idProduct=PRODUCT_ID, backend=backend))
    except usb.core.NoBackendError as e:
        raise DeviceNotFound(f'no USB backend available: {e}') from e
    for dev in candidates:
        # открыть = прочитать активную конфигурацию; "Configuration not set" без errno — не ошибка
        try:
            dev.get_active_configuration()
        except usb.core.USBError as e:
            if e.errno is not None:
                if e.errno == errno.EACCES:
                    log.warning('no permission to open %04x:%04x, add a udev rule: %s',
                                VENDOR_ID, PRODUCT_ID, udev_rule())
                else:
                    log.warning('cannot open %04x:%04x: %s', VENDOR_ID, PRODUCT_ID, e)
                continue
        log.debug('found printer %04x:%04x bus=%s addr=%s', VENDOR_ID, PRODUCT_ID,
                  getattr(dev, 'bus', None), getattr(dev, 'address', None))
        return dev
    raise DeviceNotFound(f'POS58 printer {VENDOR_ID:04x}:{PRODUCT_ID:04x} not found')


def find_writeable_endpoint(dev) -> Endpoint:
    """First bulk OUT endpoint across configurations, interfaces and alt settings.

    Configurations are visited by index; pyusb yields one Interface object per
    alternate setting, so alternates come out of the same loop.
    """
    for n in range(dev.bNumConfigurations):
        try:
            cfg = dev[n]
        except usb.core.USBError as e:
            log.warning('configuration #%d descriptor unreadable, skipping: %s', n, e)
            continue
        for intf in cfg:
            for ep in intf:
                if not is_bulk_out(ep):
                    continue
                size = ep.wMaxPacketSize & MAX_PACKET_MASK
                if size == 0:
                    # первый bulk OUT непригоден — другой не подбираем
                    raise EndpointNotFound(
                        f'bulk OUT EP 0x{ep.bEndpointAddress:02X} reports wMaxPacketSize 0')
                found = Endpoint(
                    address=ep.bEndpointAddress,
                    interface=intf.bInterfaceNumber,
                    packet_size=size,
                    configuration=cfg.bConfigurationValue,
                    alternate=intf.bAlternateSetting,
                )
                log.debug('bulk OUT %s', found)
                return found
    raise EndpointNotFound(f'no bulk OUT endpoint on {VENDOR_ID:04x}:{PRODUCT_ID:04x}')


class POS58USB:
    """A POS58 printer connected to USB, exposing a file-like write API."""

    def __init__(self, backend=None, timeout: float = DEFAULT_TIMEOUT_S,
                 detach_kernel_driver: Optional[bool] = None):
        self.dev = None
        self._claimed = False
        self._detached = False
        self.timeout = timeout
        if detach_kernel_driver is None:
            detach_kernel_driver = load_config().detach_kernel_driver

        dev = find_device(backend)
        try:
            ep = find_writeable_endpoint(dev)
        except EndpointNotFound:
            usb.util.dispose_resources(dev)
            raise
        self.endpoint = ep
        self.endpoint_addr = ep.address
        self.interface = ep.interface
        self.chunk_size = ep.packet_size
        self.dev = dev
        try:
            self._claim(detach_kernel_driver)
        except usb.core.USBError as e:
            self.close()
            if getattr(e, 'errno', None) == errno.EACCES:
                log.warning('permission denied, udev rule: %s', udev_rule())
            raise InterfaceClaimFailed(f'cannot claim interface {ep.interface}: {e}') from e
        log.debug('printer ready: EP 0x%02X IF#%d chunk=%d timeout=%dms',
                  self.endpoint_addr, self.interface, self.chunk_size, self.timeout_ms)

    def _claim(self, detach: bool) -> None:
        dev, ep = self.dev, self.endpoint
        if detach:
            try:
                active = dev.is_kernel_driver_active(ep.interface)
            except (NotImplementedError, usb.core.USBError) as e:
                # Windows/macOS backends не умеют kernel driver
                log.debug('kernel driver query unsupported: %s', e)
                active = False
            if active:
                dev.detach_kernel_driver(ep.interface)
                self._detached = True
                log.debug('detached kernel driver from IF#%d', ep.interface)
        # Если нужная конфигурация уже активна — не трогаем
        try:
            cfg_active = dev.get_active_configuration()
        except usb.core.USBError:
            cfg_active = None
        if cfg_active is None or cfg_active.bConfigurationValue != ep.configuration:
            dev.set_configuration(ep.configuration)
        usb.util.claim_interface(dev, ep.interface)
        self._claimed = True
        if ep.alternate:
            dev.set_interface_altsetting(interface=ep.interface, alternate_setting=ep.alternate)

    # serial-like API
    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000.0

    @timeout.setter
    def timeout(self, v: float):
        # 0 — без таймаута (libusb ждёт бесконечно)
        if v is None:
            v = DEFAULT_TIMEOUT_S
        if v < 0:
            raise ValueError(f'timeout must be >= 0, got {v!r}')
        self.timeout_ms = 0 if v == 0 else int(max(1.0, v * 1000))

    @property
    def closed(self) -> bool:
        return self.dev is None

    def write(self, data) -> int:
        """Send ``data`` in chunks of ``chunk_size``; returns bytes transferred.

        A failing chunk aborts the call, earlier chunks stay sent. The raised
        TransferError has ``bytes_written`` set to what went out before it.
        """
        if self.dev is None:
            raise ValueError('write to closed printer')
        buf = bytes(memoryview(data))
        n_written = 0
        for off in range(0, len(buf), self.chunk_size):
            chunk = buf[off:off + self.chunk_size]
            try:
                n_written += int(self.dev.write(self.endpoint_addr, chunk, self.timeout_ms))
            except usb.core.USBError as e:
                log.debug('chunk at offset %d failed: %s', off, e)
                raise translate_error(e, n_written) from e
        return n_written

    def flush(self) -> None:
        # у POS58 "flush" — это один нулевой байт
        self.write(b'\x00')

    def close(self) -> None:
        dev = self.dev
        if dev is None:
            return
        self.dev = None
        try:
            if self._claimed:
                try:
                    usb.util.release_interface(dev, self.interface)
                except usb.core.USBError as e:
                    log.warning('release_interface(%d) failed: %s', self.interface, e)
                self._claimed = False
            if self._detached:
                try:
                    dev.attach_kernel_driver(self.interface)
                except usb.core.USBError as e:
                    log.warning('attach_kernel_driver(%d) failed: %s', self.interface, e)
                self._detached = False
        finally:
            usb.util.dispose_resources(dev)

    def __enter__(self) -> 'POS58USB':
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        state = 'closed' if self.dev is None else f'EP=0x{self.endpoint_addr:02X} IF#{self.interface}'
        return f'<POS58USB {VENDOR_ID:04x}:{PRODUCT_ID:04x} {state} chunk={self.chunk_size}>'


def open_printer(backend=None, timeout: Optional[float] = None) -> POS58USB:
    cfg = load_config()
    return POS58USB(backend, cfg.timeout if timeout is None else timeout, cfg.detach_kernel_driver)
