#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Дерево дескрипторов POS58 и endpoint, который выберет драйвер
from __future__ import annotations
import sys
import usb.core, usb.util  # type: ignore

from .config import load_config, setup_logging
from .errors import DeviceNotFound, EndpointNotFound
from .printer import VENDOR_ID, PRODUCT_ID, find_device, find_writeable_endpoint

TRANSFER_TYPES = {
    usb.util.ENDPOINT_TYPE_CTRL: 'CTRL',
    usb.util.ENDPOINT_TYPE_ISO: 'ISO',
    usb.util.ENDPOINT_TYPE_BULK: 'BULK',
    usb.util.ENDPOINT_TYPE_INTR: 'INTR',
}


def describe_endpoint(ep) -> str:
    direction = ['OUT', 'IN'][(ep.bEndpointAddress >> 7) & 1]
    kind = TRANSFER_TYPES.get(usb.util.endpoint_type(ep.bmAttributes), '?')
    return f"0x{ep.bEndpointAddress:02X}({direction},{kind},{ep.wMaxPacketSize})"


def describe_device(dev) -> list[str]:
    lines = [f"Device: VID=0x{VENDOR_ID:04X} PID=0x{PRODUCT_ID:04X} configs={dev.bNumConfigurations}"]
    for n in range(dev.bNumConfigurations):
        try:
            cfg = dev[n]
        except usb.core.USBError as e:
            lines.append(f"Config #{n}: <unreadable: {e}>")
            continue
        lines.append(f"Config {cfg.bConfigurationValue}: interfaces={cfg.bNumInterfaces}")
        for intf in cfg:
            eps = [describe_endpoint(ep) for ep in intf]
            lines.append(f"  IF#{intf.bInterfaceNumber} alt={intf.bAlternateSetting}"
                         f" cls=0x{intf.bInterfaceClass:02X} eps={eps}")
    return lines


def main() -> int:
    setup_logging(load_config())
    try:
        dev = find_device()
    except DeviceNotFound as e:
        print(f"[ERR] {e}")
        return 1
    try:
        for line in describe_device(dev):
            print(line)
        ep = find_writeable_endpoint(dev)
    except EndpointNotFound as e:
        print(f"[ERR] {e}")
        return 1
    finally:
        usb.util.dispose_resources(dev)
    print(f"selected: EP 0x{ep.address:02X} IF#{ep.interface} alt={ep.alternate}"
          f" cfg={ep.configuration} chunk={ep.packet_size}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
