#!/usr/bin/env python3
"""
Pipe standard input to the POS58 printer, one line at a time.

    some_command | pos58-stdio

No arguments; settings come from POS58_* environment variables.
Lines end at '\\n' only; one '\\r' before it is dropped, other '\\r' bytes
are sent as they are.
"""
from __future__ import annotations
import sys

from .config import load_config, setup_logging
from .errors import PrinterError
from .printer import POS58USB


def strip_eol(line: str) -> str:
    if line.endswith('\n'):
        line = line[:-1]
        if line.endswith('\r'):
            line = line[:-1]
    return line


def pump_lines(printer, lines, encoding: str) -> int:
    """Write every line (newline-appended) to ``printer``; returns line count."""
    n = 0
    for line in lines:
        printer.write((strip_eol(line) + '\n').encode(encoding))
        n += 1
    return n


def main(stdin=None) -> int:
    cfg = load_config()
    setup_logging(cfg)
    if stdin is None:
        # newline='\n': одиночный '\r' не режет строку
        sys.stdin.reconfigure(encoding=cfg.encoding, errors='strict', newline='\n')
        stdin = sys.stdin
    printer = None
    try:
        printer = POS58USB(timeout=cfg.timeout, detach_kernel_driver=cfg.detach_kernel_driver)
        with printer:
            pump_lines(printer, stdin, cfg.encoding)
    except PrinterError as e:
        what = 'get printer' if printer is None else 'print'
        print(f'[ERR] Failed to {what}: {e}', file=sys.stderr)
        return 1
    except UnicodeEncodeError as e:
        print(f'[ERR] Failed to print: {e}', file=sys.stderr)
        return 1
    except (UnicodeDecodeError, OSError) as e:
        print(f'[ERR] Failed to get line: {e}', file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print('\n[Interrupted by user]', file=sys.stderr)
        return 130
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
