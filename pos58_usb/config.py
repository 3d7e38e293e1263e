# config.py — настройки драйвера из переменных окружения
from __future__ import annotations
import logging
import os
from typing import Mapping, NamedTuple, Optional

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 2.0
DEFAULT_ENCODING = 'utf-8'
DEFAULT_LOG_LEVEL = 'WARNING'


class Config(NamedTuple):
    timeout: float = DEFAULT_TIMEOUT_S
    detach_kernel_driver: bool = True
    encoding: str = DEFAULT_ENCODING
    log_level: int = logging.WARNING


def env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    return str(raw).strip().lower() not in ('0', 'false', 'no', 'off')


def env_timeout(environ: Mapping[str, str], name: str = 'POS58_TIMEOUT') -> float:
    raw = environ.get(name)
    if not raw:
        return DEFAULT_TIMEOUT_S
    try:
        v = float(raw)
    except ValueError:
        log.warning('%s=%r is not a number, using %.1fs', name, raw, DEFAULT_TIMEOUT_S)
        return DEFAULT_TIMEOUT_S
    # 0 — без таймаута
    if v < 0:
        log.warning('%s=%r must not be negative, using %.1fs', name, raw, DEFAULT_TIMEOUT_S)
        return DEFAULT_TIMEOUT_S
    return v


def env_log_level(environ: Mapping[str, str], name: str = 'POS58_LOG_LEVEL') -> int:
    raw = (environ.get(name) or DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(raw)
    # getLevelName отдаёт строку 'Level X' для неизвестных имён
    return level if isinstance(level, int) else logging.WARNING


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Read POS58_* settings from ``environ`` (``os.environ`` by default)."""
    if environ is None:
        environ = os.environ
    return Config(
        timeout=env_timeout(environ),
        detach_kernel_driver=env_flag(environ, 'POS58_DETACH_KERNEL_DRIVER', True),
        encoding=environ.get('POS58_ENCODING') or DEFAULT_ENCODING,
        log_level=env_log_level(environ),
    )


def setup_logging(cfg: Config) -> None:
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )
