import logging

from pos58_usb.config import Config, load_config


def test_defaults():
    assert load_config({}) == Config(2.0, True, 'utf-8', logging.WARNING)


def test_values_from_environ():
    cfg = load_config({
        'POS58_TIMEOUT': '0.75',
        'POS58_DETACH_KERNEL_DRIVER': 'no',
        'POS58_ENCODING': 'cp437',
        'POS58_LOG_LEVEL': 'debug',
    })
    assert cfg == Config(0.75, False, 'cp437', logging.DEBUG)


def test_bad_timeout_falls_back():
    assert load_config({'POS58_TIMEOUT': 'soon'}).timeout == 2.0
    assert load_config({'POS58_TIMEOUT': '-1'}).timeout == 2.0


def test_zero_timeout_allowed():
    assert load_config({'POS58_TIMEOUT': '0'}).timeout == 0.0


def test_flag_spellings():
    for raw in ('0', 'false', 'No', 'OFF'):
        assert load_config({'POS58_DETACH_KERNEL_DRIVER': raw}).detach_kernel_driver is False
    for raw in ('1', 'yes', 'true', ''):
        assert load_config({'POS58_DETACH_KERNEL_DRIVER': raw}).detach_kernel_driver is True


def test_unknown_log_level():
    assert load_config({'POS58_LOG_LEVEL': 'chatty'}).log_level == logging.WARNING


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv('POS58_TIMEOUT', '3')
    assert load_config().timeout == 3.0
