import pytest
import usb.core, usb.util  # type: ignore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('POS58_TIMEOUT', 'POS58_DETACH_KERNEL_DRIVER', 'POS58_ENCODING', 'POS58_LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def usb_bus(monkeypatch):
    """Replace usb.core.find and the usb.util helpers that need a real backend."""
    bus = {'devices': [], 'find_kwargs': None, 'claimed': [], 'released': [], 'disposed': []}

    def fake_find(find_all=False, backend=None, custom_match=None, **args):
        bus['find_kwargs'] = dict(args, find_all=find_all, backend=backend)
        return iter(list(bus['devices']))

    def fake_claim(dev, intf):
        err = getattr(dev, 'claim_error', None)
        if err is not None:
            raise err
        bus['claimed'].append((dev, intf))

    monkeypatch.setattr(usb.core, 'find', fake_find)
    monkeypatch.setattr(usb.util, 'claim_interface', fake_claim)
    monkeypatch.setattr(usb.util, 'release_interface', lambda dev, intf: bus['released'].append((dev, intf)))
    monkeypatch.setattr(usb.util, 'dispose_resources', lambda dev: bus['disposed'].append(dev))
    return bus
