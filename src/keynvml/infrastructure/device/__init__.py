from ._device import Device, new_device
from ._enumeration import device_count, enumerate_devices

__all__ = [
    Device.__name__,
    new_device.__name__,
    device_count.__name__,
    enumerate_devices.__name__,
]
