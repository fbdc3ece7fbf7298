"""
keynvml: typed access to NVIDIA device telemetry through NVML.

Quick start
-----------
    from keynvml import nvml_session, enumerate_devices

    with nvml_session() as lib:
        for dev in enumerate_devices(lib):
            mem = dev.memory_info()
            print(dev.index, dev.name, dev.power_usage_milliwatts(), mem.used)
"""

from .domain import (
    NvmlError,
    PropertyNotFoundError,
    AccessorFailedError,
    EmptyResultError,
    NoDevicesFoundError,
    EnumerationFailedError,
    NvmlReturn,
    translate_status,
    check_status,
    UtilizationSample,
    UtilizationRates,
    MemoryInfo,
    NativeLibrary,
)
from .infrastructure.native import (
    load_nvml,
    NvmlLib,
    default_library,
    nvml_session,
    TemperatureSensor,
)
from .infrastructure.properties import (
    IntProperty,
    TextProperty,
    IntAccessor,
    TextAccessor,
    PropertyRegistry,
    default_registry,
    TextBuffer,
    get_int_property,
    get_text_property,
)
from .infrastructure.device import (
    Device,
    new_device,
    device_count,
    enumerate_devices,
)

__all__ = [
    "NvmlError",
    "PropertyNotFoundError",
    "AccessorFailedError",
    "EmptyResultError",
    "NoDevicesFoundError",
    "EnumerationFailedError",
    "NvmlReturn",
    "translate_status",
    "check_status",
    "UtilizationSample",
    "UtilizationRates",
    "MemoryInfo",
    "NativeLibrary",
    "load_nvml",
    "NvmlLib",
    "default_library",
    "nvml_session",
    "TemperatureSensor",
    "IntProperty",
    "TextProperty",
    "IntAccessor",
    "TextAccessor",
    "PropertyRegistry",
    "default_registry",
    "TextBuffer",
    "get_int_property",
    "get_text_property",
    "Device",
    "new_device",
    "device_count",
    "enumerate_devices",
]
