"""
ctypes mirrors of the NVML types used by keynvml.

Field order follows `nvml.h` exactly; ctypes lays structures out by
declaration order, so reordering a field silently corrupts every read.
"""

from __future__ import annotations

from ctypes import Structure, c_uint, c_ulonglong, c_void_p
from enum import IntEnum

# nvmlDevice_t is an opaque `struct nvmlDevice_st *`.
nvmlDevice_t = c_void_p


class c_nvmlMemory_t(Structure):
    _fields_ = [
        ("total", c_ulonglong),
        ("free", c_ulonglong),
        ("used", c_ulonglong),
    ]


class c_nvmlUtilization_t(Structure):
    _fields_ = [
        ("gpu", c_uint),
        ("memory", c_uint),
    ]


class TemperatureSensor(IntEnum):
    """`nvmlTemperatureSensors_t`."""

    GPU = 0


# Text buffer sizes from nvml.h
NVML_DEVICE_NAME_V2_BUFFER_SIZE = 96
NVML_DEVICE_SERIAL_BUFFER_SIZE = 30
NVML_DEVICE_UUID_BUFFER_SIZE = 80
NVML_DEVICE_INFOROM_VERSION_BUFFER_SIZE = 16
NVML_DEVICE_VBIOS_VERSION_BUFFER_SIZE = 32
