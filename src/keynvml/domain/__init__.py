from ._errors import (
    NvmlError,
    PropertyNotFoundError,
    AccessorFailedError,
    EmptyResultError,
    NoDevicesFoundError,
    EnumerationFailedError,
)
from ._status import NvmlReturn, translate_status, check_status
from ._records import UtilizationSample, UtilizationRates, MemoryInfo
from ._native_protocol import NativeLibrary, NativeFunction

__all__ = [
    NvmlError.__name__,
    PropertyNotFoundError.__name__,
    AccessorFailedError.__name__,
    EmptyResultError.__name__,
    NoDevicesFoundError.__name__,
    EnumerationFailedError.__name__,
    NvmlReturn.__name__,
    translate_status.__name__,
    check_status.__name__,
    UtilizationSample.__name__,
    UtilizationRates.__name__,
    MemoryInfo.__name__,
    NativeLibrary.__name__,
    "NativeFunction",
]
