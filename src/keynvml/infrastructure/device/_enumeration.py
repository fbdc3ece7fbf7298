"""
Device enumeration.

`enumerate_devices` asks NVML how many devices exist, obtains one handle per
index, and builds a `Device` for each handle.

Failure policy
--------------
Every failure aborts the whole enumeration with `EnumerationFailedError`,
chained to the underlying cause:

- the device count query fails (index is None),
- a handle lookup fails (index of that handle),
- a `Device` cannot be built from a handle (index of that handle).

No partial list is ever returned. A clean run that finds zero devices raises
`NoDevicesFoundError`.
"""

from __future__ import annotations

import ctypes
import logging
from ctypes import POINTER, c_uint
from typing import List, Optional

from ...domain._errors import (
    AccessorFailedError,
    EnumerationFailedError,
    NoDevicesFoundError,
    NvmlError,
)
from ...domain._native_protocol import NativeLibrary
from ...domain._status import check_status
from ..native._structs import nvmlDevice_t
from ..properties._registry import PropertyRegistry, default_registry
from ._device import Device

logger = logging.getLogger(__name__)

_COUNT_SYMBOL = "nvmlDeviceGetCount_v2"
_HANDLE_SYMBOL = "nvmlDeviceGetHandleByIndex_v2"

_COUNT_ARGTYPES = [POINTER(c_uint)]
_HANDLE_ARGTYPES = [c_uint, POINTER(nvmlDevice_t)]


def device_count(library: NativeLibrary) -> int:
    """
    Return the number of NVML devices.

    Raises
    ------
    AccessorFailedError
        If `nvmlDeviceGetCount_v2` fails.
    """
    fn = library.function(_COUNT_SYMBOL, _COUNT_ARGTYPES)
    count = c_uint(0)
    check_status(fn(ctypes.pointer(count)), library.error_string, accessor=_COUNT_SYMBOL)
    return int(count.value)


def enumerate_devices(
    library: Optional[NativeLibrary] = None,
    registry: Optional[PropertyRegistry] = None,
) -> List[Device]:
    """
    Discover every NVML device on the host.

    Parameters
    ----------
    library : Optional[NativeLibrary]
        Library to query for the count and handles. Defaults to the
        registry's library.
    registry : Optional[PropertyRegistry]
        Registry the devices read through. Defaults to a registry built from
        `library`, or to `default_registry()` if neither is given.

    Returns
    -------
    List[Device]
        Devices in index order.

    Raises
    ------
    EnumerationFailedError
        If the count, any handle lookup, or any device construction fails.
    NoDevicesFoundError
        If NVML reports zero devices.
    """
    if registry is None:
        registry = (
            default_registry()
            if library is None
            else PropertyRegistry.from_library(library)
        )
    if library is None:
        library = registry.library

    try:
        count = device_count(library)
    except AccessorFailedError as e:
        raise EnumerationFailedError(None, e.message) from e
    logger.debug("NVML reports %d device(s)", count)

    handle_fn = library.function(_HANDLE_SYMBOL, _HANDLE_ARGTYPES)
    handles = []
    for i in range(count):
        handle = nvmlDevice_t()
        try:
            check_status(
                handle_fn(i, ctypes.pointer(handle)),
                library.error_string,
                accessor=_HANDLE_SYMBOL,
            )
        except AccessorFailedError as e:
            raise EnumerationFailedError(i, f"handle lookup: {e.message}") from e
        handles.append(handle)

    devices: List[Device] = []
    for i, handle in enumerate(handles):
        try:
            devices.append(Device(handle, registry))
        except NvmlError as e:
            raise EnumerationFailedError(i, f"device construction: {e}") from e

    if not devices:
        raise NoDevicesFoundError()
    return devices
