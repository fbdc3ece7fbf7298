"""
Generic integer and text property dispatch.

Both dispatchers follow the same ladder:

1. resolve the property in the registry (unknown -> `PropertyNotFoundError`,
   no native call),
2. call the accessor once with the device handle and an output location,
3. translate the returned status (non-success -> `AccessorFailedError`),
4. decode the output.

There are no retries at this level.
"""

from __future__ import annotations

import ctypes
from ctypes import c_uint

from ...domain._errors import EmptyResultError, PropertyNotFoundError
from ...domain._status import check_status
from ._buffers import TextBuffer
from ._registry import (
    IntPropertyName,
    PropertyRegistry,
    TextPropertyName,
    property_label,
)


def get_int_property(
    registry: PropertyRegistry, handle, name: IntPropertyName
) -> int:
    """
    Read an integer property of a device.

    Parameters
    ----------
    registry : PropertyRegistry
        Registry to resolve `name` in.
    handle : nvmlDevice_t
        Opaque device handle, passed through untouched.
    name : IntProperty | str
        Property member, label ("PowerUsage") or member name ("POWER_USAGE").

    Returns
    -------
    int
        The 32-bit unsigned value widened to a Python int.

    Raises
    ------
    PropertyNotFoundError
        If `name` is not in the registry.
    AccessorFailedError
        If the native accessor reports failure.
    """
    accessor = registry.lookup_int(name)
    if accessor is None:
        raise PropertyNotFoundError(property_label(name), "int")

    slot = c_uint(0)
    status = accessor.fn(handle, ctypes.pointer(slot))
    check_status(status, registry.error_string, accessor=accessor.symbol)
    return int(slot.value)


def get_text_property(
    registry: PropertyRegistry, handle, name: TextPropertyName
) -> str:
    """
    Read a text property of a device.

    The value is written by NVML into a `TextBuffer` sized to the property's
    declared maximum and decoded without ever reading past that size. The
    buffer is released on every path out of this function.

    Raises
    ------
    PropertyNotFoundError
        If `name` is not in the registry.
    AccessorFailedError
        If the native accessor reports failure.
    EmptyResultError
        If the accessor succeeds but the decoded string is empty.
    """
    accessor = registry.lookup_text(name)
    if accessor is None:
        raise PropertyNotFoundError(property_label(name), "text")

    with TextBuffer(accessor.max_length) as buf:
        status = accessor.fn(handle, buf.pointer(), buf.length)
        check_status(status, registry.error_string, accessor=accessor.symbol)
        value = buf.decode()

    if not value:
        raise EmptyResultError(accessor.prop.label)
    return value
