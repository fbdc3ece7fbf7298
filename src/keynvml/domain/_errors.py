"""
NVML access exceptions for keynvml.

This module defines the structured errors raised by the property dispatchers,
device construction and device enumeration. Each error carries the details a
caller needs to decide what to do next (which property, which accessor, which
status code, which device index) in addition to a readable message.

Taxonomy
--------
- `PropertyNotFoundError`: the requested property name is not registered.
  This is a programming error and never worth retrying.
- `AccessorFailedError`: a native accessor returned a non-success status.
  The NVML message is preserved verbatim.
- `EmptyResultError`: a text accessor reported success but produced an
  empty string.
- `NoDevicesFoundError`: enumeration finished cleanly with zero devices.
- `EnumerationFailedError`: enumeration aborted, either because the device
  count or a handle lookup failed, or because a device could not be built.

All of them derive from `NvmlError`, so callers can catch the whole family
with a single `except` clause.
"""

from __future__ import annotations

from typing import Optional


class NvmlError(RuntimeError):
    """Base class for every error raised by keynvml."""


class PropertyNotFoundError(NvmlError, LookupError):
    """
    Raised when a property name is absent from the property registry.

    Attributes
    ----------
    name : str
        The property name that was requested.
    kind : str
        Which registry was consulted ("int" or "text").
    """

    def __init__(self, name: str, kind: str) -> None:
        super().__init__(f"Unknown {kind} property: {name!r}")
        self.name = name
        self.kind = kind


class AccessorFailedError(NvmlError):
    """
    Raised when a native accessor returns a non-success status code.

    Attributes
    ----------
    accessor : str
        NVML symbol that was called (e.g. "nvmlDeviceGetPowerUsage").
    status : int
        Raw NVML status code returned by the call.
    message : str
        Human-readable message obtained from `nvmlErrorString`, or a
        fallback if NVML had no string for the code.
    """

    def __init__(self, accessor: str, status: int, message: str) -> None:
        super().__init__(f"{accessor} failed with status={int(status)}: {message}")
        self.accessor = accessor
        self.status = int(status)
        self.message = message


class EmptyResultError(NvmlError):
    """
    Raised when a text accessor succeeds but yields a zero-length string.

    Attributes
    ----------
    property_name : str
        Label of the text property that came back empty.
    """

    def __init__(self, property_name: str) -> None:
        super().__init__(f"Text property {property_name!r} returned an empty string")
        self.property_name = property_name


class NoDevicesFoundError(NvmlError):
    """Raised when enumeration completes without error but finds no devices."""

    def __init__(self) -> None:
        super().__init__("No NVML devices found")


class EnumerationFailedError(NvmlError):
    """
    Raised when device enumeration aborts.

    The underlying cause (usually an `AccessorFailedError`) is attached as
    `__cause__` by the raiser.

    Attributes
    ----------
    index : Optional[int]
        Device index being processed when enumeration failed, or None if the
        device count itself could not be queried.
    reason : str
        Short description of the failing step.
    """

    def __init__(self, index: Optional[int], reason: str) -> None:
        where = "device count" if index is None else f"device index {index}"
        super().__init__(f"Device enumeration failed at {where}: {reason}")
        self.index = index
        self.reason = reason
