"""
NVML status code translation.

NVML reports the outcome of every call as an `nvmlReturn_t`. This module maps
such a code to either "success" (`None`) or an `AccessorFailedError` whose
message is NVML's own description of the code, obtained through the
library's `nvmlErrorString`.

Success is always decided against `NvmlReturn.SUCCESS`. Status codes that
are not part of `NvmlReturn` (e.g. values added by a newer driver) are kept
as plain integers on the resulting error.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Optional

from ._errors import AccessorFailedError


class NvmlReturn(IntEnum):
    """
    Documented `nvmlReturn_t` values.

    Only `SUCCESS` has special meaning to this package; the rest exist so
    callers can compare `AccessorFailedError.status` against a name instead
    of a magic number.
    """

    SUCCESS = 0
    ERROR_UNINITIALIZED = 1
    ERROR_INVALID_ARGUMENT = 2
    ERROR_NOT_SUPPORTED = 3
    ERROR_NO_PERMISSION = 4
    ERROR_ALREADY_INITIALIZED = 5
    ERROR_NOT_FOUND = 6
    ERROR_INSUFFICIENT_SIZE = 7
    ERROR_INSUFFICIENT_POWER = 8
    ERROR_DRIVER_NOT_LOADED = 9
    ERROR_TIMEOUT = 10
    ERROR_IRQ_ISSUE = 11
    ERROR_LIBRARY_NOT_FOUND = 12
    ERROR_FUNCTION_NOT_FOUND = 13
    ERROR_CORRUPTED_INFOROM = 14
    ERROR_GPU_IS_LOST = 15
    ERROR_RESET_REQUIRED = 16
    ERROR_OPERATING_SYSTEM = 17
    ERROR_LIB_RM_VERSION_MISMATCH = 18
    ERROR_IN_USE = 19
    ERROR_MEMORY = 20
    ERROR_NO_DATA = 21
    ERROR_VGPU_ECC_NOT_ENABLED = 22
    ERROR_INSUFFICIENT_RESOURCES = 23
    ERROR_FREQ_NOT_SUPPORTED = 24
    ERROR_ARGUMENT_VERSION_MISMATCH = 25
    ERROR_DEPRECATED = 26
    ERROR_NOT_READY = 27
    ERROR_GPU_NOT_FOUND = 28
    ERROR_INVALID_STATE = 29
    ERROR_UNKNOWN = 999


ErrorStringLookup = Callable[[int], Optional[str]]


def translate_status(
    status: int, error_string: ErrorStringLookup, *, accessor: str
) -> Optional[AccessorFailedError]:
    """
    Translate an NVML status code into an error value.

    Parameters
    ----------
    status : int
        Raw status returned by a native call.
    error_string : Callable[[int], Optional[str]]
        NVML's status-to-string lookup (normally `NvmlLib.error_string`).
    accessor : str
        Name of the native function that produced `status`.

    Returns
    -------
    Optional[AccessorFailedError]
        None if `status` is `NvmlReturn.SUCCESS`, otherwise the error to
        raise. The error is returned, not raised.
    """
    code = int(status)
    if code == NvmlReturn.SUCCESS:
        return None

    message = error_string(code)
    if not message:
        message = f"unknown NVML status {code}"
    return AccessorFailedError(accessor, code, message)


def check_status(
    status: int, error_string: ErrorStringLookup, *, accessor: str
) -> None:
    """Raise the translated error for `status`, if any."""
    err = translate_status(status, error_string, accessor=accessor)
    if err is not None:
        raise err
