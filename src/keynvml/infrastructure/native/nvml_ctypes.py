"""
ctypes bindings for the NVIDIA Management Library.

This module provides the thin binding layer between keynvml and NVML. It
implements the `NativeLibrary` contract (`function` + `error_string`) on top
of a loaded `ctypes.CDLL`, plus the library lifecycle calls `nvmlInit_v2` and
`nvmlShutdown`.

Design notes
------------
- Symbols are resolved on first use and cached per `NvmlLib`, with their
  argtypes/restype declared once.
- A symbol missing from the installed driver does not raise at resolution
  time. It resolves to a stand-in that returns
  `NVML_ERROR_FUNCTION_NOT_FOUND`, so the failure surfaces through the normal
  status translation path when (and only if) the property is requested.
- Higher-level dispatch (which symbol implements which property, buffer
  sizes, decoding) lives in `keynvml.infrastructure.properties`.
"""

from __future__ import annotations

import ctypes
import logging
from contextlib import contextmanager
from ctypes import c_char_p, c_int
from functools import lru_cache
from typing import Any, Dict, Iterator, Optional, Sequence

from ...domain._errors import NvmlError
from ...domain._native_protocol import NativeFunction
from ...domain._status import NvmlReturn, check_status
from ._native_loader import load_nvml

logger = logging.getLogger(__name__)


def _missing_symbol(*args: Any) -> int:
    return int(NvmlReturn.ERROR_FUNCTION_NOT_FOUND)


class NvmlLib:
    """
    Thin binding layer for NVML exports.
    """

    def __init__(self, lib: ctypes.CDLL) -> None:
        self.lib = lib
        self._bound = False
        self._functions: Dict[str, NativeFunction] = {}

    def _bind(self) -> None:
        if self._bound:
            return

        lib = self.lib

        # nvmlReturn_t nvmlInit_v2(void)
        lib.nvmlInit_v2.argtypes = []
        lib.nvmlInit_v2.restype = c_int

        # nvmlReturn_t nvmlShutdown(void)
        lib.nvmlShutdown.argtypes = []
        lib.nvmlShutdown.restype = c_int

        # const char* nvmlErrorString(nvmlReturn_t result)
        lib.nvmlErrorString.argtypes = [c_int]
        lib.nvmlErrorString.restype = c_char_p

        self._bound = True

    def function(self, symbol: str, argtypes: Sequence[Any]) -> NativeFunction:
        """
        Resolve an NVML export and declare its signature.

        Parameters
        ----------
        symbol : str
            Exported function name, e.g. "nvmlDeviceGetPowerUsage".
        argtypes : Sequence
            ctypes argument types. The return type is always `nvmlReturn_t`.

        Returns
        -------
        Callable[..., int]
            The foreign function, or a stand-in returning
            `NVML_ERROR_FUNCTION_NOT_FOUND` if the driver does not export it.
        """
        fn = self._functions.get(symbol)
        if fn is not None:
            return fn

        try:
            foreign = getattr(self.lib, symbol)
        except AttributeError:
            logger.debug("NVML does not export %s", symbol)
            fn = _missing_symbol
        else:
            foreign.argtypes = list(argtypes)
            foreign.restype = c_int
            fn = foreign

        self._functions[symbol] = fn
        return fn

    def error_string(self, status: int) -> Optional[str]:
        """Return NVML's description of `status`, or None if it has none."""
        self._bind()
        raw = self.lib.nvmlErrorString(int(status))
        if not raw:
            return None
        return raw.decode("utf-8", errors="replace")

    def init(self) -> None:
        self._bind()
        check_status(self.lib.nvmlInit_v2(), self.error_string, accessor="nvmlInit_v2")

    def shutdown(self) -> None:
        self._bind()
        check_status(
            self.lib.nvmlShutdown(), self.error_string, accessor="nvmlShutdown"
        )


# ---------------------------------------------------------------------
# Process-wide default binding
# ---------------------------------------------------------------------


@lru_cache(maxsize=1)
def default_library() -> NvmlLib:
    """
    Return the `NvmlLib` bound to the process-wide NVML (see `load_nvml`).

    Raises
    ------
    FileNotFoundError, OSError
        Propagated from `load_nvml` if NVML cannot be loaded.
    """
    return NvmlLib(load_nvml())


@contextmanager
def nvml_session(library: Optional[NvmlLib] = None) -> Iterator[NvmlLib]:
    """
    Initialize NVML for the duration of a `with` block.

    `nvmlShutdown` is always called on exit, including when the body raises.
    If both the body and the shutdown fail, the body's exception propagates
    and the shutdown failure is logged as a warning.
    NVML reference-counts init/shutdown pairs, so sessions may nest.

    Example
    -------
        with nvml_session() as lib:
            for dev in enumerate_devices(lib):
                print(dev.name, dev.power_usage_milliwatts())
    """
    lib = library if library is not None else default_library()
    lib.init()
    try:
        yield lib
    except BaseException:
        # The body's error wins; a failing shutdown is only logged.
        try:
            lib.shutdown()
        except NvmlError:
            logger.warning("nvmlShutdown failed after session error", exc_info=True)
        raise
    lib.shutdown()
