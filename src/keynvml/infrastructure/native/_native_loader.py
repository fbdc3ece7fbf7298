"""
NVML shared library loader.

This module centralizes the logic for locating and loading the NVIDIA
Management Library via `ctypes`. It does not bind any symbols; that is the
job of `nvml_ctypes.NvmlLib`.

Resolution policy
-----------------
1. An explicit `lib_path` argument always wins.
2. Otherwise the `KEYNVML_LIBRARY_PATH` environment variable, if set.
3. Otherwise the platform defaults:
   - Linux / others: `libnvidia-ml.so.1`, then `libnvidia-ml.so`, resolved
     by the dynamic loader's normal search path.
   - Windows: `nvml.dll` in `%WINDIR%\\System32`, then in
     `%ProgramFiles%\\NVIDIA Corporation\\NVSMI`.

Windows-specific considerations
-------------------------------
On Windows (Python 3.8+) dependent DLLs are only found in registered
directories. The directory of the chosen `nvml.dll` is registered with
`os.add_dll_directory(...)` and the handle is retained on the loaded library
so the registration outlives this function.
"""

from __future__ import annotations

import ctypes
import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

LIBRARY_PATH_ENV = "KEYNVML_LIBRARY_PATH"


def _default_candidates() -> List[str]:
    """
    Return the platform-specific NVML library candidates, in priority order.

    Returns
    -------
    List[str]
        Sonames (Linux) or absolute paths (Windows).
    """
    if sys.platform.startswith("win"):
        windir = os.environ.get("WINDIR", r"C:\Windows")
        program_files = os.environ.get("ProgramFiles", r"C:\Program Files")
        return [
            str(Path(windir) / "System32" / "nvml.dll"),
            str(Path(program_files) / "NVIDIA Corporation" / "NVSMI" / "nvml.dll"),
        ]
    return ["libnvidia-ml.so.1", "libnvidia-ml.so"]


@lru_cache(maxsize=1)
def load_nvml(lib_path: Optional[str] = None) -> ctypes.CDLL:
    """
    Load and cache the NVML shared library.

    Parameters
    ----------
    lib_path : Optional[str]
        Path to a specific NVML library file. If None, the
        `KEYNVML_LIBRARY_PATH` environment variable and then the platform
        defaults are tried.

    Returns
    -------
    ctypes.CDLL
        Loaded NVML handle.

    Raises
    ------
    FileNotFoundError
        If an explicit path (argument or environment variable) does not exist.
    OSError
        If none of the default candidates can be loaded.

    Notes
    -----
    Uses `lru_cache(maxsize=1)`: the environment variable is read on the
    first call only.
    """
    if lib_path is None:
        lib_path = os.environ.get(LIBRARY_PATH_ENV) or None

    if lib_path is not None:
        p = Path(lib_path).resolve()
        if not p.exists():
            raise FileNotFoundError(f"NVML library not found: {p}")
        return _load_cdll(str(p))

    errors: list[str] = []
    for candidate in _default_candidates():
        if os.path.isabs(candidate) and not os.path.exists(candidate):
            errors.append(f"- {candidate} (missing)")
            continue
        try:
            return _load_cdll(candidate)
        except OSError as e:
            logger.debug("NVML candidate %s failed to load: %s", candidate, e)
            errors.append(f"- {candidate} (failed to load: {e})")

    raise OSError("Failed to load the NVML library. Tried:\n" + "\n".join(errors))


def _load_cdll(name: str) -> ctypes.CDLL:
    handles = []
    if (
        sys.platform.startswith("win")
        and hasattr(os, "add_dll_directory")
        and os.path.isabs(name)
    ):
        handles.append(os.add_dll_directory(os.path.dirname(name)))

    lib = ctypes.CDLL(name)
    setattr(lib, "_keynvml_dll_dir_handles", handles)
    logger.debug("Loaded NVML from %s", name)
    return lib
