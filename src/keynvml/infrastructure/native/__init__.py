from ._native_loader import load_nvml, LIBRARY_PATH_ENV
from .nvml_ctypes import NvmlLib, default_library, nvml_session
from ._structs import TemperatureSensor

__all__ = [
    load_nvml.__name__,
    "LIBRARY_PATH_ENV",
    NvmlLib.__name__,
    default_library.__name__,
    nvml_session.__name__,
    TemperatureSensor.__name__,
]
