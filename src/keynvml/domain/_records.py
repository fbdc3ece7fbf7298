"""
Value records returned by multi-valued NVML accessors.

These are plain immutable data carriers. They are built from the ctypes
out-parameters of a single native call and handed straight to the caller;
nothing in keynvml stores them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class UtilizationSample:
    """
    Decoder or encoder utilization reading.

    Attributes
    ----------
    value : int
        Utilization in percent.
    sampling_period_us : int
        Sampling window the value was averaged over, in microseconds.
    """

    value: int
    sampling_period_us: int


@dataclass(frozen=True)
class UtilizationRates:
    """GPU and memory-controller utilization in percent over the last sample period."""

    gpu: int
    memory: int


@dataclass(frozen=True)
class MemoryInfo:
    """
    Framebuffer memory usage of a device, in bytes.

    `used + free == total` holds for values reported by NVML, but it is not
    checked here.
    """

    free: int
    used: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        """Export as dict for JSON and UI."""
        return {"free": self.free, "used": self.used, "total": self.total}
