"""
NVML device abstraction.

A `Device` wraps one opaque NVML handle together with the property registry
it reads through. Its identity (UUID, product name, index) is resolved
eagerly when the object is built and cached for its lifetime; every other
property is read from NVML on each call.

Construction order is UUID, then name, then index. The first failure
propagates unchanged, so a `Device` with a missing identity attribute never
exists.

Thread-safety
-------------
No locking is added here. Concurrent use of one handle is exactly as safe
as NVML makes it.
"""

from __future__ import annotations

import ctypes
from ctypes import POINTER, c_int, c_uint
from typing import Any, Optional

from ...domain._records import MemoryInfo, UtilizationRates, UtilizationSample
from ...domain._status import check_status
from ..native._structs import (
    TemperatureSensor,
    c_nvmlMemory_t,
    c_nvmlUtilization_t,
    nvmlDevice_t,
)
from ..properties._dispatch import get_int_property, get_text_property
from ..properties._registry import (
    IntProperty,
    IntPropertyName,
    PropertyRegistry,
    TextProperty,
    TextPropertyName,
    default_registry,
)

_TEMPERATURE_ARGTYPES = [nvmlDevice_t, c_int, POINTER(c_uint)]
_UTILIZATION_SAMPLE_ARGTYPES = [nvmlDevice_t, POINTER(c_uint), POINTER(c_uint)]
_UTILIZATION_RATES_ARGTYPES = [nvmlDevice_t, POINTER(c_nvmlUtilization_t)]
_MEMORY_INFO_ARGTYPES = [nvmlDevice_t, POINTER(c_nvmlMemory_t)]


class Device:
    """
    One physical accelerator as seen through NVML.

    Parameters
    ----------
    handle : nvmlDevice_t
        Opaque handle from `nvmlDeviceGetHandleByIndex_v2` (or any other
        NVML handle source). Never freed or copied by this class.
    registry : Optional[PropertyRegistry]
        Registry to dispatch property reads through. Defaults to
        `default_registry()`.

    Raises
    ------
    AccessorFailedError, EmptyResultError, PropertyNotFoundError
        If the UUID, name or index cannot be resolved.

    Notes
    -----
    `__slots__` keeps instances small and prevents ad-hoc attributes.
    """

    __slots__ = ("_handle", "_registry", "_uuid", "_name", "_index")

    def __init__(self, handle, registry: Optional[PropertyRegistry] = None) -> None:
        if registry is None:
            registry = default_registry()

        uuid = get_text_property(registry, handle, TextProperty.UUID)
        name = get_text_property(registry, handle, TextProperty.NAME)
        index = get_int_property(registry, handle, IntProperty.INDEX)

        self._handle = handle
        self._registry = registry
        self._uuid = uuid
        self._name = name
        self._index = index

    # ----------------------------
    # Identity (cached)
    # ----------------------------

    @property
    def handle(self):
        return self._handle

    @property
    def registry(self) -> PropertyRegistry:
        return self._registry

    @property
    def uuid(self) -> str:
        """Globally unique identifier, e.g. `GPU-5e1f0b3c-...`."""
        return self._uuid

    @property
    def name(self) -> str:
        """Product name, e.g. "Tesla K40m"."""
        return self._name

    @property
    def index(self) -> int:
        """NVML enumeration index."""
        return self._index

    # ----------------------------
    # Generic access
    # ----------------------------

    def int_property(self, name: IntPropertyName) -> int:
        """Read any registered integer property by enum member or name."""
        return get_int_property(self._registry, self._handle, name)

    def text_property(self, name: TextPropertyName) -> str:
        """Read any registered text property by enum member or name."""
        return get_text_property(self._registry, self._handle, name)

    # ----------------------------
    # Text properties
    # ----------------------------

    def serial(self) -> str:
        """Board serial number."""
        return self.text_property(TextProperty.SERIAL)

    def inforom_image_version(self) -> str:
        """Global inforom image version."""
        return self.text_property(TextProperty.INFOROM_IMAGE_VERSION)

    def vbios_version(self) -> str:
        return self.text_property(TextProperty.VBIOS_VERSION)

    # ----------------------------
    # Integer properties
    # ----------------------------

    def power_state(self) -> int:
        """Current performance state (0 = P0 max performance .. 15, 32 = unknown)."""
        return self.int_property(IntProperty.POWER_STATE)

    def minor_number(self) -> int:
        """
        Minor number of the device node, i.e. the N in /dev/nvidiaN.
        """
        return self.int_property(IntProperty.MINOR_NUMBER)

    def inforom_config_checksum(self) -> int:
        """
        Checksum of the configuration stored in the inforom.

        Identical checksums indicate identical configuration across devices.
        """
        return self.int_property(IntProperty.INFOROM_CONFIGURATION_CHECKSUM)

    def max_pcie_link_generation(self) -> int:
        return self.int_property(IntProperty.MAX_PCIE_LINK_GENERATION)

    def max_pcie_link_width(self) -> int:
        return self.int_property(IntProperty.MAX_PCIE_LINK_WIDTH)

    def curr_pcie_link_generation(self) -> int:
        return self.int_property(IntProperty.CURR_PCIE_LINK_GENERATION)

    def curr_pcie_link_width(self) -> int:
        return self.int_property(IntProperty.CURR_PCIE_LINK_WIDTH)

    def pcie_replay_counter(self) -> int:
        return self.int_property(IntProperty.PCIE_REPLAY_COUNTER)

    def fan_speed_percent(self) -> int:
        """Intended fan speed as a percentage of maximum (fan-equipped boards only)."""
        return self.int_property(IntProperty.FAN_SPEED)

    def power_management_limit_milliwatts(self) -> int:
        return self.int_property(IntProperty.POWER_MANAGEMENT_LIMIT)

    def power_management_default_limit_milliwatts(self) -> int:
        return self.int_property(IntProperty.POWER_MANAGEMENT_DEFAULT_LIMIT)

    def power_usage_milliwatts(self) -> int:
        """Current board power draw in milliwatts."""
        return self.int_property(IntProperty.POWER_USAGE)

    def enforced_power_limit_milliwatts(self) -> int:
        """Effective power limit after all limiters are taken into account, in mW."""
        return self.int_property(IntProperty.ENFORCED_POWER_LIMIT)

    def board_id(self) -> int:
        """Board identifier; identical for GPUs behind the same PLX switch."""
        return self.int_property(IntProperty.BOARD_ID)

    def is_multi_gpu_board(self) -> bool:
        # nvml.h: nvmlDeviceGetMultiGpuBoard sets multiGpuBool non-zero on multi-GPU boards.
        return self.int_property(IntProperty.MULTI_GPU_BOARD) != 0

    # ----------------------------
    # Multi-valued properties
    # ----------------------------

    def _call(self, symbol: str, argtypes, *args: Any) -> None:
        fn = self._registry.function(symbol, argtypes)
        check_status(
            fn(self._handle, *args), self._registry.error_string, accessor=symbol
        )

    def temperature_celsius(
        self, sensor: TemperatureSensor = TemperatureSensor.GPU
    ) -> int:
        """Current temperature of `sensor` in degrees Celsius."""
        temp = c_uint(0)
        self._call(
            "nvmlDeviceGetTemperature",
            _TEMPERATURE_ARGTYPES,
            int(sensor),
            ctypes.pointer(temp),
        )
        return int(temp.value)

    def decoder_utilization(self) -> UtilizationSample:
        return self._utilization_sample("nvmlDeviceGetDecoderUtilization")

    def encoder_utilization(self) -> UtilizationSample:
        return self._utilization_sample("nvmlDeviceGetEncoderUtilization")

    def _utilization_sample(self, symbol: str) -> UtilizationSample:
        value = c_uint(0)
        period = c_uint(0)
        self._call(
            symbol,
            _UTILIZATION_SAMPLE_ARGTYPES,
            ctypes.pointer(value),
            ctypes.pointer(period),
        )
        return UtilizationSample(int(value.value), int(period.value))

    def utilization_rates(self) -> UtilizationRates:
        """GPU and memory-controller busy percentages over the last sample period."""
        util = c_nvmlUtilization_t()
        self._call(
            "nvmlDeviceGetUtilizationRates",
            _UTILIZATION_RATES_ARGTYPES,
            ctypes.pointer(util),
        )
        return UtilizationRates(gpu=int(util.gpu), memory=int(util.memory))

    def memory_info(self) -> MemoryInfo:
        """Free, used and total framebuffer memory in bytes."""
        mem = c_nvmlMemory_t()
        self._call(
            "nvmlDeviceGetMemoryInfo", _MEMORY_INFO_ARGTYPES, ctypes.pointer(mem)
        )
        return MemoryInfo(free=int(mem.free), used=int(mem.used), total=int(mem.total))

    # ----------------------------
    # Dunder
    # ----------------------------

    def __repr__(self) -> str:
        return f"Device(index={self._index}, name={self._name!r}, uuid={self._uuid!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return self._uuid == other._uuid

    def __hash__(self) -> int:
        return hash(self._uuid)


def new_device(handle, registry: Optional[PropertyRegistry] = None) -> Device:
    """Build a `Device` from a caller-supplied handle."""
    return Device(handle, registry)
