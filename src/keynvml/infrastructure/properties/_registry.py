"""
Property registry: symbolic property names -> native accessors.

This module defines the closed set of device properties keynvml can read
through the generic dispatchers, and the immutable registry that binds each
of them to an NVML export.

Design
------
- `IntProperty` and `TextProperty` are closed enums. Each member carries its
  public label (e.g. "PowerUsage"), the NVML symbol implementing it and, for
  text properties, the maximum buffer length NVML documents for it.
- `PropertyRegistry.from_library(lib)` resolves every member against a
  `NativeLibrary` once. The resulting mappings are exposed read-only
  (`MappingProxyType`) and never mutated afterwards.
- String lookup (label or enum member name) is accepted at the boundary so
  callers can select properties by name; internally everything is keyed by
  enum member.

Accessor signatures
-------------------
- integer: nvmlReturn_t fn(nvmlDevice_t device, unsigned int *out)
- text:    nvmlReturn_t fn(nvmlDevice_t device, char *buf, unsigned int length)
"""

from __future__ import annotations

import logging
from ctypes import POINTER, c_char, c_uint
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple, Union

from ...domain._native_protocol import NativeFunction, NativeLibrary
from ..native._structs import (
    NVML_DEVICE_INFOROM_VERSION_BUFFER_SIZE,
    NVML_DEVICE_NAME_V2_BUFFER_SIZE,
    NVML_DEVICE_SERIAL_BUFFER_SIZE,
    NVML_DEVICE_UUID_BUFFER_SIZE,
    NVML_DEVICE_VBIOS_VERSION_BUFFER_SIZE,
    nvmlDevice_t,
)
from ..native.nvml_ctypes import default_library

logger = logging.getLogger(__name__)

INT_ACCESSOR_ARGTYPES = [nvmlDevice_t, POINTER(c_uint)]
TEXT_ACCESSOR_ARGTYPES = [nvmlDevice_t, POINTER(c_char), c_uint]


class IntProperty(Enum):
    """Device properties read through a single `unsigned int` out-parameter."""

    INDEX = ("Index", "nvmlDeviceGetIndex")
    MINOR_NUMBER = ("MinorNumber", "nvmlDeviceGetMinorNumber")
    INFOROM_CONFIGURATION_CHECKSUM = (
        "InforomConfigurationChecksum",
        "nvmlDeviceGetInforomConfigurationChecksum",
    )
    MAX_PCIE_LINK_GENERATION = (
        "MaxPCIeLinkGeneration",
        "nvmlDeviceGetMaxPcieLinkGeneration",
    )
    MAX_PCIE_LINK_WIDTH = ("MaxPCIeLinkWidth", "nvmlDeviceGetMaxPcieLinkWidth")
    CURR_PCIE_LINK_GENERATION = (
        "CurrPCIeLinkGeneration",
        "nvmlDeviceGetCurrPcieLinkGeneration",
    )
    CURR_PCIE_LINK_WIDTH = ("CurrPCIeLinkWidth", "nvmlDeviceGetCurrPcieLinkWidth")
    PCIE_REPLAY_COUNTER = ("PCIeReplayCounter", "nvmlDeviceGetPcieReplayCounter")
    FAN_SPEED = ("FanSpeed", "nvmlDeviceGetFanSpeed")
    POWER_MANAGEMENT_LIMIT = (
        "PowerManagementLimit",
        "nvmlDeviceGetPowerManagementLimit",
    )
    POWER_MANAGEMENT_DEFAULT_LIMIT = (
        "PowerManagementDefaultLimit",
        "nvmlDeviceGetPowerManagementDefaultLimit",
    )
    POWER_USAGE = ("PowerUsage", "nvmlDeviceGetPowerUsage")
    ENFORCED_POWER_LIMIT = ("EnforcedPowerLimit", "nvmlDeviceGetEnforcedPowerLimit")
    BOARD_ID = ("BoardId", "nvmlDeviceGetBoardId")
    MULTI_GPU_BOARD = ("MultiGpuBoard", "nvmlDeviceGetMultiGpuBoard")
    # nvmlPstates_t is a C enum; NVML writes it through a 32-bit slot.
    POWER_STATE = ("PowerState", "nvmlDeviceGetPowerState")

    def __init__(self, label: str, symbol: str) -> None:
        self.label = label
        self.symbol = symbol


class TextProperty(Enum):
    """Device properties read into a caller-supplied, length-bounded char buffer."""

    NAME = ("Name", "nvmlDeviceGetName", NVML_DEVICE_NAME_V2_BUFFER_SIZE)
    SERIAL = ("Serial", "nvmlDeviceGetSerial", NVML_DEVICE_SERIAL_BUFFER_SIZE)
    UUID = ("UUID", "nvmlDeviceGetUUID", NVML_DEVICE_UUID_BUFFER_SIZE)
    INFOROM_IMAGE_VERSION = (
        "InforomImageVersion",
        "nvmlDeviceGetInforomImageVersion",
        NVML_DEVICE_INFOROM_VERSION_BUFFER_SIZE,
    )
    VBIOS_VERSION = (
        "VbiosVersion",
        "nvmlDeviceGetVbiosVersion",
        NVML_DEVICE_VBIOS_VERSION_BUFFER_SIZE,
    )

    def __init__(self, label: str, symbol: str, max_length: int) -> None:
        self.label = label
        self.symbol = symbol
        self.max_length = max_length


_INT_BY_LABEL: Dict[str, IntProperty] = {p.label: p for p in IntProperty}
_TEXT_BY_LABEL: Dict[str, TextProperty] = {p.label: p for p in TextProperty}

IntPropertyName = Union[IntProperty, str]
TextPropertyName = Union[TextProperty, str]


def resolve_int_property(name: object) -> Optional[IntProperty]:
    """Map an enum member, label or member name to an `IntProperty` (or None)."""
    if isinstance(name, IntProperty):
        return name
    if not isinstance(name, str):
        return None
    return _INT_BY_LABEL.get(name) or IntProperty.__members__.get(name)


def resolve_text_property(name: object) -> Optional[TextProperty]:
    """Map an enum member, label or member name to a `TextProperty` (or None)."""
    if isinstance(name, TextProperty):
        return name
    if not isinstance(name, str):
        return None
    return _TEXT_BY_LABEL.get(name) or TextProperty.__members__.get(name)


def property_label(name: object) -> str:
    """Readable name for error messages, whatever form the caller used."""
    label = getattr(name, "label", None)
    if isinstance(label, str):
        return label
    return name if isinstance(name, str) else repr(name)


@dataclass(frozen=True)
class IntAccessor:
    """Binding of one `IntProperty` to its native function."""

    prop: IntProperty
    fn: NativeFunction

    @property
    def symbol(self) -> str:
        return self.prop.symbol


@dataclass(frozen=True)
class TextAccessor:
    """Binding of one `TextProperty` to its native function and buffer bound."""

    prop: TextProperty
    fn: NativeFunction

    @property
    def symbol(self) -> str:
        return self.prop.symbol

    @property
    def max_length(self) -> int:
        return self.prop.max_length


class PropertyRegistry:
    """
    Immutable name -> accessor tables bound to one native library.

    Parameters
    ----------
    library : NativeLibrary
        Capability set the accessors were resolved from. Also provides the
        status-to-string lookup used when translating failures.
    int_accessors : Mapping[IntProperty, IntAccessor]
        Integer property table.
    text_accessors : Mapping[TextProperty, TextAccessor]
        Text property table.

    Notes
    -----
    Use `from_library` to build a registry covering every known property.
    The constructor accepts arbitrary (sub)sets, which is how a restricted
    registry is built.
    """

    __slots__ = ("library", "_int", "_text")

    def __init__(
        self,
        library: NativeLibrary,
        int_accessors: Mapping[IntProperty, IntAccessor],
        text_accessors: Mapping[TextProperty, TextAccessor],
    ) -> None:
        self.library = library
        self._int: Mapping[IntProperty, IntAccessor] = MappingProxyType(
            dict(int_accessors)
        )
        self._text: Mapping[TextProperty, TextAccessor] = MappingProxyType(
            dict(text_accessors)
        )

    @classmethod
    def from_library(cls, library: NativeLibrary) -> "PropertyRegistry":
        """Resolve every `IntProperty` and `TextProperty` against `library`."""
        int_accessors = {
            p: IntAccessor(p, library.function(p.symbol, INT_ACCESSOR_ARGTYPES))
            for p in IntProperty
        }
        text_accessors = {
            p: TextAccessor(p, library.function(p.symbol, TEXT_ACCESSOR_ARGTYPES))
            for p in TextProperty
        }
        logger.debug(
            "Built property registry: %d int, %d text accessors",
            len(int_accessors),
            len(text_accessors),
        )
        return cls(library, int_accessors, text_accessors)

    def lookup_int(self, name: object) -> Optional[IntAccessor]:
        prop = resolve_int_property(name)
        return None if prop is None else self._int.get(prop)

    def lookup_text(self, name: object) -> Optional[TextAccessor]:
        prop = resolve_text_property(name)
        return None if prop is None else self._text.get(prop)

    def int_properties(self) -> Tuple[IntProperty, ...]:
        return tuple(self._int)

    def text_properties(self) -> Tuple[TextProperty, ...]:
        return tuple(self._text)

    def function(self, symbol: str, argtypes) -> NativeFunction:
        """Resolve a non-registry export (multi-valued accessors) on the same library."""
        return self.library.function(symbol, argtypes)

    def error_string(self, status: int) -> Optional[str]:
        return self.library.error_string(status)

    def __repr__(self) -> str:
        return (
            f"PropertyRegistry(int={len(self._int)}, text={len(self._text)}, "
            f"library={self.library!r})"
        )


@lru_cache(maxsize=1)
def default_registry() -> PropertyRegistry:
    """
    Registry for the process-wide NVML, built on first use and cached.

    Raises
    ------
    FileNotFoundError, OSError
        If NVML cannot be loaded.
    """
    return PropertyRegistry.from_library(default_library())
