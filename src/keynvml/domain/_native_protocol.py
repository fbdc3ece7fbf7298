"""
Native capability contract for keynvml.

The property registry, the dispatchers and the device enumerator never talk
to `ctypes.CDLL` directly. They depend on this duck-typed `NativeLibrary`
protocol instead: "give me a callable for this NVML symbol" and "describe this
status code". The production implementation is `NvmlLib`; tests provide a
pure-Python stand-in with the same two members.

Design notes
------------
- Uses `typing.Protocol` and `@runtime_checkable`, as for other structural
  contracts in the package.
- The callables returned by `function` follow the native calling convention:
  they take the handle and ctypes out-parameters, write the result through
  the pointers, and return an integer status code.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence, runtime_checkable


NativeFunction = Callable[..., int]


@runtime_checkable
class NativeLibrary(Protocol):
    """
    Duck-typed NVML capability set.

    Notes
    -----
    `argtypes` is the ctypes signature to declare on the foreign function.
    Implementations that are not backed by a real shared library may ignore
    it.
    """

    def function(self, symbol: str, argtypes: Sequence[Any]) -> NativeFunction: ...
    def error_string(self, status: int) -> Optional[str]: ...
