"""
Scoped host buffers for text accessors.

A `TextBuffer` is a zero-initialised numpy `uint8` array sized to one text
property's declared maximum length. It is acquired with `with`, handed to
the native accessor as a `char *`, decoded, and released when the block
exits, whichever way it exits.

Decoding is bounded structurally: only the first `length` bytes of the array
are ever inspected, and the string ends at the first NUL inside that window
or at the window's end if there is none.
"""

from __future__ import annotations

from ctypes import POINTER, c_char
from typing import Optional

import numpy as np


class TextBuffer:
    """
    One-shot, exclusively owned text buffer.

    Parameters
    ----------
    length : int
        Buffer size in bytes, including room for the terminator.

    Raises
    ------
    ValueError
        If `length` is not positive.

    Notes
    -----
    - A buffer can be acquired once and released once. Re-entering or
      releasing twice raises `RuntimeError`.
    - `pointer()` and `decode()` are only valid while acquired.
    """

    __slots__ = ("length", "_array", "_released")

    def __init__(self, length: int) -> None:
        length = int(length)
        if length <= 0:
            raise ValueError(f"TextBuffer length must be positive, got {length}")
        self.length = length
        self._array: Optional[np.ndarray] = None
        self._released = False

    def __enter__(self) -> "TextBuffer":
        if self._array is not None or self._released:
            raise RuntimeError("TextBuffer can only be acquired once")
        self._array = np.zeros((self.length,), dtype=np.uint8)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    @property
    def acquired(self) -> bool:
        return self._array is not None

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._array is None:
            raise RuntimeError("TextBuffer released without being acquired")
        self._array = None
        self._released = True

    def _require(self) -> np.ndarray:
        if self._array is None:
            raise RuntimeError("TextBuffer is not acquired")
        return self._array

    def pointer(self):
        """Return the buffer as a `char *` suitable for a native accessor."""
        return self._require().ctypes.data_as(POINTER(c_char))

    def decode(self) -> str:
        """
        Decode the buffer contents up to the first NUL, never past `length`.

        Invalid UTF-8 is replaced rather than raised, so the result never
        has more characters than there are bytes in the window.
        """
        window = self._require()[: self.length]
        nul = np.flatnonzero(window == 0)
        end = int(nul[0]) if nul.size else self.length
        return window[:end].tobytes().decode("utf-8", errors="replace")
