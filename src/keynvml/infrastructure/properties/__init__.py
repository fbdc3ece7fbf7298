"""
Property dispatch public API.

Exports the closed property enums, the immutable registry and the two
generic dispatchers.
"""

from ._registry import (
    IntProperty,
    TextProperty,
    IntAccessor,
    TextAccessor,
    PropertyRegistry,
    default_registry,
)
from ._buffers import TextBuffer
from ._dispatch import get_int_property, get_text_property

__all__ = [
    IntProperty.__name__,
    TextProperty.__name__,
    IntAccessor.__name__,
    TextAccessor.__name__,
    PropertyRegistry.__name__,
    default_registry.__name__,
    TextBuffer.__name__,
    get_int_property.__name__,
    get_text_property.__name__,
]
