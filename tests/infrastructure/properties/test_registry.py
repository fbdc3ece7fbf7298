import unittest
from ctypes import POINTER, c_char, c_uint

from src.keynvml.infrastructure.properties._registry import (
    INT_ACCESSOR_ARGTYPES,
    TEXT_ACCESSOR_ARGTYPES,
    IntAccessor,
    IntProperty,
    PropertyRegistry,
    TextProperty,
)

from .._nvml_stub_utils import FakeNvml


class TestPropertyRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self.lib = FakeNvml()
        self.registry = PropertyRegistry.from_library(self.lib)

    def test_from_library_registers_every_property(self):
        self.assertEqual(set(self.registry.int_properties()), set(IntProperty))
        self.assertEqual(set(self.registry.text_properties()), set(TextProperty))

    def test_from_library_declares_native_signatures(self):
        for prop in IntProperty:
            self.assertEqual(self.lib.requested[prop.symbol], INT_ACCESSOR_ARGTYPES)
        for prop in TextProperty:
            self.assertEqual(self.lib.requested[prop.symbol], TEXT_ACCESSOR_ARGTYPES)

        self.assertIs(INT_ACCESSOR_ARGTYPES[1], POINTER(c_uint))
        self.assertIs(TEXT_ACCESSOR_ARGTYPES[1], POINTER(c_char))

    def test_lookup_accepts_member_label_and_member_name(self):
        by_member = self.registry.lookup_int(IntProperty.POWER_USAGE)
        by_label = self.registry.lookup_int("PowerUsage")
        by_name = self.registry.lookup_int("POWER_USAGE")
        self.assertIsNotNone(by_member)
        self.assertIs(by_member, by_label)
        self.assertIs(by_member, by_name)
        self.assertEqual(by_member.symbol, "nvmlDeviceGetPowerUsage")

        text = self.registry.lookup_text("UUID")
        self.assertIs(text, self.registry.lookup_text(TextProperty.UUID))
        self.assertEqual(text.max_length, 80)

    def test_lookup_unknown_returns_none(self):
        self.assertIsNone(self.registry.lookup_int("NotAProperty"))
        self.assertIsNone(self.registry.lookup_text("NotAProperty"))
        self.assertIsNone(self.registry.lookup_int(None))
        self.assertIsNone(self.registry.lookup_int(42))

    def test_lookup_does_not_cross_kinds(self):
        self.assertIsNone(self.registry.lookup_int("Name"))
        self.assertIsNone(self.registry.lookup_int(TextProperty.NAME))
        self.assertIsNone(self.registry.lookup_text("PowerUsage"))
        self.assertIsNone(self.registry.lookup_text(IntProperty.INDEX))

    def test_text_buffer_lengths_are_per_property(self):
        lengths = {p.label: self.registry.lookup_text(p).max_length for p in TextProperty}
        self.assertEqual(
            lengths,
            {
                "Name": 96,
                "Serial": 30,
                "UUID": 80,
                "InforomImageVersion": 16,
                "VbiosVersion": 32,
            },
        )

    def test_tables_are_read_only(self):
        with self.assertRaises(TypeError):
            self.registry._int[IntProperty.INDEX] = None  # type: ignore[index]
        with self.assertRaises(TypeError):
            self.registry._text[TextProperty.NAME] = None  # type: ignore[index]

    def test_registry_copies_input_mappings(self):
        table = {IntProperty.INDEX: IntAccessor(IntProperty.INDEX, lambda *a: 0)}
        registry = PropertyRegistry(self.lib, table, {})
        table[IntProperty.BOARD_ID] = IntAccessor(IntProperty.BOARD_ID, lambda *a: 0)

        self.assertIsNotNone(registry.lookup_int("Index"))
        self.assertIsNone(registry.lookup_int("BoardId"))
        self.assertEqual(registry.text_properties(), ())

    def test_error_string_delegates_to_library(self):
        self.assertEqual(self.registry.error_string(3), "Not Supported")
        self.assertIsNone(self.registry.error_string(4242))

    def test_labels_and_symbols_are_unique(self):
        labels = [p.label for p in IntProperty] + [p.label for p in TextProperty]
        symbols = [p.symbol for p in IntProperty] + [p.symbol for p in TextProperty]
        self.assertEqual(len(labels), len(set(labels)))
        self.assertEqual(len(symbols), len(set(symbols)))


if __name__ == "__main__":
    unittest.main()
