from __future__ import annotations

import unittest

from src.keynvml.domain._errors import AccessorFailedError
from src.keynvml.infrastructure.device._enumeration import (
    device_count,
    enumerate_devices,
)
from src.keynvml.infrastructure.native.nvml_ctypes import NvmlLib
from src.keynvml.infrastructure.native._native_loader import load_nvml


class _NvmlTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        try:
            cls.lib = NvmlLib(load_nvml())
            cls.lib.init()
        except Exception as e:
            cls.lib = None
            cls._skip_reason = f"NVML not available: {e!r}"

    @classmethod
    def tearDownClass(cls) -> None:
        if getattr(cls, "lib", None) is not None:
            cls.lib.shutdown()

    def setUp(self) -> None:
        if getattr(self, "lib", None) is None:
            self.skipTest(getattr(self, "_skip_reason", "NVML not available"))


class TestLiveNvml(_NvmlTestCase):
    def test_enumerates_every_counted_device(self) -> None:
        count = device_count(self.lib)
        if count == 0:
            self.skipTest("NVML loaded but reports no devices")

        devices = enumerate_devices(self.lib)
        self.assertEqual(len(devices), count)
        self.assertEqual([d.index for d in devices], list(range(count)))
        for dev in devices:
            self.assertTrue(dev.uuid.startswith(("GPU-", "MIG-")))
            self.assertTrue(dev.name)

    def test_memory_info_is_consistent(self) -> None:
        if device_count(self.lib) == 0:
            self.skipTest("NVML loaded but reports no devices")

        mem = enumerate_devices(self.lib)[0].memory_info()
        self.assertGreater(mem.total, 0)
        self.assertLessEqual(mem.used, mem.total)
        self.assertLessEqual(mem.free, mem.total)

    def test_optional_properties_fail_cleanly(self) -> None:
        # Fan speed and similar are unsupported on many boards; either a value
        # or a translated NVML error is acceptable.
        if device_count(self.lib) == 0:
            self.skipTest("NVML loaded but reports no devices")

        dev = enumerate_devices(self.lib)[0]
        for query in (dev.fan_speed_percent, dev.power_usage_milliwatts, dev.serial):
            with self.subTest(query=query.__name__):
                try:
                    query()
                except AccessorFailedError as e:
                    self.assertTrue(e.message)


if __name__ == "__main__":
    unittest.main()
