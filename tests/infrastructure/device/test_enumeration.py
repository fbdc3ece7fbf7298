import unittest

from src.keynvml.domain._errors import (
    AccessorFailedError,
    EmptyResultError,
    EnumerationFailedError,
    NoDevicesFoundError,
)
from src.keynvml.domain._status import NvmlReturn
from src.keynvml.infrastructure.device._device import Device
from src.keynvml.infrastructure.device._enumeration import (
    device_count,
    enumerate_devices,
)
from src.keynvml.infrastructure.properties._registry import PropertyRegistry

from .._nvml_stub_utils import FakeNvml, make_device


def _three_devices():
    return [
        make_device(uuid=f"GPU-{i:08d}".encode(), name=b"NVIDIA H100", index=i)
        for i in range(3)
    ]


class TestEnumerateDevices(unittest.TestCase):
    def test_returns_devices_in_index_order(self):
        lib = FakeNvml(_three_devices())
        devices = enumerate_devices(lib)

        self.assertEqual(len(devices), 3)
        self.assertTrue(all(isinstance(d, Device) for d in devices))
        self.assertEqual([d.index for d in devices], [0, 1, 2])
        self.assertEqual(devices[2].uuid, "GPU-00000002")

    def test_uses_supplied_registry(self):
        lib = FakeNvml(_three_devices())
        registry = PropertyRegistry.from_library(lib)
        devices = enumerate_devices(registry=registry)
        self.assertTrue(all(d.registry is registry for d in devices))

    def test_device_count(self):
        self.assertEqual(device_count(FakeNvml(_three_devices())), 3)
        with self.assertRaises(AccessorFailedError):
            device_count(FakeNvml(count_status=int(NvmlReturn.ERROR_UNINITIALIZED)))

    def test_zero_devices_raises_no_devices_found(self):
        lib = FakeNvml([])
        with self.assertRaises(NoDevicesFoundError):
            enumerate_devices(lib)

    def test_count_failure_is_recoverable(self):
        lib = FakeNvml(
            _three_devices(), count_status=int(NvmlReturn.ERROR_DRIVER_NOT_LOADED)
        )
        with self.assertRaises(EnumerationFailedError) as ctx:
            enumerate_devices(lib)
        self.assertIsNone(ctx.exception.index)
        self.assertIsInstance(ctx.exception.__cause__, AccessorFailedError)
        self.assertEqual(ctx.exception.__cause__.status, 9)

    def test_handle_lookup_failure_returns_no_devices(self):
        # A hard enumeration error: index 1 has no handle. Nothing from index 0
        # (already looked up) or index 2 leaks out; the caller gets only the error.
        lib = FakeNvml(
            _three_devices(), handle_statuses={1: int(NvmlReturn.ERROR_GPU_IS_LOST)}
        )
        result = None
        with self.assertRaises(EnumerationFailedError) as ctx:
            result = enumerate_devices(lib)
        self.assertIsNone(result)
        self.assertEqual(ctx.exception.index, 1)
        self.assertIn("GPU is lost", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, AccessorFailedError)
        # Handles are gathered before any Device is built, so no device query ran.
        self.assertEqual(lib.device_calls(), [])

    def test_device_construction_failure_also_aborts(self):
        # Contrast with a silently truncated list: a device that cannot be built
        # mid-enumeration is reported the same way as a failed handle lookup,
        # with the index that failed and the construction error as the cause.
        devices = _three_devices()
        devices[1].texts["nvmlDeviceGetName"] = b""
        lib = FakeNvml(devices)

        with self.assertRaises(EnumerationFailedError) as ctx:
            enumerate_devices(lib)
        self.assertEqual(ctx.exception.index, 1)
        self.assertIsInstance(ctx.exception.__cause__, EmptyResultError)
        # Device 2 is never attempted.
        self.assertNotIn(
            ("nvmlDeviceGetUUID", 0x1000 + 2),
            lib.calls,
        )


if __name__ == "__main__":
    unittest.main()
