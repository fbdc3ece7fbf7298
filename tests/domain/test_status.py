import unittest

from src.keynvml.domain._errors import AccessorFailedError, NvmlError
from src.keynvml.domain._status import NvmlReturn, check_status, translate_status


class TestTranslateStatus(unittest.TestCase):
    def setUp(self) -> None:
        self.lookups = []

    def _lookup(self, status):
        self.lookups.append(status)
        return {3: "Not Supported", 15: "GPU is lost"}.get(status)

    def test_success_returns_none_without_lookup(self):
        self.assertIsNone(
            translate_status(NvmlReturn.SUCCESS, self._lookup, accessor="nvmlX")
        )
        self.assertIsNone(translate_status(0, self._lookup, accessor="nvmlX"))
        self.assertEqual(self.lookups, [])

    def test_failure_carries_native_message(self):
        err = translate_status(3, self._lookup, accessor="nvmlDeviceGetFanSpeed")
        self.assertIsInstance(err, AccessorFailedError)
        self.assertEqual(err.accessor, "nvmlDeviceGetFanSpeed")
        self.assertEqual(err.status, NvmlReturn.ERROR_NOT_SUPPORTED)
        self.assertEqual(err.message, "Not Supported")
        self.assertIn("Not Supported", str(err))
        self.assertEqual(self.lookups, [3])

    def test_fallback_message_when_lookup_yields_nothing(self):
        err = translate_status(4242, self._lookup, accessor="nvmlX")
        self.assertEqual(err.status, 4242)
        self.assertEqual(err.message, "unknown NVML status 4242")

        err = translate_status(1, lambda s: "", accessor="nvmlX")
        self.assertEqual(err.message, "unknown NVML status 1")

    def test_translate_does_not_raise(self):
        # Returned, not raised.
        err = translate_status(15, self._lookup, accessor="nvmlX")
        self.assertIsInstance(err, NvmlError)

    def test_check_status_raises_only_on_failure(self):
        check_status(0, self._lookup, accessor="nvmlX")
        with self.assertRaises(AccessorFailedError) as ctx:
            check_status(15, self._lookup, accessor="nvmlDeviceGetPowerUsage")
        self.assertEqual(ctx.exception.message, "GPU is lost")


class TestNvmlReturn(unittest.TestCase):
    def test_documented_values(self):
        self.assertEqual(NvmlReturn.SUCCESS, 0)
        self.assertEqual(NvmlReturn.ERROR_INSUFFICIENT_SIZE, 7)
        self.assertEqual(NvmlReturn.ERROR_FUNCTION_NOT_FOUND, 13)
        self.assertEqual(NvmlReturn.ERROR_UNKNOWN, 999)

    def test_current_driver_codes_are_named(self):
        self.assertEqual(NvmlReturn.ERROR_FREQ_NOT_SUPPORTED, 24)
        self.assertEqual(NvmlReturn.ERROR_ARGUMENT_VERSION_MISMATCH, 25)
        self.assertEqual(NvmlReturn.ERROR_DEPRECATED, 26)
        self.assertEqual(NvmlReturn.ERROR_NOT_READY, 27)
        self.assertEqual(NvmlReturn.ERROR_GPU_NOT_FOUND, 28)
        self.assertEqual(NvmlReturn.ERROR_INVALID_STATE, 29)
        # Every code from SUCCESS through the newest is contiguous.
        self.assertEqual(
            sorted(int(c) for c in NvmlReturn if c != NvmlReturn.ERROR_UNKNOWN),
            list(range(30)),
        )

    def test_translated_status_compares_by_name(self):
        err = translate_status(28, lambda s: "GPU not found", accessor="nvmlX")
        self.assertEqual(err.status, NvmlReturn.ERROR_GPU_NOT_FOUND)


if __name__ == "__main__":
    unittest.main()
