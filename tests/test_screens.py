import unittest

from multiapk.core.screens import ScreenSupport


class TestScreenSupport(unittest.TestCase):
    def test_same_sizes_ignores_flags(self) -> None:
        left = ScreenSupport.of("normal", "large", any_density=True)
        right = ScreenSupport.of("large", "normal", resizeable=True)
        self.assertTrue(left.same_sizes_as(right))
        self.assertNotEqual(left, right)

    def test_strictly_different_requires_no_shared_bucket(self) -> None:
        self.assertTrue(ScreenSupport.of("normal").strictly_different_from(ScreenSupport.of("large")))
        self.assertFalse(
            ScreenSupport.of("normal", "large").strictly_different_from(ScreenSupport.of("normal"))
        )

    def test_interleaved_sizes_overlap(self) -> None:
        outer = ScreenSupport.of("small", "large")
        inner = ScreenSupport.of("normal")
        self.assertTrue(outer.overlaps_with(inner))
        self.assertTrue(inner.overlaps_with(outer))

    def test_adjacent_ranges_do_not_overlap(self) -> None:
        low = ScreenSupport.of("small", "normal")
        high = ScreenSupport.of("large", "xlarge")
        self.assertFalse(low.overlaps_with(high))
        self.assertFalse(high.overlaps_with(low))

    def test_shared_bucket_is_not_reported_as_overlap(self) -> None:
        self.assertFalse(
            ScreenSupport.of("normal", "large").overlaps_with(ScreenSupport.of("normal"))
        )

    def test_unknown_size_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ScreenSupport.of("huge")

    def test_encode_is_canonical(self) -> None:
        screens = ScreenSupport.of("xlarge", "small", any_density=True, resizeable=True)
        self.assertEqual(screens.encode(), "small|xlarge|anyDensity|resizeable")
        self.assertEqual(ScreenSupport.decode(screens.encode()), screens)
        self.assertEqual(ScreenSupport().encode(), "none")
        self.assertEqual(ScreenSupport.decode("none"), ScreenSupport())

    def test_decode_rejects_unknown_token(self) -> None:
        with self.assertRaises(ValueError):
            ScreenSupport.decode("normal|wide")

    def test_defaults_follow_target_sdk(self) -> None:
        self.assertEqual(ScreenSupport.defaults_for(3), ScreenSupport.of("normal"))
        self.assertEqual(
            ScreenSupport.defaults_for(4),
            ScreenSupport.of("small", "normal", "large", any_density=True, resizeable=True),
        )
        self.assertIn("xlarge", ScreenSupport.defaults_for(9).sizes)

    def test_sort_key_orders_smaller_screens_first(self) -> None:
        ordered = sorted(
            [ScreenSupport.of("xlarge"), ScreenSupport.of("small"), ScreenSupport.of("normal")],
            key=ScreenSupport.sort_key,
        )
        self.assertEqual([screens.encode() for screens in ordered], ["small", "normal", "xlarge"])


if __name__ == "__main__":
    unittest.main()
