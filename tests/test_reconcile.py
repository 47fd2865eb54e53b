import unittest
from dataclasses import replace

from multiapk.core.errors import PropertiesChanged, StructureChanged, TooManyRevisions
from multiapk.core.ordering import plan_order
from multiapk.core.reconcile import reconcile
from multiapk.core.screens import ScreenSupport
from multiapk.core.variant import Variant


def _current() -> tuple[Variant, ...]:
    return plan_order(
        [
            Variant(
                min_sdk_version=7,
                screen_support=ScreenSupport.of("normal"),
                gl_es_version=0x00020000,
                relative_path="app-normal",
            ),
            Variant(
                min_sdk_version=7,
                screen_support=ScreenSupport.of("large"),
                gl_es_version=0x00020000,
                abi="armeabi",
                split_by_density=True,
                locale_filters=frozenset({"en"}),
                relative_path="app-large",
            ),
        ]
    )


class TestReconcile(unittest.TestCase):
    def test_absent_previous_returns_current(self) -> None:
        current = _current()
        self.assertEqual(reconcile(current, None), current)

    def test_zeroed_previous_round_trips(self) -> None:
        current = _current()
        previous = tuple(replace(item, revision=0) for item in current)
        self.assertEqual(reconcile(current, previous), current)

    def test_revisions_are_carried_forward(self) -> None:
        current = _current()
        previous = (current[0], replace(current[1], revision=3))
        reconciled = reconcile(current, previous)
        self.assertEqual([item.revision for item in reconciled], [0, 3])
        self.assertEqual([item.revision for item in current], [0, 0])

    def test_unedited_log_keeps_zero_revisions(self) -> None:
        current = _current()
        reconciled = reconcile(current, current)
        self.assertEqual([item.revision for item in reconciled], [0, 0])

    def test_count_change_is_structural(self) -> None:
        current = _current()
        with self.assertRaises(StructureChanged) as ctx:
            reconcile(current, current[:1], version_code=12)
        self.assertIn("versionCode 12", str(ctx.exception))

    def test_property_drift_is_rejected(self) -> None:
        current = _current()
        drifts = {
            "minSdkVersion": {"min_sdk_version": 8},
            "screens": {"screen_support": ScreenSupport.of("xlarge")},
            "glEsVersion": {"gl_es_version": None},
            "abi": {"abi": "x86"},
            "splitDensity": {"split_by_density": False},
            "locales": {"locale_filters": frozenset({"en", "fr"})},
        }
        for key, changes in drifts.items():
            with self.subTest(key=key):
                previous = (current[0], replace(current[1], **changes))
                with self.assertRaises(PropertiesChanged) as ctx:
                    reconcile(current, previous)
                self.assertIn(key, str(ctx.exception))

    def test_project_path_is_not_a_persisted_property(self) -> None:
        current = _current()
        previous = (current[0], replace(current[1], relative_path="moved/app-large"))
        self.assertEqual(reconcile(current, previous), current)

    def test_out_of_range_previous_revision_is_rejected(self) -> None:
        current = _current()
        previous = (current[0], replace(current[1], revision=100))
        with self.assertRaises(TooManyRevisions):
            reconcile(current, previous)


if __name__ == "__main__":
    unittest.main()
