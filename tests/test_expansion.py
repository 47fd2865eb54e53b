import tempfile
import unittest
from pathlib import Path

from multiapk.core.abi_probe import list_abi_folders
from multiapk.core.errors import UnsupportedCodename
from multiapk.core.expansion import base_variant, expand_variants
from multiapk.core.manifest import ManifestDescriptor
from multiapk.core.project_config import ProjectConfig
from multiapk.core.screens import ScreenSupport


def _descriptor(min_sdk: int = 7) -> ManifestDescriptor:
    return ManifestDescriptor(
        app_package="com.example.app",
        min_sdk_version=min_sdk,
        screen_support=ScreenSupport.of("normal", "large"),
        gl_es_version=0x00020000,
    )


class TestExpandVariants(unittest.TestCase):
    def test_without_abi_split_yields_one_variant_regardless_of_abis(self) -> None:
        config = ProjectConfig(split_by_abi=False, split_by_density=True, locale_filters=frozenset({"en"}))
        for abis in ((), ("armeabi",), ("armeabi", "x86")):
            variants = expand_variants(_descriptor(), config, abis=abis, relative_path="app")
            self.assertEqual(len(variants), 1)
            self.assertIsNone(variants[0].abi)
            self.assertTrue(variants[0].split_by_density)
            self.assertEqual(variants[0].locale_filters, frozenset({"en"}))

    def test_abi_split_yields_one_soft_variant_per_abi(self) -> None:
        config = ProjectConfig(split_by_abi=True)
        variants = expand_variants(_descriptor(), config, abis=["armeabi", "x86"], relative_path="app")
        self.assertEqual([item.abi for item in variants], ["armeabi", "x86"])
        self.assertEqual(variants[0].primary_key, variants[1].primary_key)
        self.assertEqual({item.relative_path for item in variants}, {"app"})

    def test_abi_split_carries_secondary_metadata(self) -> None:
        config = ProjectConfig(
            split_by_abi=True,
            split_by_density=True,
            locale_filters=frozenset({"en", "fr,de"}),
        )
        variants = expand_variants(_descriptor(), config, abis=["armeabi", "x86"])
        for variant in variants:
            self.assertTrue(variant.split_by_density)
            self.assertEqual(variant.locale_filters, frozenset({"en", "fr,de"}))

    def test_abi_split_without_abis_keeps_base_variant(self) -> None:
        config = ProjectConfig(
            split_by_abi=True,
            split_by_density=True,
            locale_filters=frozenset({"en"}),
        )
        variants = expand_variants(_descriptor(), config, abis=[], relative_path="app")
        self.assertEqual(variants, (base_variant(_descriptor(), relative_path="app"),))
        self.assertIsNone(variants[0].abi)
        self.assertFalse(variants[0].split_by_density)
        self.assertEqual(variants[0].locale_filters, frozenset())
        self.assertEqual(variants[0].soft_variant_map(), {})

    def test_codename_cannot_be_expanded(self) -> None:
        with self.assertRaises(UnsupportedCodename):
            base_variant(
                ManifestDescriptor("com.example.app", "Froyo", ScreenSupport.of("normal"))
            )

    def test_soft_variant_map(self) -> None:
        config = ProjectConfig(split_by_density=True, locale_filters=frozenset({"fr", "en"}))
        (variant,) = expand_variants(_descriptor(), config)
        self.assertEqual(
            list(variant.soft_variant_map().items()),
            [
                ("hdpi", "hdpi,nodpi"),
                ("mdpi", "mdpi,nodpi"),
                ("ldpi", "ldpi,nodpi"),
                ("en", "en"),
                ("fr", "fr"),
            ],
        )


class TestListAbiFolders(unittest.TestCase):
    def test_only_folders_with_native_libraries_count(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            project_root = Path(temp_dir)
            libs = project_root / "libs"
            (libs / "armeabi").mkdir(parents=True)
            (libs / "armeabi" / "libgame.so").write_bytes(b"\x7fELF")
            (libs / "x86").mkdir()
            (libs / "x86" / "LIBGAME.SO").write_bytes(b"\x7fELF")
            (libs / "mips").mkdir()
            (libs / "mips" / "README.txt").write_text("empty", encoding="utf-8")
            (libs / "empty").mkdir()
            (libs / "helper.jar").write_bytes(b"PK")

            self.assertEqual(list_abi_folders(project_root), ["armeabi", "x86"])

    def test_missing_libs_folder_yields_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertEqual(list_abi_folders(Path(temp_dir)), [])


if __name__ == "__main__":
    unittest.main()
