from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from multiapk.core.errors import ManifestParseError
from multiapk.core.screens import SCREEN_SIZES, ScreenSupport

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "AndroidManifest.xml"
ANDROID_NS = "http://schemas.android.com/apk/res/android"
_DEFAULT_MIN_SDK_VERSION = 1
_SCREEN_FLAGS = {"anyDensity": "any_density", "resizeable": "resizeable"}


def _android_attr(name: str) -> str:
    return f"{{{ANDROID_NS}}}{name}"


@dataclass(frozen=True)
class ManifestDescriptor:
    """The manifest facts that take part in multi-APK differentiation.

    ``min_sdk_version`` is a ``str`` when the manifest names a platform
    codename instead of an API level.
    """

    app_package: str
    min_sdk_version: int | str
    screen_support: ScreenSupport
    gl_es_version: int | None = None
    declares_version_code: bool = False
    location: str = field(default="", compare=False)

    @property
    def is_codename(self) -> bool:
        return isinstance(self.min_sdk_version, str)


def format_gl_es_version(value: int | None) -> str:
    if value is None:
        return "unset"
    return f"{value >> 16}.{value & 0xFFFF}"


def _parse_sdk_value(raw: str | None, default: int | str) -> int | str:
    if raw is None:
        return default
    stripped = raw.strip()
    if not stripped:
        return default
    if stripped.isdigit():
        return int(stripped)
    return stripped


def _parse_bool(raw: str, *, attr: str, location: str) -> bool:
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ManifestParseError(
        f"Failed to validate {location}: supports-screens {attr} must be true or false."
    )


def _gl_es_version(root: ET.Element, location: str) -> int | None:
    values: list[int] = []
    for feature in root.iter("uses-feature"):
        raw = feature.get(_android_attr("glEsVersion"))
        if raw is None:
            continue
        try:
            value = int(raw.strip(), 0)
        except ValueError as exc:
            raise ManifestParseError(
                f"Failed to validate {location}: invalid glEsVersion {raw!r}."
            ) from exc
        if value < 0:
            raise ManifestParseError(
                f"Failed to validate {location}: glEsVersion cannot be negative, got {raw!r}."
            )
        values.append(value)
    return max(values) if values else None


def _screen_support(root: ET.Element, target_sdk_version: int, location: str) -> ScreenSupport:
    defaults = ScreenSupport.defaults_for(target_sdk_version)
    node = root.find("supports-screens")
    if node is None:
        return defaults

    sizes = set(defaults.sizes)
    flags = {"any_density": defaults.any_density, "resizeable": defaults.resizeable}
    for size in SCREEN_SIZES:
        raw = node.get(_android_attr(f"{size}Screens"))
        if raw is None:
            continue
        if _parse_bool(raw, attr=f"{size}Screens", location=location):
            sizes.add(size)
        else:
            sizes.discard(size)
    for attr, key in _SCREEN_FLAGS.items():
        raw = node.get(_android_attr(attr))
        if raw is not None:
            flags[key] = _parse_bool(raw, attr=attr, location=location)
    return ScreenSupport(frozenset(sizes), **flags)


def parse_manifest(path: Path) -> ManifestDescriptor:
    location = path.resolve().as_posix()
    try:
        tree = ET.parse(path)
    except OSError as exc:
        raise ManifestParseError(f"Failed to read {location}: {exc}") from exc
    except ET.ParseError as exc:
        raise ManifestParseError(f"Failed to validate {location}: {exc}") from exc

    root = tree.getroot()
    if root.tag != "manifest":
        raise ManifestParseError(f"Failed to validate {location}: root element must be <manifest>.")

    app_package = (root.get("package") or "").strip()
    if not app_package:
        raise ManifestParseError(f"Failed to validate {location}: missing package attribute.")

    uses_sdk = root.find("uses-sdk")
    min_raw = uses_sdk.get(_android_attr("minSdkVersion")) if uses_sdk is not None else None
    target_raw = uses_sdk.get(_android_attr("targetSdkVersion")) if uses_sdk is not None else None
    min_sdk_version = _parse_sdk_value(min_raw, _DEFAULT_MIN_SDK_VERSION)
    target_sdk_version = _parse_sdk_value(target_raw, min_sdk_version)
    if not isinstance(target_sdk_version, int):
        # Codename targets are newer than any released level.
        target_sdk_version = 10_000

    descriptor = ManifestDescriptor(
        app_package=app_package,
        min_sdk_version=min_sdk_version,
        screen_support=_screen_support(root, target_sdk_version, location),
        gl_es_version=_gl_es_version(root, location),
        declares_version_code=root.get(_android_attr("versionCode")) is not None,
        location=location,
    )
    logger.debug(
        "Parsed %s: minSdk=%s screens=%s gl=%s",
        location,
        descriptor.min_sdk_version,
        descriptor.screen_support,
        format_gl_es_version(descriptor.gl_es_version),
    )
    return descriptor
