from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from multiapk.core.screens import ScreenSupport

SOFT_DENSITIES = ("hdpi", "mdpi", "ldpi")


@dataclass(frozen=True)
class Variant:
    """One planned APK.

    ``min_sdk_version``, ``screen_support`` and ``gl_es_version`` form the
    differentiating key. ``abi``, ``split_by_density`` and ``locale_filters``
    are secondary axes. ``project_root`` is only known for freshly computed
    plans and never takes part in equality.
    """

    min_sdk_version: int
    screen_support: ScreenSupport
    gl_es_version: int | None = None
    abi: str | None = None
    split_by_density: bool = False
    locale_filters: frozenset[str] = field(default_factory=frozenset)
    relative_path: str = ""
    project_root: Path | None = field(default=None, compare=False)
    build_slot: int = 0
    revision: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "locale_filters", frozenset(self.locale_filters))

    @property
    def primary_key(self) -> tuple[int, ScreenSupport, int | None]:
        return (self.min_sdk_version, self.screen_support, self.gl_es_version)

    def soft_variant_map(self) -> dict[str, str]:
        soft: dict[str, str] = {}
        if self.split_by_density:
            for density in SOFT_DENSITIES:
                soft[density] = f"{density},nodpi"
        for locale_filter in sorted(self.locale_filters):
            soft[locale_filter] = locale_filter
        return soft

    def persisted_properties(self) -> dict[str, Any]:
        return {
            "minSdkVersion": self.min_sdk_version,
            "screens": self.screen_support.encode(),
            "glEsVersion": self.gl_es_version,
            "abi": self.abi,
            "splitDensity": self.split_by_density,
            "locales": tuple(sorted(self.locale_filters)),
        }

    def output_name(self, soft_variant: str | None = None) -> str:
        parts = [PurePosixPath(self.relative_path.replace("\\", "/")).name]
        if self.abi:
            parts.append(self.abi)
        if soft_variant:
            parts.append(soft_variant)
        return "-".join(part for part in parts if part)


@dataclass(frozen=True)
class Plan:
    app_package: str
    version_code: int
    variants: tuple[Variant, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", tuple(self.variants))


def _compare_values(left: Any, right: Any) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def _optional_key(value: Any) -> tuple[bool, Any]:
    # Unset sorts before any set value.
    return (value is not None, value if value is not None else 0)


def compare_variants(left: Variant, right: Variant) -> int:
    """Total order over variants built only from their planned attributes.

    Order: min SDK, screen support, GL ES version, ABI, density split,
    locale filters. Project paths and discovery order never take part.
    """
    keys = (
        (left.min_sdk_version, right.min_sdk_version),
        (left.screen_support.sort_key(), right.screen_support.sort_key()),
        (_optional_key(left.gl_es_version), _optional_key(right.gl_es_version)),
        ((left.abi is not None, left.abi or ""), (right.abi is not None, right.abi or "")),
        (left.split_by_density, right.split_by_density),
        (tuple(sorted(left.locale_filters)), tuple(sorted(right.locale_filters))),
    )
    for mine, theirs in keys:
        result = _compare_values(mine, theirs)
        if result:
            return result
    return 0
