from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from multiapk.core.errors import UnsupportedCodename
from multiapk.core.manifest import ManifestDescriptor
from multiapk.core.project_config import ProjectConfig
from multiapk.core.variant import Variant

logger = logging.getLogger(__name__)


def base_variant(
    descriptor: ManifestDescriptor,
    *,
    relative_path: str = "",
    project_root: Path | None = None,
) -> Variant:
    if isinstance(descriptor.min_sdk_version, str):
        raise UnsupportedCodename(
            "Codename in minSdkVersion is not supported by multi-apk export."
        )
    return Variant(
        min_sdk_version=descriptor.min_sdk_version,
        screen_support=descriptor.screen_support,
        gl_es_version=descriptor.gl_es_version,
        relative_path=relative_path,
        project_root=project_root,
    )


def expand_variants(
    descriptor: ManifestDescriptor,
    config: ProjectConfig,
    *,
    abis: Sequence[str] = (),
    relative_path: str = "",
    project_root: Path | None = None,
) -> tuple[Variant, ...]:
    """Expand one manifest into its soft variants.

    Without an ABI split the single variant carries the density and locale
    settings. With one, each discovered ABI gets its own variant sharing the
    primary key; no ABI found leaves the unmodified base variant.
    """
    base = base_variant(descriptor, relative_path=relative_path, project_root=project_root)
    if config.split_by_abi and not abis:
        logger.debug("No ABI folders found for %s; keeping the base variant.", relative_path)
        return (base,)

    base = replace(
        base,
        split_by_density=config.split_by_density,
        locale_filters=config.locale_filters,
    )
    if not config.split_by_abi:
        return (base,)

    variants = tuple(replace(base, abi=abi) for abi in abis)
    logger.debug("Split %s by ABI: %s", relative_path, ", ".join(abis))
    return variants
