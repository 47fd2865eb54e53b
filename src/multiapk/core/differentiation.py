from __future__ import annotations

import logging
from typing import Iterable

from multiapk.core.errors import (
    AmbiguousScreenOverlap,
    ForbiddenVersionCodeDeclared,
    IdenticalVariants,
    IndeterminateScreenPriority,
    UnsupportedCodename,
)
from multiapk.core.manifest import ManifestDescriptor

logger = logging.getLogger(__name__)


class DifferentiationValidator:
    """Accepts manifests one at a time, rejecting any that cannot be told
    apart at install time from one already accepted.

    Devices pick an APK by min SDK first, then screen size and GL ES
    version, so two manifests sharing a min SDK must differ cleanly on
    one of the other two.
    """

    def __init__(self) -> None:
        self._accepted: list[ManifestDescriptor] = []

    @property
    def accepted(self) -> tuple[ManifestDescriptor, ...]:
        return tuple(self._accepted)

    def add(self, descriptor: ManifestDescriptor) -> None:
        location = descriptor.location or descriptor.app_package
        if descriptor.declares_version_code:
            raise ForbiddenVersionCodeDeclared(
                f"{location} is not valid: versionCode must not be set for multi-apk export."
            )
        if descriptor.is_codename:
            raise UnsupportedCodename(
                f"{location}: codename in minSdkVersion "
                f"({descriptor.min_sdk_version}) is not supported by multi-apk export."
            )

        for previous in self._accepted:
            if previous.min_sdk_version != descriptor.min_sdk_version:
                continue
            _check_pair(descriptor, previous)

        self._accepted.append(descriptor)
        logger.debug("Accepted %s for multi-apk export.", location)


def _check_pair(current: ManifestDescriptor, previous: ManifestDescriptor) -> None:
    location = current.location or current.app_package
    other_location = previous.location or previous.app_package
    current_ss = current.screen_support
    previous_ss = previous.screen_support
    same_screens = current_ss.same_sizes_as(previous_ss)

    if same_screens and current.gl_es_version == previous.gl_es_version:
        raise IdenticalVariants(
            "Android manifests must differ in at least one of the following values:\n"
            "- minSdkVersion\n"
            "- SupportsScreen (screen sizes only)\n"
            "- GL ES version.\n"
            f"{location} and {other_location} are considered identical for multi-apk export.",
            location=location,
            other_location=other_location,
        )
    if same_screens:
        return

    if not current_ss.strictly_different_from(previous_ss):
        raise AmbiguousScreenOverlap(
            "APK differentiation by Supports-Screens cannot support different APKs "
            "supporting the same screen size.\n"
            f"{location} supports {current_ss}\n"
            f"{other_location} supports {previous_ss}\n",
            location=location,
            other_location=other_location,
        )
    if current_ss.overlaps_with(previous_ss):
        raise IndeterminateScreenPriority(
            "Unable to compute APK priority due to incompatible difference in "
            "Supports-Screens values.\n"
            f"{location} supports {current_ss}\n"
            f"{other_location} supports {previous_ss}\n",
            location=location,
            other_location=other_location,
        )


def validate_differentiation(descriptors: Iterable[ManifestDescriptor]) -> DifferentiationValidator:
    validator = DifferentiationValidator()
    for descriptor in descriptors:
        validator.add(descriptor)
    return validator
