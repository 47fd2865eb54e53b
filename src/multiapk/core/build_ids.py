"""Composition of published version codes from plan positions.

A published version code is ``version_code * OFFSET_VERSION_CODE +
build_slot * OFFSET_BUILD_SLOT + revision``. Slot and revision are each
capped so the mapping stays injective.
"""

from __future__ import annotations

from multiapk.core.errors import TooManyRevisions, TooManyVariants

MAX_REVISION = 100
MAX_BUILD_SLOT = 100
OFFSET_BUILD_SLOT = MAX_REVISION
OFFSET_VERSION_CODE = OFFSET_BUILD_SLOT * MAX_BUILD_SLOT


def check_build_slot(build_slot: int) -> int:
    if build_slot < 0 or build_slot >= MAX_BUILD_SLOT:
        raise TooManyVariants(
            f"Build slot {build_slot} is out of range; "
            f"valid build slots are 0-{MAX_BUILD_SLOT - 1}."
        )
    return build_slot


def check_revision(revision: int) -> int:
    if revision < 0 or revision >= MAX_REVISION:
        raise TooManyRevisions(
            f"Revision {revision} is out of range; valid revisions are 0-{MAX_REVISION - 1}."
        )
    return revision


def compose_version_code(version_code: int, build_slot: int, revision: int) -> int:
    if version_code < 0:
        raise ValueError(f"versionCode must be >= 0, got {version_code}.")
    check_build_slot(build_slot)
    check_revision(revision)
    return version_code * OFFSET_VERSION_CODE + build_slot * OFFSET_BUILD_SLOT + revision


def decompose_version_code(composed: int) -> tuple[int, int, int]:
    if composed < 0:
        raise ValueError(f"Composed version code must be >= 0, got {composed}.")
    version_code, remainder = divmod(composed, OFFSET_VERSION_CODE)
    build_slot, revision = divmod(remainder, OFFSET_BUILD_SLOT)
    return version_code, build_slot, revision
