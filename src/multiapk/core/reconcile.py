"""Carry revisions forward from a previous build log.

A revision lets one APK be re-spun without bumping the top-level version
code. Everything else about the plan must match the previous build
position by position; any drift needs a new version code instead.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from multiapk.core.build_ids import check_revision
from multiapk.core.errors import PropertiesChanged, StructureChanged
from multiapk.core.variant import Variant

logger = logging.getLogger(__name__)


def _changed_keys(current: Variant, previous: Variant) -> list[str]:
    mine = current.persisted_properties()
    theirs = previous.persisted_properties()
    return sorted(key for key in mine if mine[key] != theirs.get(key))


def reconcile(
    current: Sequence[Variant],
    previous: Sequence[Variant] | None,
    *,
    version_code: int | None = None,
) -> tuple[Variant, ...]:
    if previous is None:
        return tuple(current)

    label = f" at versionCode {version_code}" if version_code is not None else ""
    if len(previous) != len(current):
        raise StructureChanged(
            f"Project export is setup differently from previous export{label}.\n"
            f"The previous export had {len(previous)} APK(s), this one has {len(current)}.\n"
            "Any change in the multi-apk configuration requires an increment of the versionCode."
        )

    reconciled: list[Variant] = []
    for index, (mine, theirs) in enumerate(zip(current, previous)):
        updated = replace(mine, revision=check_revision(theirs.revision))
        changed = _changed_keys(updated, theirs)
        if changed:
            raise PropertiesChanged(
                f"Project export is setup differently from previous export{label}.\n"
                f"APK at position {index} changed: {', '.join(changed)}.\n"
                "Any change in the multi-apk configuration requires an increment "
                "of the versionCode."
            )
        reconciled.append(updated)

    logger.debug("Reconciled %d variant(s) with the previous build log.", len(reconciled))
    return tuple(reconciled)
