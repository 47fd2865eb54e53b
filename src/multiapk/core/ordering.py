from __future__ import annotations

from dataclasses import replace
from functools import cmp_to_key
from typing import Iterable, Sequence

from multiapk.core.build_ids import MAX_BUILD_SLOT
from multiapk.core.errors import TooManyVariants
from multiapk.core.variant import Variant, compare_variants


def order_variants(variants: Iterable[Variant]) -> tuple[Variant, ...]:
    return tuple(sorted(variants, key=cmp_to_key(compare_variants)))


def assign_build_slots(ordered: Sequence[Variant]) -> tuple[Variant, ...]:
    if len(ordered) > MAX_BUILD_SLOT:
        raise TooManyVariants(
            f"Multi-apk export supports at most {MAX_BUILD_SLOT} APKs; "
            f"this configuration produces {len(ordered)}."
        )
    return tuple(replace(variant, build_slot=index) for index, variant in enumerate(ordered))


def plan_order(variants: Iterable[Variant]) -> tuple[Variant, ...]:
    return assign_build_slots(order_variants(variants))
