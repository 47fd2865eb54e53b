from __future__ import annotations

from dataclasses import dataclass, field

SCREEN_SIZES = ("small", "normal", "large", "xlarge")
_SIZE_INDEX = {name: index for index, name in enumerate(SCREEN_SIZES)}
_FLAG_ANY_DENSITY = "anyDensity"
_FLAG_RESIZEABLE = "resizeable"
_EMPTY_TOKEN = "none"


def _canonical_sizes(sizes: frozenset[str]) -> tuple[str, ...]:
    return tuple(sorted(sizes, key=lambda name: _SIZE_INDEX[name]))


@dataclass(frozen=True)
class ScreenSupport:
    """Screen-size buckets a manifest declares, plus compatibility flags.

    Install-time selection only looks at the size buckets, so the
    comparison helpers ignore the flags. The flags still take part in
    equality and in the encoded form written to the plan log.
    """

    sizes: frozenset[str] = field(default_factory=frozenset)
    any_density: bool = False
    resizeable: bool = False

    def __post_init__(self) -> None:
        sizes = frozenset(self.sizes)
        unknown = sorted(sizes - set(SCREEN_SIZES))
        if unknown:
            raise ValueError(f"Unknown screen size(s): {', '.join(unknown)}")
        object.__setattr__(self, "sizes", sizes)

    @classmethod
    def of(cls, *sizes: str, any_density: bool = False, resizeable: bool = False) -> ScreenSupport:
        return cls(frozenset(sizes), any_density=any_density, resizeable=resizeable)

    def same_sizes_as(self, other: ScreenSupport) -> bool:
        return self.sizes == other.sizes

    def strictly_different_from(self, other: ScreenSupport) -> bool:
        return self.sizes.isdisjoint(other.sizes)

    def overlaps_with(self, other: ScreenSupport) -> bool:
        """True when disjoint size sets interleave.

        ``{small, large}`` against ``{normal}`` interleaves: neither set sits
        entirely below the other, so no install priority can be derived.
        """
        if not self.sizes or not other.sizes:
            return False
        if not self.strictly_different_from(other):
            return False
        mine = [_SIZE_INDEX[name] for name in self.sizes]
        theirs = [_SIZE_INDEX[name] for name in other.sizes]
        return min(mine) < max(theirs) and min(theirs) < max(mine)

    def sort_key(self) -> tuple[tuple[int, ...], bool, bool]:
        indexes = tuple(sorted(_SIZE_INDEX[name] for name in self.sizes))
        return (indexes, self.any_density, self.resizeable)

    def encode(self) -> str:
        tokens = list(_canonical_sizes(self.sizes))
        if self.any_density:
            tokens.append(_FLAG_ANY_DENSITY)
        if self.resizeable:
            tokens.append(_FLAG_RESIZEABLE)
        return "|".join(tokens) if tokens else _EMPTY_TOKEN

    @classmethod
    def decode(cls, text: str) -> ScreenSupport:
        stripped = text.strip()
        if stripped == _EMPTY_TOKEN:
            return cls()
        sizes: set[str] = set()
        any_density = False
        resizeable = False
        for token in stripped.split("|"):
            token = token.strip()
            if token == _FLAG_ANY_DENSITY:
                any_density = True
            elif token == _FLAG_RESIZEABLE:
                resizeable = True
            elif token in _SIZE_INDEX:
                sizes.add(token)
            else:
                raise ValueError(f"Unknown screen support token: {token!r}")
        return cls(frozenset(sizes), any_density=any_density, resizeable=resizeable)

    @classmethod
    def defaults_for(cls, target_sdk_version: int) -> ScreenSupport:
        """Values the platform assumes when a manifest omits supports-screens."""
        modern = target_sdk_version >= 4
        sizes = {"normal"}
        if modern:
            sizes.update({"small", "large"})
        if target_sdk_version >= 9:
            sizes.add("xlarge")
        return cls(frozenset(sizes), any_density=modern, resizeable=modern)

    def __str__(self) -> str:
        sizes = ", ".join(_canonical_sizes(self.sizes)) or "no sizes"
        return f"[{sizes}]"
