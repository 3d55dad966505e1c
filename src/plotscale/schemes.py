from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Mapping, Optional, override

from cmap import Colormap

from .colors import distinguishable_colors, format_color, rgba
from .errors import InvalidScaleDefinition
from .interpolate import (
    BasisInterpolator,
    CubehelixInterpolator,
    Interpolator,
    RainbowInterpolator,
    TurboInterpolator,
    quantize,
)


class SchemeKind(Enum):
    Categorical = 1
    Sequential = 2
    Diverging = 3
    Cyclical = 4


def _colors(specifier: str) -> tuple[str, ...]:
    return tuple(f"#{specifier[i : i + 6]}" for i in range(0, len(specifier), 6))


@lru_cache(maxsize=None)
def _colormap(name: str) -> Colormap:
    return Colormap(name)


@dataclass(frozen=True)
class CatalogInterpolator(Interpolator):
    """Samples a named colormap from the `cmap` catalog."""

    name: str

    @override
    def __call__(self, t):
        t = min(max(float(t), 0.0), 1.0)
        return format_color(rgba(_colormap(self.name)(t)))


@dataclass(frozen=True)
class Scheme:
    name: str
    kind: SchemeKind
    interpolate: Optional[Callable[[float], str]] = None
    tables: tuple[tuple[str, ...], ...] = ()
    colors: tuple[str, ...] = ()
    generate: Optional[Callable[[int], list[str]]] = None

    def interpolator(self) -> Callable[[float], str]:
        """The continuous form of the scheme, for quantitative scales."""
        if self.interpolate is None:
            raise InvalidScaleDefinition(f"unknown quantitative scheme: {self.name}")
        return self.interpolate

    def discrete(self, n: int) -> list[str]:
        """`n` colors for an ordinal or threshold scale."""
        if self.generate is not None:
            return self.generate(n)
        if self.colors:
            if 0 < n < len(self.colors):
                return list(self.colors[:n])
            return list(self.colors)
        if self.tables:
            smallest = self.tables[0]
            if n <= 0:
                return []
            if n == 1:
                return [smallest[1]]
            if n == 2:
                if self.kind == SchemeKind.Diverging:
                    return [smallest[0], smallest[2]]
                return [smallest[1], smallest[2]]
            if n - 3 < len(self.tables):
                return list(self.tables[n - 3])
        return quantize(self.interpolator(), n)


def _catalog_colors(name: str) -> tuple[str, ...]:
    return tuple(c.hex.lower() for c in _colormap(name).iter_colors())


def _brewer(name: str, kind: SchemeKind, catalog: str, largest: int) -> Scheme:
    # ColorBrewer publishes one table per size, starting at 3.
    tables = tuple(
        _catalog_colors(f"colorbrewer:{catalog}_{n}") for n in range(3, largest + 1)
    )
    return Scheme(name, kind, BasisInterpolator(tables[-1]), tables)


def _categorical(name: str, specifier: str) -> Scheme:
    return Scheme(name, SchemeKind.Categorical, colors=_colors(specifier))


def _brewer_categorical(name: str, catalog: str) -> Scheme:
    return Scheme(
        name, SchemeKind.Categorical, colors=_catalog_colors(f"colorbrewer:{catalog}")
    )


_SCHEMES = [
    # Categorical
    _categorical(
        "category10",
        "1f77b4ff7f0e2ca02cd627289467bd8c564be377c27f7f7fbcbd2217becf",
    ),
    _categorical(
        "tableau10",
        "4e79a7f28e2ce1575976b7b259a14fedc949af7aa1ff9da79c755fbab0ab",
    ),
    _brewer_categorical("accent", "Accent"),
    _brewer_categorical("dark2", "Dark2"),
    _brewer_categorical("paired", "Paired"),
    _brewer_categorical("pastel1", "Pastel1"),
    _brewer_categorical("set1", "Set1"),
    _brewer_categorical("set2", "Set2"),
    _brewer_categorical("set3", "Set3"),
    Scheme("distinguishable", SchemeKind.Categorical, generate=distinguishable_colors),
    # Diverging
    _brewer("rdbu", SchemeKind.Diverging, "RdBu", 11),
    _brewer("rdylbu", SchemeKind.Diverging, "RdYlBu", 11),
    _brewer("piyg", SchemeKind.Diverging, "PiYG", 11),
    _brewer("spectral", SchemeKind.Diverging, "Spectral", 11),
    # Sequential
    _brewer("blues", SchemeKind.Sequential, "Blues", 9),
    _brewer("greens", SchemeKind.Sequential, "Greens", 9),
    _brewer("greys", SchemeKind.Sequential, "Greys", 9),
    _brewer("oranges", SchemeKind.Sequential, "Oranges", 9),
    _brewer("purples", SchemeKind.Sequential, "Purples", 9),
    _brewer("reds", SchemeKind.Sequential, "Reds", 9),
    Scheme("turbo", SchemeKind.Sequential, TurboInterpolator()),
    Scheme(
        "warm",
        SchemeKind.Sequential,
        CubehelixInterpolator((-100.0, 0.75, 0.35), (80.0, 1.5, 0.8)),
    ),
    Scheme(
        "cool",
        SchemeKind.Sequential,
        CubehelixInterpolator((260.0, 0.75, 0.35), (80.0, 1.5, 0.8)),
    ),
    Scheme(
        "cubehelix",
        SchemeKind.Sequential,
        CubehelixInterpolator((300.0, 0.5, 0.0), (-240.0, 0.5, 1.0)),
    ),
    # Cyclical
    Scheme("rainbow", SchemeKind.Cyclical, RainbowInterpolator()),
]

SCHEMES: Mapping[str, Scheme] = MappingProxyType({s.name: s for s in _SCHEMES})


def get_scheme(name: str) -> Scheme:
    """
    Look up a scheme by (case-insensitive) name. Names not in the built-in
    registry are tried against the `cmap` colormap catalog, e.g. "viridis" or
    "colorcet:cet_l20".
    """
    if not isinstance(name, str):
        raise InvalidScaleDefinition(f"invalid scheme: {name!r}")
    scheme = SCHEMES.get(name.lower())
    if scheme is not None:
        return scheme
    try:
        _colormap(name)
    except (ValueError, LookupError) as e:
        raise InvalidScaleDefinition(f"unknown scheme: {name}") from e
    return Scheme(name, SchemeKind.Sequential, CatalogInterpolator(name))
