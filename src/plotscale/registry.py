from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .colors import is_color
from .config import SYMBOLS
from .errors import UnknownScaleError


class ScaleKind(Enum):
    Position = 1
    Color = 2
    Radius = 3
    Opacity = 4
    Symbol = 5
    Length = 6


class Family(Enum):
    Identity = 1
    Continuous = 2
    Diverging = 3
    Ordinal = 4
    Point = 5
    Band = 6
    Threshold = 7


# Every type tag accepted by the `type` option, including aliases that are
# resolved during inference.
TYPE_FAMILIES: Mapping[str, Family] = MappingProxyType(
    {
        "identity": Family.Identity,
        "linear": Family.Continuous,
        "pow": Family.Continuous,
        "sqrt": Family.Continuous,
        "log": Family.Continuous,
        "symlog": Family.Continuous,
        "utc": Family.Continuous,
        "time": Family.Continuous,
        "sequential": Family.Continuous,
        "cyclical": Family.Continuous,
        "diverging": Family.Diverging,
        "diverging-pow": Family.Diverging,
        "diverging-sqrt": Family.Diverging,
        "diverging-log": Family.Diverging,
        "diverging-symlog": Family.Diverging,
        "ordinal": Family.Ordinal,
        "categorical": Family.Ordinal,
        "point": Family.Point,
        "band": Family.Band,
        "threshold": Family.Threshold,
        "quantile": Family.Threshold,
        "quantize": Family.Threshold,
    }
)

_EVERY_FAMILY = frozenset(Family)
_POSITION = frozenset(
    {Family.Identity, Family.Continuous, Family.Point, Family.Band}
)
_QUANTITATIVE = frozenset({Family.Identity, Family.Continuous})


@dataclass(frozen=True)
class ScaleEntry:
    name: str
    kind: ScaleKind
    families: frozenset[Family]

    @property
    def is_position(self) -> bool:
        return self.kind == ScaleKind.Position

    @property
    def is_facet(self) -> bool:
        return self.name in ("fx", "fy")

    def allows(self, family: Family) -> bool:
        return family in self.families


REGISTRY: Mapping[str, ScaleEntry] = MappingProxyType(
    {
        "x": ScaleEntry("x", ScaleKind.Position, _POSITION),
        "y": ScaleEntry("y", ScaleKind.Position, _POSITION),
        "fx": ScaleEntry("fx", ScaleKind.Position, frozenset({Family.Band})),
        "fy": ScaleEntry("fy", ScaleKind.Position, frozenset({Family.Band})),
        "r": ScaleEntry("r", ScaleKind.Radius, _QUANTITATIVE),
        "color": ScaleEntry(
            "color", ScaleKind.Color, _EVERY_FAMILY - {Family.Point, Family.Band}
        ),
        "opacity": ScaleEntry(
            "opacity",
            ScaleKind.Opacity,
            _QUANTITATIVE | {Family.Ordinal, Family.Threshold},
        ),
        "symbol": ScaleEntry(
            "symbol", ScaleKind.Symbol, frozenset({Family.Identity, Family.Ordinal})
        ),
        "length": ScaleEntry("length", ScaleKind.Length, _QUANTITATIVE),
    }
)

# Canonical scale for each channel name a mark may declare.
CHANNEL_SCALES: Mapping[str, str] = MappingProxyType(
    {
        "x": "x",
        "x1": "x",
        "x2": "x",
        "y": "y",
        "y1": "y",
        "y2": "y",
        "fx": "fx",
        "fy": "fy",
        "fill": "color",
        "stroke": "color",
        "r": "r",
        "opacity": "opacity",
        "fillOpacity": "opacity",
        "strokeOpacity": "opacity",
        "symbol": "symbol",
        "length": "length",
    }
)

_SYMBOL_NAMES = frozenset(SYMBOLS) | {"asterisk", "plus", "times", "hexagon"}


def registered(name: Any) -> ScaleEntry:
    """Look up a scale name, raising UnknownScaleError for anything else."""
    if isinstance(name, str) and name in REGISTRY:
        return REGISTRY[name]
    raise UnknownScaleError(name)


def family_of(type: str) -> Optional[Family]:
    return TYPE_FAMILIES.get(type)


def is_symbol(value: Any) -> bool:
    return isinstance(value, str) and value.lower() in _SYMBOL_NAMES


def _all_literal(values, predicate) -> bool:
    # Empty or all-null channels are not literal; they still get a scale.
    seen = False
    for v in values:
        if v is None:
            continue
        if not predicate(v):
            return False
        seen = True
    return seen


def channel_scale(channel) -> Optional[str]:
    """
    Resolve which scale, if any, a channel is bound to.

    `None` and `False` opt out, `True` binds the channel's canonical scale, and
    `"auto"` does the same unless the values are already literal colors (for
    color channels) or symbol names (for the symbol channel). Any other string
    must name a registered scale.
    """
    scale = channel.scale
    canonical = CHANNEL_SCALES.get(channel.name)
    if scale is None or scale is False:
        return None
    if scale is True:
        if canonical is None:
            raise UnknownScaleError(channel.name)
        return canonical
    if scale == "auto":
        if canonical is None:
            return None
        kind = REGISTRY[canonical].kind
        if kind == ScaleKind.Color and _all_literal(channel.values, is_color):
            return None
        if kind == ScaleKind.Symbol and _all_literal(channel.values, is_symbol):
            return None
        return canonical
    return registered(scale).name
