from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence
import math

import numpy as np

from .config import Config
from .errors import InvalidScaleDefinition
from .inference import Inference, is_number
from .interpolate import (
    Flipped,
    Piecewise,
    interpolate_number,
    interpolate_rgb,
    interpolate_round,
    is_factory,
    quantize,
)
from .options import ScaleOptions
from .registry import ScaleEntry, ScaleKind
from .schemes import get_scheme


@dataclass(frozen=True)
class Dimensions:
    """Outer size of the plot frame and its margins, in pixels."""

    width: float = 640.0
    height: float = 400.0
    margin_top: float = 20.0
    margin_right: float = 20.0
    margin_bottom: float = 20.0
    margin_left: float = 20.0

    @staticmethod
    def from_options(options: Mapping[str, Any], config: Config) -> "Dimensions":
        """
        Read `width`, `height`, `margin` and `marginTop|Right|Bottom|Left`
        (or their snake_case spellings) from top-level plot options.
        """

        def number(*keys: str, default: float) -> float:
            for key in keys:
                value = options.get(key)
                if value is not None:
                    try:
                        return float(value)
                    except (TypeError, ValueError):
                        raise InvalidScaleDefinition(
                            f"invalid {key} option: {value!r}"
                        ) from None
            return default

        margin = options.get("margin")

        def side(camel: str, snake: str, default: float) -> float:
            fallback = default if margin is None else number("margin", default=default)
            return number(camel, snake, default=fallback)

        return Dimensions(
            width=number("width", default=config.width),
            height=number("height", default=config.height),
            margin_top=side("marginTop", "margin_top", config.margin_top),
            margin_right=side("marginRight", "margin_right", config.margin_right),
            margin_bottom=side("marginBottom", "margin_bottom", config.margin_bottom),
            margin_left=side("marginLeft", "margin_left", config.margin_left),
        )


def _collapse(a: float, b: float) -> tuple[float, float]:
    # Insets never invert a range; an overfull frame shrinks to its midpoint.
    if a > b:
        mid = (a + b) / 2
        return mid, mid
    return a, b


def position_range(
    entry: ScaleEntry, options: ScaleOptions, dimensions: Dimensions, ordinal: bool
) -> list[float]:
    """
    Pixel range of a position scale. Continuous y runs bottom to top; ordinal
    y (points, bands, facets) runs top to bottom.
    """
    inset = options.inset or 0.0
    if entry.name in ("x", "fx"):
        left, right = _collapse(
            dimensions.margin_left + inset,
            dimensions.width - dimensions.margin_right - inset,
        )
        return [left, right]
    top, bottom = _collapse(
        dimensions.margin_top + inset,
        dimensions.height - dimensions.margin_bottom - inset,
    )
    return [top, bottom] if ordinal else [bottom, top]


def _spread(lo: float, hi: float, n: int) -> list[float]:
    if n <= 2:
        return [lo, hi]
    return [lo + (hi - lo) * i / (n - 1) for i in range(n)]


def _positive(values: Sequence[Any]) -> list[float]:
    return [float(v) for v in values if is_number(v) and v > 0]


def _median_quantile(channel_values: Sequence[Sequence[Any]], p: float) -> Optional[float]:
    quantiles = [
        float(np.quantile(positive, p))
        for positive in map(_positive, channel_values)
        if positive
    ]
    if not quantiles:
        return None
    return float(np.median(quantiles))


def _cap(values: list[float], limit: float) -> list[float]:
    top = max(values, default=0.0)
    if top > limit:
        k = limit / top
        return [k * v for v in values]
    return values


def radius_range(
    domain: Sequence[float], channel_values: Sequence[Sequence[Any]], config: Config
) -> list[float]:
    """
    Default radius range: a typical (25th percentile) value gets a radius of
    `config.radius` pixels, with the largest radius capped at `config.radius_max`.
    """
    h25 = _median_quantile(channel_values, 0.25)
    if h25 is None:
        return [0.0, config.radius]
    return _cap(
        [config.radius * math.sqrt(max(float(d), 0.0) / h25) for d in domain],
        config.radius_max,
    )


def length_range(
    domain: Sequence[float], channel_values: Sequence[Sequence[Any]], config: Config
) -> list[float]:
    h60 = _median_quantile(channel_values, 0.6)
    if h60 is None:
        return [0.0, config.length]
    return _cap([config.length * float(d) / h60 for d in domain], config.length_max)


def continuous_range(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    domain: Sequence[Any],
    channel_values: Sequence[Sequence[Any]],
    dimensions: Dimensions,
    config: Config,
) -> tuple[list[Any], Any]:
    """
    Resolve the range and interpolator of a continuous scale. When an explicit
    range does not line up with the domain, the range stops are distributed
    evenly in t and the reported range becomes the t values.
    """
    interpolate = options.interpolate
    range_ = None if options.range is None else list(options.range)
    reverse = options.reverse

    match entry.kind:
        case ScaleKind.Position:
            if range_ is None:
                lo, hi = position_range(entry, options, dimensions, ordinal=False)
                range_ = _spread(lo, hi, len(domain))
            if interpolate is None:
                interpolate = interpolate_round if options.round else interpolate_number
        case ScaleKind.Color:
            scheme = options.scheme or inference.scheme
            if interpolate is None:
                if scheme is not None:
                    interpolate = get_scheme(scheme).interpolator()
                elif range_ is not None:
                    interpolate = interpolate_rgb
                else:
                    interpolate = get_scheme(config.continuous_scheme).interpolator()
        case ScaleKind.Radius:
            if range_ is None:
                range_ = radius_range(domain, channel_values, config)
        case ScaleKind.Length:
            if range_ is None:
                range_ = length_range(domain, channel_values, config)
        case ScaleKind.Opacity:
            if range_ is None:
                range_ = _spread(0, 1, len(domain))
        case _:
            raise InvalidScaleDefinition(
                f"invalid type for {entry.name} scale: {inference.type}"
            )

    if interpolate is None:
        interpolate = interpolate_number

    if range_ is not None and len(range_) != len(domain):
        if not is_factory(interpolate):
            raise InvalidScaleDefinition(
                f"invalid piecewise interpolator for {entry.name} scale"
            )
        interpolate = Piecewise(interpolate, tuple(range_))
        range_ = None

    if not is_factory(interpolate):
        if reverse:
            interpolate = Flipped(interpolate)
            reverse = False
        if range_ is None:
            range_ = _spread(0, 1, len(domain))

    if reverse:
        range_ = range_[::-1]
    return range_, interpolate


def _t_interpolator(entry: ScaleEntry, interpolate: Any):
    if is_factory(interpolate):
        raise InvalidScaleDefinition(
            f"invalid interpolator for {entry.name} scale: expected a function of t"
        )
    return interpolate


def _encoding_colors(
    entry: ScaleEntry,
    options: ScaleOptions,
    n: int,
    default_scheme: str,
) -> list[Any]:
    match entry.kind:
        case ScaleKind.Color:
            if options.scheme is not None:
                return get_scheme(options.scheme).discrete(n)
            if options.interpolate is not None:
                return quantize(_t_interpolator(entry, options.interpolate), n)
            return get_scheme(default_scheme).discrete(n)
        case ScaleKind.Opacity:
            if options.interpolate is not None:
                return quantize(_t_interpolator(entry, options.interpolate), n)
            return quantize(interpolate_number(0, 1), n)
        case _:
            raise InvalidScaleDefinition(f"a range is required for the {entry.name} scale")


def ordinal_range(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    domain: Sequence[Any],
    config: Config,
) -> list[Any]:
    if options.range is not None:
        return list(options.range)
    if entry.kind == ScaleKind.Symbol:
        return list(config.symbols)
    default = config.categorical_scheme if inference.categorical else config.ordinal_scheme
    return _encoding_colors(entry, options, len(domain), default)


def threshold_range(
    entry: ScaleEntry,
    options: ScaleOptions,
    buckets: int,
    descending: bool,
    config: Config,
) -> list[Any]:
    """
    Range of a threshold scale with `buckets` buckets. A descending domain
    (stored ascending) and `reverse` each flip the bucket order.
    """
    if options.range is not None:
        range_ = list(options.range)
    else:
        range_ = _encoding_colors(entry, options, buckets, config.threshold_scheme)
    if descending != options.reverse:
        range_ = range_[::-1]
    return range_
