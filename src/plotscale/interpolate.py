"""
Interpolators map a parameter `t` (nominally in [0, 1]) to an output value;
interpolator factories build an interpolator between two endpoints. Both are
frozen value objects, so two descriptors built from the same options compare
equal.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, override
import inspect
import math

import numpy as np

from .colors import format_color, oklab_to_rgb, rgb_to_oklab, rgba
from .errors import InvalidScaleDefinition


class Interpolator(ABC):
    @abstractmethod
    def __call__(self, t: float) -> Any:
        pass


class InterpolatorFactory(ABC):
    @abstractmethod
    def __call__(self, a: Any, b: Any) -> Interpolator:
        pass


def is_factory(interpolate: Any) -> bool:
    """
    True if `interpolate` takes two endpoints, False if it maps `t` directly.
    Plain callables are classified by their number of required positional
    parameters.
    """
    if isinstance(interpolate, InterpolatorFactory):
        return True
    if isinstance(interpolate, Interpolator):
        return False
    try:
        signature = inspect.signature(interpolate)
    except (TypeError, ValueError):
        return False
    required = [
        p
        for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        and p.default is p.empty
    ]
    return len(required) >= 2


@dataclass(frozen=True)
class NumberInterpolator(Interpolator):
    a: float
    b: float

    @override
    def __call__(self, t):
        return self.a * (1 - t) + self.b * t


@dataclass(frozen=True)
class RoundInterpolator(Interpolator):
    a: float
    b: float

    @override
    def __call__(self, t):
        return math.floor(self.a * (1 - t) + self.b * t + 0.5)


@dataclass(frozen=True)
class RgbInterpolator(Interpolator):
    a: tuple[float, ...]
    b: tuple[float, ...]

    @override
    def __call__(self, t):
        a, b = np.array(self.a), np.array(self.b)
        return format_color(a + (b - a) * t)


@dataclass(frozen=True)
class OklabInterpolator(Interpolator):
    a: tuple[float, ...]
    b: tuple[float, ...]

    @override
    def __call__(self, t):
        a, b = np.array(self.a), np.array(self.b)
        lab = a[0:3] + (b[0:3] - a[0:3]) * t
        alpha = a[3] + (b[3] - a[3]) * t
        return format_color(np.append(np.clip(oklab_to_rgb(lab), 0.0, 1.0), alpha))


@dataclass(frozen=True)
class NumberFactory(InterpolatorFactory):
    @override
    def __call__(self, a, b):
        return NumberInterpolator(float(a), float(b))


@dataclass(frozen=True)
class RoundFactory(InterpolatorFactory):
    @override
    def __call__(self, a, b):
        return RoundInterpolator(float(a), float(b))


@dataclass(frozen=True)
class RgbFactory(InterpolatorFactory):
    @override
    def __call__(self, a, b):
        return RgbInterpolator(tuple(rgba(a)), tuple(rgba(b)))


@dataclass(frozen=True)
class OklabFactory(InterpolatorFactory):
    @override
    def __call__(self, a, b):
        ca, cb = rgba(a), rgba(b)
        la, lb = rgb_to_oklab(ca[0:3]), rgb_to_oklab(cb[0:3])
        return OklabInterpolator((*la, ca[3]), (*lb, cb[3]))


interpolate_number = NumberFactory()
interpolate_round = RoundFactory()
interpolate_rgb = RgbFactory()
interpolate_oklab = OklabFactory()

NAMED_INTERPOLATORS = {
    "number": interpolate_number,
    "round": interpolate_round,
    "rgb": interpolate_rgb,
    "oklab": interpolate_oklab,
}


def as_interpolator(value: Any) -> Any:
    """Parse the `interpolate` option: a name, a callable, or None."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return NAMED_INTERPOLATORS[value.lower()]
        except KeyError:
            raise InvalidScaleDefinition(f"unknown interpolator: {value}") from None
    if callable(value):
        return value
    raise InvalidScaleDefinition(f"invalid interpolator: {value!r}")


@dataclass(frozen=True)
class Piecewise(Interpolator):
    """
    Interpolate through `values` at evenly spaced stops, building each
    segment with `factory`.
    """

    factory: Callable[[Any, Any], Callable[[float], Any]]
    values: tuple

    @override
    def __call__(self, t):
        n = len(self.values) - 1
        if n < 1:
            return self.values[0] if self.values else None
        t = t * n
        i = max(0, min(n - 1, math.floor(t)))
        return self.factory(self.values[i], self.values[i + 1])(t - i)


@dataclass(frozen=True)
class Flipped(Interpolator):
    interpolate: Callable[[float], Any]

    @override
    def __call__(self, t):
        return self.interpolate(1 - t)


@dataclass(frozen=True)
class SubRange(Interpolator):
    """Evaluate `interpolate` over the sub-interval `[start, stop]` of [0, 1]."""

    interpolate: Callable[[float], Any]
    start: float
    stop: float

    @override
    def __call__(self, t):
        return self.interpolate(self.start + t * (self.stop - self.start))


@dataclass(frozen=True)
class SchemeFactory(InterpolatorFactory):
    """
    Adapts a `t` interpolator to a factory over numeric range stops, so a
    scheme can be spread across a polylinear range.
    """

    interpolate: Callable[[float], Any]

    @override
    def __call__(self, a, b):
        return SubRange(self.interpolate, float(a), float(b))


def as_factory(interpolate: Any) -> Callable[[Any, Any], Callable[[float], Any]]:
    if is_factory(interpolate):
        return interpolate
    return SchemeFactory(interpolate)


def quantize(interpolate: Callable[[float], Any], n: int) -> list:
    """Sample `n` evenly spaced values from `interpolate`, endpoints included."""
    if n <= 0:
        return []
    if n == 1:
        return [interpolate(0.0)]
    return [interpolate(i / (n - 1)) for i in range(n)]


@dataclass(frozen=True)
class BasisInterpolator(Interpolator):
    """Uniform B-spline through RGB control colors."""

    colors: tuple[str, ...]

    @override
    def __call__(self, t):
        values = np.array([rgba(c)[0:3] * 255.0 for c in self.colors])
        n = len(values) - 1
        t = min(max(t, 0.0), 1.0)
        i = n - 1 if t >= 1 else math.floor(t * n)
        v1, v2 = values[i], values[i + 1]
        v0 = values[i - 1] if i > 0 else 2 * v1 - v2
        v3 = values[i + 2] if i < n - 1 else 2 * v2 - v1
        t = (t - i / n) * n
        t2 = t * t
        t3 = t2 * t
        rgb = (
            (1 - 3 * t + 3 * t2 - t3) * v0
            + (4 - 6 * t2 + 3 * t3) * v1
            + (1 + 3 * t + 3 * t2 - 3 * t3) * v2
            + t3 * v3
        ) / 6
        return format_color(np.append(rgb / 255.0, 1.0))


@dataclass(frozen=True)
class TurboInterpolator(Interpolator):
    @override
    def __call__(self, t):
        t = max(0.0, min(1.0, t))
        r = 34.61 + t * (1172.33 - t * (10793.56 - t * (33300.12 - t * (38394.49 - t * 14825.05))))
        g = 23.31 + t * (557.33 + t * (1225.33 - t * (3574.96 - t * (1073.77 + t * 707.56))))
        b = 27.2 + t * (3211.1 - t * (15327.97 - t * (27814 - t * (22569.18 - t * 6838.66))))
        return format_color(np.array([r, g, b, 255.0]) / 255.0)


_A, _B, _C, _D, _E = -0.14861, 1.78277, -0.29227, -0.90649, 1.97294


def cubehelix(h: float, s: float, l: float) -> str:
    """Format a cubehelix color (hue in degrees) as CSS rgb."""
    h = math.radians(h + 120)
    a = s * l * (1 - l)
    cosh, sinh = math.cos(h), math.sin(h)
    r = l + a * (_A * cosh + _B * sinh)
    g = l + a * (_C * cosh + _D * sinh)
    b = l + a * (_E * cosh)
    return format_color(np.array([r, g, b, 1.0]))


@dataclass(frozen=True)
class CubehelixInterpolator(Interpolator):
    """Linear interpolation of hue, saturation and lightness in cubehelix."""

    start: tuple[float, float, float]
    stop: tuple[float, float, float]

    @override
    def __call__(self, t):
        return cubehelix(
            *(a + (b - a) * t for a, b in zip(self.start, self.stop))
        )


@dataclass(frozen=True)
class RainbowInterpolator(Interpolator):
    @override
    def __call__(self, t):
        if t < 0 or t > 1:
            t -= math.floor(t)
        ts = abs(t - 0.5)
        return cubehelix(360 * t - 100, 1.5 - 1.5 * ts, 0.8 - 0.9 * ts)
