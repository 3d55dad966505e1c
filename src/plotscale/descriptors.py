"""
Scale descriptors: immutable records of a resolved scale. Each holds only
plain data plus interpolator and interval value objects, so descriptors compare
equal when built from equal options. The `apply` and `invert` functions are
derived from that data on first use.
"""

from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass, fields
from functools import cached_property
from typing import Any, Callable, NamedTuple, Optional, override
import math

from .inference import is_defined, is_number, ordinal_key
from .interpolate import NumberInterpolator, as_factory
from .intervals import Interval, milliseconds_like, to_milliseconds
from .options import prepare_value
from .ticks import js_round
from .transforms import Transform, scale_transform

# Fields computed from the others; not accepted back as options.
_DERIVED = frozenset({"bandwidth", "step"})


@dataclass(frozen=True, kw_only=True)
class ScaleDescriptor(ABC):
    type: str

    @abstractmethod
    def apply(self, value: Any) -> Any:
        pass

    def options(self) -> dict[str, Any]:
        """Options that rebuild this exact descriptor when passed back in."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _DERIVED and getattr(self, f.name) is not None
        }

    def prepare(self, value: Any) -> Any:
        """Apply the scale's transform, percent and interval to a raw value."""
        return prepare_value(
            value,
            getattr(self, "transform", None),
            getattr(self, "percent", False),
            getattr(self, "interval", None),
        )


@dataclass(frozen=True, kw_only=True)
class IdentityScale(ScaleDescriptor):
    type: str = "identity"

    @override
    def apply(self, value):
        return value

    def invert(self, value):
        return value


def _normalize(a: float, b: float, x: float) -> float:
    return 0.5 if b == a else (x - a) / (b - a)


def _segment(stops: list[float], x: float) -> int:
    return bisect_right(stops, x, 1, len(stops) - 1) - 1


@dataclass(frozen=True, kw_only=True)
class ContinuousScale(ScaleDescriptor):
    domain: tuple
    range: tuple
    interpolate: Callable
    clamp: bool = False
    unknown: Any = None
    transform: Optional[Callable[[Any], Any]] = None
    percent: bool = False
    interval: Optional[Interval] = None
    exponent: Optional[float] = None
    base: Optional[float] = None
    constant: Optional[float] = None

    @cached_property
    def _transform(self) -> Transform:
        return scale_transform(
            self.type, self.exponent, self.constant, self._raw(self.domain[0]) < 0
        )

    @property
    def temporal(self) -> bool:
        return self.type in ("utc", "time")

    def _raw(self, value: Any) -> float:
        if self.temporal and not is_number(value):
            return to_milliseconds(value, utc=self.type == "utc")
        return float(value)

    def _linear(self, value: Any) -> float:
        return self._transform.apply(self._raw(value))

    @cached_property
    def _pieces(self) -> tuple[list[float], list[Callable[[float], Any]]]:
        stops = [self._linear(d) for d in self.domain]
        outputs = list(self.range)
        j = min(len(stops), len(outputs))
        stops, outputs = stops[:j], outputs[:j]
        if stops[-1] < stops[0]:
            stops, outputs = stops[::-1], outputs[::-1]
        factory = as_factory(self.interpolate)
        return stops, [factory(outputs[i], outputs[i + 1]) for i in range(j - 1)]

    @override
    def apply(self, value):
        if not is_defined(value):
            return self.unknown
        try:
            x = self._linear(value)
        except (TypeError, ValueError, OverflowError):
            return self.unknown
        if math.isnan(x):
            return self.unknown
        stops, pieces = self._pieces
        if self.clamp:
            x = min(max(x, stops[0]), stops[-1])
        i = _segment(stops, x)
        return pieces[i](_normalize(stops[i], stops[i + 1], x))

    def invert(self, value):
        if not all(is_number(r) for r in self.range):
            raise TypeError(f"cannot invert a {self.type} scale with a non-numeric range")
        outputs = [float(r) for r in self.range]
        stops = [self._linear(d) for d in self.domain]
        j = min(len(stops), len(outputs))
        outputs, stops = outputs[:j], stops[:j]
        if outputs[-1] < outputs[0]:
            outputs, stops = outputs[::-1], stops[::-1]
        y = float(value)
        i = _segment(outputs, y)
        x = NumberInterpolator(stops[i], stops[i + 1])(
            _normalize(outputs[i], outputs[i + 1], y)
        )
        if self.clamp:
            x = min(max(x, min(stops)), max(stops))
        x = self._transform.invert(x)
        if self.temporal:
            return milliseconds_like(x, self.domain[0], utc=self.type == "utc")
        return x


@dataclass(frozen=True, kw_only=True)
class DivergingScale(ScaleDescriptor):
    domain: tuple
    pivot: float
    interpolate: Callable[[float], Any]
    symmetric: bool = False
    clamp: bool = False
    unknown: Any = None
    transform: Optional[Callable[[Any], Any]] = None
    exponent: Optional[float] = None
    base: Optional[float] = None
    constant: Optional[float] = None

    @cached_property
    def _transform(self) -> Transform:
        return scale_transform(
            self.type, self.exponent, self.constant, self.domain[0] < 0
        )

    @cached_property
    def _stops(self) -> tuple[float, float, float, float]:
        t = self._transform.apply
        t0, t1, t2 = t(self.domain[0]), t(self.pivot), t(self.domain[1])
        k10 = 0.0 if t0 == t1 else 0.5 / (t1 - t0)
        k21 = 0.0 if t1 == t2 else 0.5 / (t2 - t1)
        return t0, t1, k10, k21

    @override
    def apply(self, value):
        if not is_defined(value):
            return self.unknown
        try:
            x = self._transform.apply(float(value))
        except (TypeError, ValueError, OverflowError):
            return self.unknown
        if math.isnan(x):
            return self.unknown
        _, t1, k10, k21 = self._stops
        t = 0.5 + (x - t1) * (k10 if x < t1 else k21)
        if self.clamp:
            t = min(max(t, 0.0), 1.0)
        return self.interpolate(t)


@dataclass(frozen=True, kw_only=True)
class OrdinalScale(ScaleDescriptor):
    type: str = "ordinal"
    domain: tuple
    range: tuple
    unknown: Any = None
    transform: Optional[Callable[[Any], Any]] = None
    interval: Optional[Interval] = None

    @cached_property
    def _index(self) -> dict[Any, int]:
        return {ordinal_key(value): i for i, value in enumerate(self.domain)}

    @override
    def apply(self, value):
        try:
            i = self._index.get(ordinal_key(value))
        except TypeError:
            return self.unknown
        if i is None or not self.range:
            return self.unknown
        return self.range[i % len(self.range)]


class BandLayout(NamedTuple):
    positions: list[float]
    step: float
    bandwidth: float


def band_layout(
    n: int,
    bounds: tuple,
    padding_inner: float,
    padding_outer: float,
    align: float,
    round: bool,
) -> BandLayout:
    """
    Divide `bounds` into `n` bands. Rounding floors the step and rounds the
    start and bandwidth half-up, so band edges land on whole pixels.
    """
    r0, r1 = bounds[0], bounds[-1]
    reverse = r1 < r0
    start, stop = (r1, r0) if reverse else (r0, r1)
    step = (stop - start) / max(1, n - padding_inner + padding_outer * 2)
    if round:
        step = math.floor(step)
    start += (stop - start - step * (n - padding_inner)) * align
    bandwidth = step * (1 - padding_inner)
    if round:
        start = js_round(start)
        bandwidth = js_round(bandwidth)
    positions = [start + step * i for i in range(n)]
    if reverse:
        positions.reverse()
    return BandLayout(positions, step, bandwidth)


@dataclass(frozen=True, kw_only=True)
class _Positional(ScaleDescriptor):
    domain: tuple
    range: tuple
    align: float = 0.5
    round: bool = True
    bandwidth: float = 0.0
    step: float = 0.0
    transform: Optional[Callable[[Any], Any]] = None
    interval: Optional[Interval] = None

    @cached_property
    def _positions(self) -> dict[Any, float]:
        layout = self.layout()
        return dict(zip(map(ordinal_key, self.domain), layout.positions))

    @abstractmethod
    def layout(self) -> BandLayout:
        pass

    @override
    def apply(self, value):
        try:
            return self._positions.get(ordinal_key(value))
        except TypeError:
            return None


@dataclass(frozen=True, kw_only=True)
class PointScale(_Positional):
    type: str = "point"
    padding: float = 0.5

    @override
    def layout(self):
        return band_layout(
            len(self.domain), self.range, 1.0, self.padding, self.align, self.round
        )


@dataclass(frozen=True, kw_only=True)
class BandScale(_Positional):
    type: str = "band"
    padding_inner: float = 0.1
    padding_outer: float = 0.1

    @override
    def layout(self):
        return band_layout(
            len(self.domain),
            self.range,
            self.padding_inner,
            self.padding_outer,
            self.align,
            self.round,
        )


@dataclass(frozen=True, kw_only=True)
class ThresholdScale(ScaleDescriptor):
    type: str = "threshold"
    domain: tuple
    range: tuple
    unknown: Any = None
    transform: Optional[Callable[[Any], Any]] = None

    @override
    def apply(self, value):
        if not is_defined(value):
            return self.unknown
        try:
            i = bisect_right(self.domain, value)
        except TypeError:
            return self.unknown
        if i >= len(self.range):
            return self.unknown
        return self.range[i]
