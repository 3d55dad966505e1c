from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping, Optional
import math

from .errors import InvalidScaleDefinition
from .intervals import Interval, as_interval
from .interpolate import as_interpolator


class _Implicit:
    """Sentinel `unknown` value asking ordinal scales to grow their domain."""

    _instance: Optional["_Implicit"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "IMPLICIT"


IMPLICIT = _Implicit()

_ALIASES = {
    "paddingInner": "padding_inner",
    "paddingOuter": "padding_outer",
}

DIVERGING_TYPES = frozenset(
    {"diverging", "diverging-pow", "diverging-sqrt", "diverging-log", "diverging-symlog"}
)

# Types whose descriptors are self-contained once domain and range are known.
_FINAL_TYPES = frozenset(
    {
        "linear",
        "pow",
        "log",
        "symlog",
        "utc",
        "time",
        "ordinal",
        "point",
        "band",
        "threshold",
    }
)


def _number(key: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidScaleDefinition(f"invalid {key} option: {value!r}") from None
    if math.isnan(number):
        raise InvalidScaleDefinition(f"invalid {key} option: {value!r}")
    return number


def _flag(value: Any) -> Optional[bool]:
    return None if value is None else bool(value)


def _sequence(key: str, value: Any) -> Optional[tuple]:
    if value is None:
        return None
    try:
        return tuple(value)
    except TypeError:
        raise InvalidScaleDefinition(f"invalid {key} option: {value!r}") from None


def _nice(value: Any) -> bool | int | None:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        return int(_number("nice", value))  # type: ignore[arg-type]
    if isinstance(value, (int, float)):
        return int(value)
    raise InvalidScaleDefinition(f"invalid nice option: {value!r}")


def prepare_value(
    value: Any,
    transform: Optional[Callable[[Any], Any]] = None,
    percent: bool = False,
    interval: Optional[Interval] = None,
) -> Any:
    """Run a raw channel value through transform, percent and interval floor."""
    if value is None:
        return None
    if transform is not None:
        value = transform(value)
    if percent and value is not None:
        value = value * 100
    if interval is not None and value is not None:
        value = interval.floor(value)
    return value


@dataclass(frozen=True, kw_only=True)
class ScaleOptions:
    type: Optional[str] = None
    domain: Optional[tuple] = None
    range: Optional[tuple] = None
    scheme: Optional[str] = None
    interpolate: Any = None
    transform: Optional[Callable[[Any], Any]] = None
    reverse: bool = False
    zero: Optional[bool] = None
    nice: bool | int | None = None
    interval: Optional[Interval] = None
    clamp: Optional[bool] = None
    unknown: Any = None
    round: Optional[bool] = None
    align: Optional[float] = None
    padding: Optional[float] = None
    padding_inner: Optional[float] = None
    padding_outer: Optional[float] = None
    inset: Optional[float] = None
    pivot: Optional[float] = None
    symmetric: Optional[bool] = None
    exponent: Optional[float] = None
    base: Optional[float] = None
    constant: Optional[float] = None
    n: Optional[int] = None
    percent: bool = False

    @staticmethod
    def parse(
        value: Any, defaults: Optional[Mapping[str, Any]] = None
    ) -> "ScaleOptions":
        """
        Build options from a mapping (camelCase or snake_case keys) or from a
        previously produced scale descriptor. Unrecognized keys are ignored and
        numeric strings are coerced. `defaults` supply values for keys that are
        absent.
        """
        if value is None:
            value = {}
        elif not isinstance(value, Mapping):
            if callable(getattr(value, "options", None)):
                value = value.options()
            else:
                raise InvalidScaleDefinition(f"invalid scale definition: {value!r}")

        raw: dict[str, Any] = {}
        for source in (defaults or {}, value):
            for key, v in source.items():
                raw[_ALIASES.get(key, key)] = v

        known = {f.name for f in fields(ScaleOptions)}
        raw = {k: v for k, v in raw.items() if k in known and v is not None}

        type = raw.get("type")
        if type is not None:
            if not isinstance(type, str):
                raise InvalidScaleDefinition(f"invalid scale type: {type!r}")
            type = type.lower()

        n = _number("n", raw.get("n"))
        transform = raw.get("transform")
        if transform is not None and not callable(transform):
            raise InvalidScaleDefinition(f"invalid transform: {transform!r}")

        return ScaleOptions(
            type=type,
            domain=_sequence("domain", raw.get("domain")),
            range=_sequence("range", raw.get("range")),
            scheme=raw.get("scheme"),
            interpolate=as_interpolator(raw.get("interpolate")),
            transform=transform,
            reverse=bool(raw.get("reverse", False)),
            zero=_flag(raw.get("zero")),
            nice=_nice(raw.get("nice")),
            interval=as_interval(raw.get("interval")),
            clamp=_flag(raw.get("clamp")),
            unknown=raw.get("unknown"),
            round=_flag(raw.get("round")),
            align=_number("align", raw.get("align")),
            padding=_number("padding", raw.get("padding")),
            padding_inner=_number("paddingInner", raw.get("padding_inner")),
            padding_outer=_number("paddingOuter", raw.get("padding_outer")),
            inset=_number("inset", raw.get("inset")),
            pivot=_number("pivot", raw.get("pivot")),
            symmetric=_flag(raw.get("symmetric")),
            exponent=_number("exponent", raw.get("exponent")),
            base=_number("base", raw.get("base")),
            constant=_number("constant", raw.get("constant")),
            n=None if n is None else int(n),
            percent=bool(raw.get("percent", False)),
        )

    @property
    def declared(self) -> bool:
        """True if the options alone are enough to build a scale."""
        return (
            self.type is not None or self.domain is not None or self.range is not None
        )

    @property
    def finalized(self) -> bool:
        """
        True for options shaped like a complete descriptor: a concrete type,
        domain and range (or, for diverging scales, an interpolator with
        symmetry already applied) and no options that would rewrite them.
        """
        if self.type is None or self.domain is None:
            return False
        if self.zero or self.nice or self.reverse:
            return False
        if self.type in DIVERGING_TYPES:
            return (
                self.type != "diverging-sqrt"
                and self.interpolate is not None
                and self.symmetric is False
                and self.range is None
                and len(self.domain) == 2
            )
        if self.type not in _FINAL_TYPES or self.range is None:
            return False
        match self.type:
            case "threshold":
                return len(self.range) == len(self.domain) + 1
            case "ordinal" | "point" | "band":
                return True
            case _:
                return self.interpolate is not None and len(self.range) == len(
                    self.domain
                )

    def prepare(self, value: Any) -> Any:
        return prepare_value(value, self.transform, self.percent, self.interval)
