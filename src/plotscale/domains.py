from typing import Any, Optional, Sequence
import math
import warnings

import numpy as np

from .config import Config
from .errors import (
    ImplicitDomainOverflowError,
    InvalidScaleDefinition,
    NonMonotonicDomainError,
    ScaleWarning,
)
from .inference import Inference, is_defined, is_number, ordinal_key
from .intervals import is_temporal, nice_time
from .options import ScaleOptions
from .registry import ScaleEntry, ScaleKind
from .ticks import nice_linear, nice_log, ticks
from .transforms import Transform


def extent(values: Sequence[Any]) -> Optional[tuple[Any, Any]]:
    defined = [v for v in values if is_defined(v)]
    if not defined:
        return None
    return min(defined), max(defined)


def _scalar(value: Any) -> Any:
    # Collapse numpy scalars so descriptors hold plain Python values.
    return value.item() if isinstance(value, np.generic) else value


def extend_zero(domain: Sequence[Any]) -> list[Any]:
    """
    Move the endpoint nearer to zero onto zero, keeping the domain's direction
    and any interior stops.
    """
    domain = list(domain)
    first, last = domain[0], domain[-1]
    if first <= last:
        if first > 0:
            domain[0] = 0
        elif last < 0:
            domain[-1] = 0
    else:
        if last > 0:
            domain[-1] = 0
        elif first < 0:
            domain[0] = 0
    return domain


def _nice_count(nice: bool | int | None) -> Optional[int]:
    if nice is None or nice is False:
        return None
    if nice is True:
        return 10
    return int(nice)


def _log_values(values: Sequence[Any]) -> list[Any]:
    # Zero has no logarithm; a log domain is positive unless all values are negative.
    numbers = [v for v in values if is_number(v) and math.isfinite(v)]
    positive = [v for v in numbers if v > 0]
    return positive or [v for v in numbers if v < 0]


def continuous_domain(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    values: Sequence[Any],
) -> list[Any]:
    if options.domain is not None:
        domain = [_scalar(v) for v in options.domain]
        if len(domain) < 2:
            raise InvalidScaleDefinition(
                f"invalid domain for {entry.name} scale: {options.domain!r}"
            )
    else:
        if inference.type == "log":
            values = _log_values(values)
        bounds = extent(values)
        if bounds is None:
            domain = [1, 10] if inference.type == "log" else [0, 1]
        else:
            domain = [_scalar(b) for b in bounds]

    temporal = inference.type in ("utc", "time") or is_temporal(domain[0])

    zero = options.zero
    if zero is None:
        zero = options.domain is None and entry.kind in (
            ScaleKind.Radius,
            ScaleKind.Opacity,
            ScaleKind.Length,
        )
    if zero and not temporal and inference.type != "log":
        domain = extend_zero(domain)

    count = _nice_count(options.nice)
    if count is not None:
        if temporal:
            domain = nice_time(domain, count, utc=inference.type != "time")
        elif inference.type == "log":
            if not domain[0] * domain[-1] > 0:
                raise InvalidScaleDefinition(
                    f"invalid domain for {entry.name} log scale: {domain!r}"
                )
            domain = nice_log(domain, options.base or 10)
        else:
            domain = nice_linear(domain, count)
    return domain


def diverging_domain(
    entry: ScaleEntry,
    options: ScaleOptions,
    values: Sequence[Any],
    transform: Transform,
    pivot: float,
) -> tuple[list[float], bool]:
    """
    Returns the ascending `[lo, hi]` domain and whether the input was
    descending, in which case the interpolator must be flipped.
    """
    if options.domain is not None:
        domain = [_scalar(v) for v in options.domain]
        if len(domain) > 2:
            warnings.warn(
                f"Warning: the diverging {entry.name} scale domain contains extra elements.",
                ScaleWarning,
                stacklevel=2,
            )
            domain = domain[:2]
        if len(domain) < 2:
            raise InvalidScaleDefinition(
                f"invalid domain for {entry.name} scale: {options.domain!r}"
            )
        lo, hi = domain
    else:
        bounds = extent(values)
        lo, hi = (0, 1) if bounds is None else (_scalar(b) for b in bounds)

    descending = lo > hi
    if descending:
        lo, hi = hi, lo

    lo, hi = min(lo, pivot), max(hi, pivot)

    if options.symmetric is not False:
        mid = transform.apply(pivot)
        below = mid - transform.apply(lo)
        above = transform.apply(hi) - mid
        if below < above:
            lo = transform.invert(mid - above)
        elif below > above:
            hi = transform.invert(mid + below)

    count = _nice_count(options.nice)
    if count is not None:
        lo, hi = nice_linear([lo, hi], count)
    return [lo, hi], descending


def _unique(entry: ScaleEntry, values: Sequence[Any]) -> list[Any]:
    unique = {}
    for v in values:
        if not is_defined(v):
            continue
        v = _scalar(v)
        try:
            unique.setdefault(ordinal_key(v), v)
        except TypeError:
            raise InvalidScaleDefinition(
                f"invalid ordinal value for {entry.name} scale: {v!r}"
            ) from None
    return list(unique.values())


def ordinal_domain(
    entry: ScaleEntry,
    options: ScaleOptions,
    values: Sequence[Any],
    config: Config,
) -> list[Any]:
    if options.domain is not None:
        domain = _unique(entry, options.domain)
    else:
        if options.interval is not None:
            bounds = extent(values)
            if bounds is None:
                domain = []
            else:
                lo, hi = bounds
                domain = options.interval.range(lo, options.interval.offset(hi))
        else:
            domain = _unique(entry, values)
        limit = config.ordinal_domain_limit
        if entry.is_position and len(domain) > limit:
            raise ImplicitDomainOverflowError(
                f"implicit ordinal domain of {entry.name} scale has more than {limit} values"
            )
    if options.reverse:
        domain.reverse()
    return domain


def ascending(domain: Sequence[Any], name: str) -> tuple[list[Any], bool]:
    """
    Check that a threshold domain is strictly monotonic. Returns it in
    ascending order, and whether it had to be reversed.
    """
    domain = list(domain)
    pairs = list(zip(domain, domain[1:]))
    if all(a < b for a, b in pairs):
        return domain, False
    if all(a > b for a, b in pairs):
        return domain[::-1], True
    raise NonMonotonicDomainError(f"the {name} scale has a non-monotonic domain")


def threshold_domain(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    values: Sequence[Any],
    config: Config,
) -> tuple[list[Any], bool]:
    """
    Breakpoints for threshold, quantile and quantize scales. Returns the
    ascending breakpoints and whether the bucket order is reversed.
    """
    match inference.type:
        case "quantile":
            n = _bucket_count(options, config.quantile_n)
            source = options.domain if options.domain is not None else values
            samples = [float(v) for v in source if is_defined(v) and is_number(v)]
            if not samples:
                return [], False
            cuts = np.quantile(np.asarray(samples), [i / n for i in range(1, n)])
            return ascending([float(c) for c in cuts], entry.name)
        case "quantize":
            n = _bucket_count(options, config.quantize_n)
            source = options.domain if options.domain is not None else values
            bounds = extent(source)
            if bounds is None:
                return [], False
            lo, hi = bounds
            if options.range is not None:
                cuts = [lo + (hi - lo) * i / n for i in range(1, n)]
            else:
                cuts = [t for t in ticks(lo, hi, n) if lo < t < hi]
            descending = (
                options.domain is not None
                and len(options.domain) > 1
                and options.domain[0] > options.domain[-1]
            )
            return cuts, descending
        case _:
            domain = options.domain if options.domain is not None else (0,)
            return ascending([_scalar(v) for v in domain], entry.name)


def _bucket_count(options: ScaleOptions, default: int) -> int:
    if options.range is not None:
        return len(options.range)
    n = options.n if options.n is not None else default
    if n < 1:
        raise InvalidScaleDefinition(f"invalid n option: {n}")
    return n
