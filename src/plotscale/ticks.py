"""
Tick generation and domain niceness, following d3-array's `ticks` and
d3-scale's `nice`. Rounding follows JavaScript's `Math.round` (half up) so that
nice endpoints match what a browser would compute.
"""

import math
from typing import Callable, Sequence

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def js_round(x: float) -> int:
    return math.floor(x + 0.5)


def tick_spec(start: float, stop: float, count: float) -> tuple[int, int, float]:
    """
    Returns `(i1, i2, inc)` such that the ticks are `i * inc` for i in
    `[i1, i2]` when `inc > 0`, or `i / -inc` when `inc < 0`.
    """
    if not count > 0:
        return 0, -1, 0.0
    step = (stop - start) / count
    if not (math.isfinite(step) and step > 0):
        return 0, -1, 0.0
    power = math.floor(math.log10(step))
    error = step / 10.0**power
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power < 0:
        inc = 10.0 ** -power / factor
        i1 = js_round(start * inc)
        i2 = js_round(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10.0**power * factor
        i1 = js_round(start / inc)
        i2 = js_round(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return tick_spec(start, stop, count * 2)
    return i1, i2, inc


def ticks(start: float, stop: float, count: float) -> list[float]:
    if not count > 0:
        return []
    if start == stop:
        return [start]
    reverse = stop < start
    i1, i2, inc = tick_spec(stop, start, count) if reverse else tick_spec(start, stop, count)
    if not i2 >= i1:
        return []
    n = i2 - i1 + 1
    if reverse:
        if inc < 0:
            return [(i2 - i) / -inc for i in range(n)]
        return [(i2 - i) * inc for i in range(n)]
    if inc < 0:
        return [(i1 + i) / -inc for i in range(n)]
    return [(i1 + i) * inc for i in range(n)]


def tick_increment(start: float, stop: float, count: float) -> float:
    return tick_spec(start, stop, count)[2]


def tick_step(start: float, stop: float, count: float) -> float:
    reverse = stop < start
    if reverse:
        start, stop = stop, start
    inc = tick_increment(start, stop, count)
    step = (-1 / inc if inc < 0 else inc) if inc != 0 else 0.0
    return -step if reverse else step


def nice_linear(domain: Sequence[float], count: int = 10) -> list[float]:
    """
    Extend the first and last elements of `domain` to round values. Interior
    elements of a polylinear domain are left untouched.
    """
    domain = list(domain)
    if len(domain) < 2:
        return domain
    i0, i1 = 0, len(domain) - 1
    start, stop = domain[i0], domain[i1]
    if stop < start:
        start, stop = stop, start
        i0, i1 = i1, i0

    prestep = None
    for _ in range(10):
        step = tick_increment(start, stop, count)
        if step == prestep:
            domain[i0] = start
            domain[i1] = stop
            return domain
        elif step > 0:
            start = math.floor(start / step) * step
            stop = math.ceil(stop / step) * step
        elif step < 0:
            start = math.ceil(start * step) / step
            stop = math.floor(stop * step) / step
        else:
            break
        prestep = step
    return domain


def nice_with(
    domain: Sequence, floor: Callable, ceil: Callable
) -> list:
    """Round the outer endpoints of `domain` outward with the given functions."""
    domain = list(domain)
    if len(domain) < 2:
        return domain
    i0, i1 = 0, len(domain) - 1
    x0, x1 = domain[i0], domain[i1]
    if x1 < x0:
        i0, i1 = i1, i0
        x0, x1 = x1, x0
    domain[i0] = floor(x0)
    domain[i1] = ceil(x1)
    return domain


def nice_log(domain: Sequence[float], base: float = 10) -> list[float]:
    """Extend the endpoints of a log domain to powers of `base`."""
    negative = min(domain[0], domain[-1]) < 0

    def logs(x: float) -> float:
        return -math.log(-x, base) if negative else math.log(x, base)

    def pows(x: float) -> float:
        return -(base ** -x) if negative else base**x

    def floor(x: float) -> float:
        return pows(math.floor(_snap(logs(x))))

    def ceil(x: float) -> float:
        return pows(math.ceil(_snap(logs(x))))

    return nice_with(domain, floor, ceil)


def _snap(x: float) -> float:
    # math.log(1000, 10) is 2.9999999999999996
    r = round(x)
    return float(r) if abs(x - r) < 1e-12 else x
