from functools import singledispatch
from typing import Any, cast

import numpy as np
from basic_colormath import get_delta_e_matrix_lab, rgb_to_lab, rgbs_to_lab
from cmap import Color
from numpy.typing import NDArray

# CSS keywords that are valid paint values but not parseable colors.
_PAINT_KEYWORDS = frozenset({"none", "currentcolor", "transparent"})


@singledispatch
def rgba(value) -> NDArray[np.float64]:
    """Convert a color-like value to an RGBA vector with components in [0, 1]."""
    raise TypeError(f"Type {type(value)} can't be converted to a color.")


@rgba.register(str)
def _(value) -> NDArray[np.float64]:
    return rgba(Color(value))


@rgba.register(Color)
def _(value) -> NDArray[np.float64]:
    c = value.rgba
    return np.array([c.r, c.g, c.b, c.a], dtype=np.float64)


@rgba.register(np.ndarray)
def _(value) -> NDArray[np.float64]:
    value = np.asarray(value, dtype=np.float64)
    if value.shape == (3,):
        value = np.append(value, 1.0)
    return value


def is_color(value: Any) -> bool:
    """True for strings that name a literal color, such as "red" or "#ccc"."""
    if not isinstance(value, str):
        return False
    if value.strip().lower() in _PAINT_KEYWORDS:
        return True
    try:
        Color(value)
    except (ValueError, TypeError, KeyError):
        return False
    return True


def _channel(c: float) -> int:
    return int(np.floor(np.clip(c * 255.0, 0.0, 255.0) + 0.5))


def format_color(value: NDArray[np.float64]) -> str:
    """
    Format an RGBA vector as a CSS `rgb(r,g,b)` string, or `rgba(r,g,b,a)` when
    not opaque.
    """
    r, g, b = (_channel(c) for c in value[0:3])
    a = float(value[3]) if len(value) > 3 else 1.0
    if a >= 1.0:
        return f"rgb({r},{g},{b})"
    return f"rgba({r},{g},{b},{max(a, 0.0):g})"


def hex_color(value) -> str:
    return Color(rgba(value)).hex


def distinguishable_colors(
    k: int, background: str = "white", n: int = 5000
) -> list[str]:
    """
    Generate k distinguishable colors using a greedy algorithm.
    """
    if k <= 0:
        return []

    background_rgb = rgba(background)
    background_lab = np.asarray(
        rgb_to_lab(tuple(255 * background_rgb[0:3])), dtype=np.float32
    )

    nsteps_per_channel = int(np.ceil(np.pow(n, 1 / 3)))
    step_size = 255.0 / nsteps_per_channel
    steps = np.arange(0.0, 255.0, step_size, dtype=np.float32)

    candidates_rgb = np.reshape(np.stack(np.meshgrid(steps, steps, steps), -1), (-1, 3))
    candidates_lab = rgbs_to_lab(candidates_rgb).astype(np.float32)

    candidate_indexes = _max_min_dispersion(k, candidates_lab, background_lab)

    colors = candidates_rgb[candidate_indexes, :] / 255.0
    return [hex_color(colors[i, :]) for i in range(k)]


# Greedy approximation of the max-min dispersion problem. We want to choose k
# colors that maximize the minimum pairwise distance between any two colors.
def _max_min_dispersion(
    k: int, candidates: NDArray[np.float32], seed: NDArray[np.float32]
) -> NDArray[np.int32]:
    n = int(candidates.shape[0])
    chosen = np.zeros((k + 1, 3), dtype=np.float32)
    chosen[0, :] = seed
    indexes = np.zeros(k, np.int32)

    diffs = np.full((k, n), np.inf, dtype=np.float32)

    for i in range(1, k + 1):
        diffs[i - 1, :] = get_delta_e_matrix_lab(candidates, chosen[(i - 1) : i, :])[
            :, 0
        ]
        j = cast(int, diffs.min(axis=0).argmax())
        chosen[i] = candidates[j, :]
        indexes[i - 1] = j

    return indexes


# sRGB <-> OKLab, through linear light and LMS cone responses.
_LMS_FROM_RGB = np.array(
    [
        [0.4122214708, 0.5363325363, 0.0514459929],
        [0.2119034982, 0.6806995451, 0.1073969566],
        [0.0883024619, 0.2817188376, 0.6299787005],
    ]
)

_OKLAB_FROM_LMS = np.array(
    [
        [0.2104542553, 0.7936177850, -0.0040720468],
        [1.9779984951, -2.4285922050, 0.4505937099],
        [0.0259040371, 0.7827717662, -0.8086757660],
    ]
)

_LMS_FROM_OKLAB = np.linalg.inv(_OKLAB_FROM_LMS)
_RGB_FROM_LMS = np.linalg.inv(_LMS_FROM_RGB)


def linearize_srgb(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    rgb = np.asarray(rgb, dtype=np.float64)
    return np.where(rgb > 0.04045, np.pow((rgb + 0.055) / 1.055, 2.4), rgb / 12.92)


def linearize_srgb_inv(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    rgb = np.asarray(rgb, dtype=np.float64)
    return np.where(
        rgb > 0.0031308,
        1.055 * np.pow(np.maximum(rgb, 0.0031308), 1 / 2.4) - 0.055,
        rgb * 12.92,
    )


def rgb_to_oklab(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    lms = linearize_srgb(rgb) @ _LMS_FROM_RGB.transpose()
    return np.cbrt(lms) @ _OKLAB_FROM_LMS.transpose()


def oklab_to_rgb(oklab: NDArray[np.float64]) -> NDArray[np.float64]:
    lms = np.power(np.asarray(oklab) @ _LMS_FROM_OKLAB.transpose(), 3)
    return linearize_srgb_inv(lms @ _RGB_FROM_LMS.transpose())
