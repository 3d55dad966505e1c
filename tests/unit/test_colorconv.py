import pytest
import numpy as np

from plotscale.colors import (
    distinguishable_colors,
    format_color,
    hex_color,
    is_color,
    oklab_to_rgb,
    rgb_to_oklab,
    rgba,
)


def test_rgb_to_oklab():
    # Taken from: https://bottosson.github.io/posts/oklab/
    #
    rgb_vals = np.array(
        [
            [1.0, 1.0, 1.0],
            [1.0, 0.0, 0.0],
            [0.0, 0.0, 0.0],
        ]
    )

    lab_vals = np.array(
        [
            [1.000, 0.000, 0.000],
            [0.628, 0.225, 0.126],
            [0.000, 0.000, 0.000],
        ]
    )

    assert rgb_to_oklab(rgb_vals) == pytest.approx(lab_vals, abs=0.01)


def test_roundtrip_oklab():
    rgb = np.random.rand(1000, 3)
    rgb2 = oklab_to_rgb(rgb_to_oklab(rgb))
    assert rgb2 == pytest.approx(rgb, abs=0.01)


def test_rgba():
    assert rgba("red") == pytest.approx([1.0, 0.0, 0.0, 1.0])
    assert rgba(np.array([0.0, 0.5, 1.0])) == pytest.approx([0.0, 0.5, 1.0, 1.0])
    with pytest.raises(TypeError):
        rgba(42)


def test_format_color():
    assert format_color(np.array([1.0, 0.5, 0.0, 1.0])) == "rgb(255,128,0)"
    assert format_color(np.array([1.0, 0.0, 0.0, 0.5])) == "rgba(255,0,0,0.5)"
    assert hex_color("red").lower() == "#ff0000"


def test_is_color():
    assert is_color("red")
    assert is_color("#ccc")
    assert is_color("none")
    assert is_color("currentColor")
    assert not is_color("apples")
    assert not is_color(3)


def test_distinguishable_colors():
    colors = distinguishable_colors(5)
    assert len(colors) == 5
    assert len(set(colors)) == 5
    assert "#ffffff" not in [c.lower() for c in colors]
