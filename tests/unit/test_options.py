import pytest

from plotscale.errors import InvalidScaleDefinition
from plotscale.interpolate import interpolate_rgb
from plotscale.intervals import NumberInterval, TimeInterval
from plotscale.options import IMPLICIT, ScaleOptions, prepare_value


class TestParse:
    def test_empty(self):
        assert ScaleOptions.parse(None) == ScaleOptions()
        assert not ScaleOptions.parse({}).declared

    def test_camel_case_aliases(self):
        options = ScaleOptions.parse({"paddingInner": 0.2, "padding_outer": 0.3})
        assert options.padding_inner == 0.2
        assert options.padding_outer == 0.3

    def test_numeric_strings(self):
        options = ScaleOptions.parse({"padding": "0.7", "n": "4", "nice": "5"})
        assert options.padding == 0.7
        assert options.n == 4
        assert options.nice == 5

    def test_invalid_number(self):
        with pytest.raises(InvalidScaleDefinition):
            ScaleOptions.parse({"align": "middle"})

    def test_unknown_keys_ignored(self):
        assert ScaleOptions.parse({"label": "Height", "tickFormat": "d"}) == ScaleOptions()

    def test_type_is_lowercased(self):
        assert ScaleOptions.parse({"type": "Linear"}).type == "linear"
        with pytest.raises(InvalidScaleDefinition):
            ScaleOptions.parse({"type": 3})

    def test_interval_and_interpolate(self):
        options = ScaleOptions.parse({"interval": "month", "interpolate": "rgb"})
        assert options.interval == TimeInterval("month")
        assert options.interpolate is interpolate_rgb

    def test_defaults_fill_missing_keys(self):
        options = ScaleOptions.parse({"nice": False}, {"nice": True, "zero": True})
        assert options.nice is False
        assert options.zero is True

    def test_invalid_transform(self):
        with pytest.raises(InvalidScaleDefinition):
            ScaleOptions.parse({"transform": "log"})

    def test_not_a_mapping(self):
        with pytest.raises(InvalidScaleDefinition):
            ScaleOptions.parse(42)

    def test_implicit_unknown_is_kept(self):
        assert ScaleOptions.parse({"unknown": IMPLICIT}).unknown is IMPLICIT


class TestFinalized:
    def test_complete_linear(self):
        options = ScaleOptions(
            type="linear", domain=(0, 1), range=(0, 100), interpolate=interpolate_rgb
        )
        assert options.finalized

    def test_rewriting_options(self):
        options = ScaleOptions(
            type="linear",
            domain=(0, 1),
            range=(0, 100),
            interpolate=interpolate_rgb,
            nice=True,
        )
        assert not options.finalized

    def test_missing_range(self):
        assert not ScaleOptions(type="ordinal", domain=("a",)).finalized
        assert ScaleOptions(type="ordinal", domain=("a",), range=("red",)).finalized

    def test_threshold_shape(self):
        assert ScaleOptions(type="threshold", domain=(0,), range=("a", "b")).finalized
        assert not ScaleOptions(type="threshold", domain=(0,), range=("a",)).finalized

    def test_diverging(self):
        options = ScaleOptions(
            type="diverging", domain=(-1, 1), interpolate=lambda t: t, symmetric=False
        )
        assert options.finalized
        assert not ScaleOptions(type="diverging", domain=(-1, 1), interpolate=lambda t: t).finalized

    def test_quantile_is_never_final(self):
        assert not ScaleOptions(type="quantile", domain=(1, 2), range=("a", "b")).finalized


def test_prepare_value():
    assert prepare_value(None, transform=abs) is None
    assert prepare_value(-3, transform=abs) == 3
    assert prepare_value(0.25, percent=True) == 25
    assert prepare_value(12, interval=NumberInterval(5)) == 10
    assert prepare_value(-0.12, abs, True, NumberInterval(5)) == 10
