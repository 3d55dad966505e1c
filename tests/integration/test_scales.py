from datetime import date, datetime, timedelta, timezone
import math

import pytest

import plotscale as ps
from plotscale import Channel, plot, scale
from plotscale.schemes import get_scheme


class TestPosition:
    def test_linear_x(self):
        scales = plot([Channel("x", [1, 2, 3])])
        x = scales.scale("x")
        assert x.type == "linear"
        assert x.domain == (1, 3)
        assert x.range == (20, 620)
        assert scales.accessor("x")(2) == 320
        assert x.invert(320) == pytest.approx(2)

    def test_scaled_channel(self):
        scales = plot([Channel("x", [1, 2, 3])])
        assert scales.scaled(Channel("x", [1, 2, 3])) == [20, 320, 620]

    def test_band(self):
        x = plot([Channel("x", ["a", "b", "c"], hint="band")]).scale("x")
        assert isinstance(x, ps.BandScale)
        assert x.step == 193
        assert x.bandwidth == 174
        assert x.apply("b") == 233

    def test_point(self):
        y = plot([Channel("y", ["a", "b"])]).scale("y")
        assert y.type == "point"
        assert y.range == (20, 380)
        assert y.step == 180
        assert y.bandwidth == 0
        assert [y.apply("a"), y.apply("b")] == [110, 290]

    def test_band_padding(self):
        x = plot(
            [Channel("x", ["a", "b"])], {"x": {"type": "band", "padding": 0}}
        ).scale("x")
        assert x.step == 300
        assert x.bandwidth == 300

    def test_facet(self):
        fx = plot([Channel("fx", ["a", "b"])]).scale("fx")
        assert fx.type == "band"
        assert fx.padding_outer == 0
        assert fx.step == 315
        assert fx.bandwidth == 284

    def test_global_nice(self):
        y = plot([Channel("y", [2700, 6300])], {"nice": True}).scale("y")
        assert y.domain == (2500, 6500)
        assert y.range == (380, 20)

    def test_scale_nice_count(self):
        y = plot([Channel("y", [2700, 6300])], {"y": {"nice": 5}}).scale("y")
        assert y.domain == (2000, 7000)

    @pytest.mark.parametrize(
        "values, expected",
        [([1, 5], (0, 5)), ([-5, -1], (-5, 0)), ([-1, 5], (-1, 5))],
    )
    def test_zero(self, values, expected):
        x = plot([Channel("x", values)], {"x": {"zero": True}}).scale("x")
        assert x.domain == expected

    def test_zero_keeps_descending_domain(self):
        x = plot([], {"x": {"domain": [5, 1], "zero": True}}).scale("x")
        assert x.domain == (5, 0)

    def test_inset(self):
        x = plot([Channel("x", [0, 1])], {"inset": 10}).scale("x")
        assert x.range == (30, 610)

    def test_inset_collapses_to_midpoint(self):
        scales = plot([Channel("x", [0, 1])], {"width": 100, "inset": 60})
        assert scales.scale("x").range == (50, 50)
        assert scales.accessor("x")(0.5) == 50

    def test_round(self):
        scales = plot([Channel("x", [0, 3])], {"round": True})
        assert scales.accessor("x")(1) == 220
        assert isinstance(scales.accessor("x")(1), int)

    def test_symlog(self):
        scales = plot([Channel("x", [0, 100])], {"x": {"type": "symlog"}})
        assert scales.accessor("x")(0) == pytest.approx(20)
        assert scales.accessor("x")(100) == pytest.approx(620)

    def test_symlog_negative(self):
        x = scale({"x": {"domain": [0, 100], "type": "symlog"}})
        assert x.apply(-100) == pytest.approx(-580)
        assert x.invert(-580) == pytest.approx(-100)

    @pytest.mark.parametrize(
        "domain, expected, range_",
        [
            ([2700, 6300], (0, 6300), (20, 620)),
            ([4000, 2000], (4000, 0), (20, 620)),
            ([1000, 2000, 4000], (0, 2000, 4000), (20, 320, 620)),
        ],
    )
    def test_zero_extends_explicit_domain(self, domain, expected, range_):
        x = plot([], {"x": {"domain": domain, "zero": True}}).scale("x")
        assert x.domain == expected
        assert x.range == pytest.approx(range_)

    def test_reverse(self):
        scales = plot([Channel("x", [0, 10])], {"x": {"reverse": True}})
        assert scales.scale("x").range == (620, 20)
        assert scales.accessor("x")(10) == 20


class TestOrdinalOverflow:
    def test_at_limit(self):
        values = [f"v{i}" for i in range(ps.IMPLICIT_ORDINAL_DOMAIN_LIMIT)]
        x = plot([Channel("x", values)]).scale("x")
        assert len(x.domain) == 10_000

    def test_over_limit(self):
        values = [f"v{i}" for i in range(ps.IMPLICIT_ORDINAL_DOMAIN_LIMIT + 1)]
        with pytest.raises(ps.ImplicitOrdinalDomainOverflow):
            plot([Channel("x", values)])

    def test_explicit_domain(self):
        values = [f"v{i}" for i in range(10_001)]
        x = plot([Channel("x", values)], {"x": {"domain": values}}).scale("x")
        assert len(x.domain) == 10_001


class TestColor:
    def test_polylinear_rgb(self):
        options = {"color": {"domain": [0, 100, 200], "range": ["red", "blue"]}}
        scales = plot([Channel("fill", [0, 100, 200])], options)
        fill = scales.accessor("color")
        assert fill(0) == "rgb(255,0,0)"
        assert fill(100) == "rgb(128,0,128)"
        assert fill(200) == "rgb(0,0,255)"

    def test_polylinear_rgb_reversed(self):
        options = {
            "color": {"domain": [0, 100, 200], "range": ["red", "blue"], "reverse": True}
        }
        fill = plot([Channel("fill", [0, 100, 200])], options).accessor("color")
        assert fill(0) == "rgb(0,0,255)"
        assert fill(100) == "rgb(128,0,128)"
        assert fill(200) == "rgb(255,0,0)"

    def test_default_scheme(self):
        fill = plot([Channel("fill", [0, 10])]).accessor("color")
        assert fill(0) == get_scheme("turbo").interpolator()(0)

    def test_scheme_sub_range(self):
        options = {"color": {"scheme": "blues", "range": [0, 0.5]}}
        fill = plot([Channel("fill", [0, 10])], options).accessor("color")
        blues = get_scheme("blues").interpolator()
        assert fill(10) == blues(0.5)

    def test_categorical(self):
        color = plot([Channel("stroke", ["apples", "pears", "plums"])]).scale("color")
        assert color.type == "ordinal"
        assert color.range == ("#4e79a7", "#f28e2c", "#e15759")
        assert color.apply("pears") == "#f28e2c"

    def test_literal_colors_are_unscaled(self):
        scales = plot([Channel("fill", ["red", "steelblue"])])
        assert "color" not in scales
        assert scales.scale("color") is None
        assert scales.scaled(Channel("fill", ["red"])) == ["red"]

    def test_implicit_unknown(self):
        with pytest.raises(ps.ImplicitUnknownError, match="implicit unknown on color scale"):
            plot([Channel("fill", ["apples"])], {"color": {"unknown": ps.IMPLICIT}})

    def test_identity(self):
        scales = plot(
            [Channel("fill", ["red"], scale=True)], {"color": {"type": "identity"}}
        )
        assert isinstance(scales.scale("color"), ps.IdentityScale)
        assert scales.accessor("color")("red") == "red"


class TestDiverging:
    def test_symmetric_domain(self):
        color = plot(
            [Channel("fill", [-1, 4])], {"color": {"type": "diverging"}}
        ).scale("color")
        assert color.domain == (-4, 4)
        assert color.apply(0) == get_scheme("rdbu").interpolator()(0.5)

    def test_pivot_infers_diverging(self):
        color = plot([Channel("fill", [2, 6])], {"color": {"pivot": 3}}).scale("color")
        assert color.type == "diverging"
        assert color.domain == (0, 6)

    def test_descending_domain_flips_interpolator(self):
        options = {"color": {"type": "diverging", "domain": [4, -1], "symmetric": False}}
        color = plot([Channel("fill", [0])], options).scale("color")
        rdbu = get_scheme("rdbu").interpolator()
        assert color.domain == (-1, 4)
        assert color.apply(-1) == rdbu(1)
        assert color.apply(4) == rdbu(0)

    def test_reverse_undoes_descending(self):
        options = {
            "color": {
                "type": "diverging",
                "domain": [4, -1],
                "symmetric": False,
                "reverse": True,
            }
        }
        color = plot([Channel("fill", [0])], options).scale("color")
        assert color.apply(-1) == get_scheme("rdbu").interpolator()(0)

    def test_extra_elements_warn(self):
        options = {"color": {"type": "diverging", "domain": [-1, 0, 1]}}
        with pytest.warns(ps.ScaleWarning):
            color = plot([Channel("fill", [0])], options).scale("color")
        assert color.domain == (-1, 1)

    def test_color_range(self):
        options = {"color": {"type": "diverging", "range": ["red", "blue"]}}
        color = plot([Channel("fill", [-1, 1])], options).scale("color")
        assert color.apply(0) == "rgb(128,0,128)"

    def test_no_invert(self):
        color = plot([Channel("fill", [-1, 1])], {"color": {"type": "diverging"}}).scale(
            "color"
        )
        assert not hasattr(color, "invert")


class TestThreshold:
    def test_quantile(self):
        options = {"color": {"type": "quantile", "n": 4}}
        color = plot([Channel("fill", [1, 2, 3, 4, 5, 6, 7, 8, 9])], options).scale(
            "color"
        )
        assert color.type == "threshold"
        assert color.domain == pytest.approx((3, 5, 7))
        assert color.range == ("#d7191c", "#fdae61", "#abd9e9", "#2c7bb6")

    def test_quantile_with_scheme(self):
        options = {"color": {"type": "quantile", "n": 4, "scheme": "blues"}}
        color = plot([Channel("fill", list(range(1, 10)))], options).scale("color")
        assert color.range == ("#eff3ff", "#bdd7e7", "#6baed6", "#2171b5")

    def test_quantize(self):
        color = plot(
            [Channel("fill", [0, 100])], {"color": {"type": "quantize"}}
        ).scale("color")
        assert color.domain == (20, 40, 60, 80)
        assert len(color.range) == 5
        assert color.apply(50) == color.range[2]

    def test_non_monotonic_domain(self):
        with pytest.raises(ps.NonMonotonicDomainError):
            scale({"color": {"type": "threshold", "domain": [1, 0, 1]}})

    def test_descending_domain(self):
        color = scale(
            {"color": {"type": "threshold", "domain": [10, 0], "range": ["a", "b", "c"]}}
        )
        assert color.domain == (0, 10)
        assert color.range == ("c", "b", "a")


class TestEncodings:
    def test_radius(self):
        scales = plot([Channel("r", [1, 2, 3, 4, 9])])
        r = scales.scale("r")
        assert r.type == "pow"
        assert r.exponent == 0.5
        assert r.domain == (0, 9)
        assert r.range[1] == pytest.approx(math.sqrt(40.5))
        assert scales.accessor("r")(9) == pytest.approx(math.sqrt(40.5))

    def test_opacity(self):
        scales = plot([Channel("fillOpacity", [2, 4])])
        assert scales.scale("opacity").domain == (0, 4)
        assert scales.accessor("opacity")(2) == pytest.approx(0.5)

    def test_symbol(self):
        scales = plot([Channel("symbol", ["apples", "pears"])])
        assert scales.accessor("symbol")("pears") == "cross"


class TestReuse:
    def test_ordinal_with_interval(self):
        channels = [Channel("x", [1, 4, 2])]
        first = plot(channels, {"x": {"type": "band", "interval": 1}}).scale("x")
        assert first.domain == (1, 2, 3, 4)
        second = plot(channels, {"x": first}).scale("x")
        assert second == first

    def test_continuous_with_interval(self):
        channels = [Channel("y", [1.2, 3.7])]
        scales = plot(channels, {"y": {"interval": 1}})
        first = scales.scale("y")
        assert first.domain == (1, 3)
        assert scales.accessor("y")(3.7) == 20
        second = plot(channels, {"y": first}).scale("y")
        assert second == first

    def test_reuse_ignores_new_data(self):
        first = plot([Channel("x", [0, 10])]).scale("x")
        second = plot([Channel("x", [50, 100])], {"x": first}).scale("x")
        assert second == first

    @pytest.mark.parametrize(
        "options, values",
        [
            ({"type": "quantile"}, list(range(20))),
            ({"type": "diverging"}, [-3, 1]),
            ({"domain": [0, 100, 200], "range": ["red", "blue"]}, [0]),
            ({"scheme": "blues", "reverse": True}, [1, 5]),
            ({}, ["apples", "pears"]),
        ],
    )
    def test_color_round_trip(self, options, values):
        channels = [Channel("fill", values)]
        first = plot(channels, {"color": options}).scale("color")
        second = plot(channels, {"color": first}).scale("color")
        assert second == first
        assert [second.apply(v) for v in values] == [first.apply(v) for v in values]


class TestQueries:
    def test_first_reference_order(self):
        scales = plot([Channel("fill", [1]), Channel("x", [1]), Channel("y", [2])])
        assert list(scales) == ["color", "x", "y"]

    def test_unused_and_unknown(self):
        scales = plot([Channel("x", [1])])
        assert scales.scale("y") is None
        with pytest.raises(ps.UnknownScaleError):
            scales.scale("z")

    def test_option_only_scale(self):
        scales = plot([], {"color": {"domain": ["a", "b"]}, "x": {"label": "ignored"}})
        assert list(scales) == ["color"]
        assert scales.scale("color").range == ("#4e79a7", "#f28e2c")


class TestStandalone:
    def test_scale(self):
        color = scale({"color": {"type": "linear"}})
        assert color.domain == (0, 1)
        assert color.apply(0) == get_scheme("turbo").interpolator()(0)

    @pytest.mark.parametrize(
        "options",
        [{}, {"color": {}}, {"size": {"type": "linear"}}, {"x": {"domain": [0, 1]}, "y": {"domain": [0, 1]}}],
    )
    def test_invalid(self, options):
        with pytest.raises(ps.InvalidScaleDefinition, match="invalid scale definition"):
            scale(options)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "values, options, samples",
        [
            ([1, 1000], {"type": "log"}, [1, 10, 42, 1000]),
            ([-1000, -1], {"type": "log"}, [-500, -3]),
            ([0, 100], {"type": "pow", "exponent": 2}, [0, 7, 50, 100]),
            ([0, 100], {"type": "sqrt"}, [0, 25, 81]),
            ([0, 100], {"type": "symlog"}, [-100, 0, 3, 100]),
        ],
    )
    def test_numeric(self, values, options, samples):
        x = plot([Channel("x", values)], {"x": options}).scale("x")
        for v in samples:
            assert x.invert(x.apply(v)) == pytest.approx(v)

    def test_utc_naive(self):
        days = [datetime(2020, 1, 1), datetime(2020, 1, 3)]
        x = plot([Channel("x", days)]).scale("x")
        assert x.type == "utc"
        for v in [days[0], datetime(2020, 1, 2), datetime(2020, 1, 2, 6, 30), days[1]]:
            assert x.invert(x.apply(v)) == v

    def test_utc_dates(self):
        x = plot([Channel("x", [date(2020, 1, 1), date(2020, 1, 31)])]).scale("x")
        assert x.invert(x.apply(date(2020, 1, 10))) == date(2020, 1, 10)

    def test_utc_aware(self):
        tz = timezone(timedelta(hours=9))
        days = [datetime(2020, 1, 1, tzinfo=tz), datetime(2020, 1, 3, tzinfo=tz)]
        x = plot([Channel("x", days)]).scale("x")
        value = x.invert(x.apply(datetime(2020, 1, 2, tzinfo=tz)))
        assert value == datetime(2020, 1, 2, tzinfo=tz)
        assert value.tzinfo is not None

    def test_utc_nice_below_a_second_stays_naive(self):
        values = [datetime(2020, 1, 1, 0, 0, 0, 100), datetime(2020, 1, 1, 0, 0, 0, 900)]
        x = plot([Channel("x", values)], {"x": {"nice": True}}).scale("x")
        assert all(d.tzinfo is None for d in x.domain)
        assert x.domain[0] <= values[0]
