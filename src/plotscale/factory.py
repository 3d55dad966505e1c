from typing import Any, Optional, Protocol, Sequence

from .config import Config
from .descriptors import (
    BandScale,
    ContinuousScale,
    DivergingScale,
    IdentityScale,
    OrdinalScale,
    PointScale,
    ScaleDescriptor,
    ThresholdScale,
    band_layout,
)
from .domains import (
    continuous_domain,
    diverging_domain,
    ordinal_domain,
    threshold_domain,
)
from .errors import ImplicitUnknownError, InvalidScaleDefinition
from .inference import Inference, infer_type
from .interpolate import Flipped, Piecewise, SubRange, interpolate_rgb, is_factory
from .options import IMPLICIT, ScaleOptions
from .ranges import (
    Dimensions,
    continuous_range,
    ordinal_range,
    position_range,
    threshold_range,
)
from .registry import Family, ScaleEntry
from .schemes import get_scheme
from .transforms import scale_transform


class ChannelLike(Protocol):
    values: Sequence[Any]
    hint: Optional[str]


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def create_scale(
    entry: ScaleEntry,
    channels: Sequence[ChannelLike],
    options: ScaleOptions,
    dimensions: Dimensions,
    config: Config,
) -> ScaleDescriptor:
    """
    Build the descriptor for one scale from the channels bound to it.

    Options that already describe a finished scale (for instance a descriptor
    from an earlier compile) are taken as-is: channel values are not read, so
    the result is identical to the input.
    """
    if options.type == "identity":
        return IdentityScale()

    if options.finalized:
        channel_values: list[list[Any]] = []
    else:
        channel_values = [
            [options.prepare(v) for v in channel.values] for channel in channels
        ]
    values = [v for vs in channel_values for v in vs]
    hints = [channel.hint for channel in channels if channel.hint]

    inference = infer_type(
        entry, options, values if channels else None, hints, config
    )

    if options.unknown is IMPLICIT and inference.family in (
        Family.Ordinal,
        Family.Point,
        Family.Band,
    ):
        raise ImplicitUnknownError(f"implicit unknown on {entry.name} scale")

    match inference.family:
        case Family.Identity:
            return IdentityScale()
        case Family.Continuous:
            return _continuous(
                entry, inference, options, values, channel_values, dimensions, config
            )
        case Family.Diverging:
            return _diverging(entry, inference, options, values, config)
        case Family.Ordinal:
            return _ordinal(entry, inference, options, values, config)
        case Family.Point | Family.Band:
            return _positional(entry, inference, options, values, dimensions, config)
        case Family.Threshold:
            return _threshold(entry, inference, options, values, config)


def _continuous(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    values: list[Any],
    channel_values: list[list[Any]],
    dimensions: Dimensions,
    config: Config,
) -> ContinuousScale:
    domain = continuous_domain(entry, inference, options, values)
    range_, interpolate = continuous_range(
        entry, inference, options, domain, channel_values, dimensions, config
    )
    type = inference.type
    return ContinuousScale(
        type=type,
        domain=tuple(domain),
        range=tuple(range_),
        interpolate=interpolate,
        clamp=bool(options.clamp),
        unknown=options.unknown,
        transform=options.transform,
        percent=options.percent,
        interval=options.interval,
        exponent=_first(inference.exponent, options.exponent, 1.0)
        if type == "pow"
        else None,
        base=_first(options.base, 10.0) if type == "log" else None,
        constant=_first(options.constant, 1.0) if type == "symlog" else None,
    )


def _diverging_interpolator(
    entry: ScaleEntry, options: ScaleOptions, flip: bool, config: Config
):
    interpolate = options.interpolate
    if interpolate is None:
        if options.scheme is not None:
            interpolate = get_scheme(options.scheme).interpolator()
        elif options.range is not None:
            interpolate = interpolate_rgb
        else:
            interpolate = get_scheme(config.diverging_scheme).interpolator()

    if options.range is not None:
        if is_factory(interpolate):
            interpolate = Piecewise(interpolate, tuple(options.range))
        elif len(options.range) >= 2:
            interpolate = SubRange(
                interpolate, float(options.range[0]), float(options.range[1])
            )
        else:
            raise InvalidScaleDefinition(f"invalid range for {entry.name} scale")
    elif is_factory(interpolate):
        raise InvalidScaleDefinition(
            f"invalid interpolator for diverging {entry.name} scale: expected a function of t"
        )

    if flip:
        interpolate = Flipped(interpolate)
    return interpolate


def _diverging(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    values: list[Any],
    config: Config,
) -> DivergingScale:
    type = inference.type
    exponent = _first(inference.exponent, options.exponent, 1.0)
    constant = _first(options.constant, 1.0)
    pivot = _first(options.pivot, 1.0 if type == "diverging-log" else 0.0)
    transform = scale_transform(type, exponent, constant, negative=pivot < 0)

    domain, descending = diverging_domain(entry, options, values, transform, pivot)
    interpolate = _diverging_interpolator(
        entry, options, descending != options.reverse, config
    )
    return DivergingScale(
        type=type,
        domain=tuple(domain),
        pivot=pivot,
        interpolate=interpolate,
        symmetric=False,
        clamp=bool(options.clamp),
        unknown=options.unknown,
        transform=options.transform,
        exponent=exponent if type == "diverging-pow" else None,
        base=_first(options.base, 10.0) if type == "diverging-log" else None,
        constant=constant if type == "diverging-symlog" else None,
    )


def _ordinal(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    values: list[Any],
    config: Config,
) -> OrdinalScale:
    domain = ordinal_domain(entry, options, values, config)
    range_ = ordinal_range(entry, inference, options, domain, config)
    return OrdinalScale(
        domain=tuple(domain),
        range=tuple(range_),
        unknown=options.unknown,
        transform=options.transform,
        interval=options.interval,
    )


def _positional(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    values: list[Any],
    dimensions: Dimensions,
    config: Config,
) -> PointScale | BandScale:
    domain = ordinal_domain(entry, options, values, config)
    if options.range is not None:
        range_ = tuple(options.range)
    else:
        range_ = tuple(position_range(entry, options, dimensions, ordinal=True))
    align = _first(options.align, 0.5)
    round = _first(options.round, True)

    if inference.family == Family.Point:
        padding = _first(options.padding, config.point_padding)
        layout = band_layout(len(domain), range_, 1.0, padding, align, round)
        return PointScale(
            domain=tuple(domain),
            range=range_,
            padding=padding,
            align=align,
            round=round,
            bandwidth=layout.bandwidth,
            step=layout.step,
            transform=options.transform,
            interval=options.interval,
        )

    outer = config.facet_padding_outer if entry.is_facet else config.band_padding
    padding_inner = _first(options.padding_inner, options.padding, config.band_padding)
    padding_outer = _first(options.padding_outer, options.padding, outer)
    layout = band_layout(
        len(domain), range_, padding_inner, padding_outer, align, round
    )
    return BandScale(
        domain=tuple(domain),
        range=range_,
        padding_inner=padding_inner,
        padding_outer=padding_outer,
        align=align,
        round=round,
        bandwidth=layout.bandwidth,
        step=layout.step,
        transform=options.transform,
        interval=options.interval,
    )


def _threshold(
    entry: ScaleEntry,
    inference: Inference,
    options: ScaleOptions,
    values: list[Any],
    config: Config,
) -> ThresholdScale:
    domain, descending = threshold_domain(entry, inference, options, values, config)
    range_ = threshold_range(entry, options, len(domain) + 1, descending, config)
    return ThresholdScale(
        domain=tuple(domain),
        range=tuple(range_),
        unknown=options.unknown,
        transform=options.transform,
    )
