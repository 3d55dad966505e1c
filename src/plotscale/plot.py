"""
Compile entry point: bind channels to scales and build a descriptor for every
scale a plot uses.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence

from .config import Config, default_config
from .descriptors import ScaleDescriptor
from .errors import InvalidScaleDefinition
from .factory import create_scale
from .options import ScaleOptions
from .ranges import Dimensions
from .registry import REGISTRY, channel_scale, registered

# Top-level plot options that act as defaults for the position scales.
_POSITION_DEFAULTS = ("zero", "nice", "clamp", "round", "inset", "align", "padding")
_FACET_DEFAULTS = ("round", "align", "padding")


@dataclass
class Channel:
    """
    Values of one mark channel. `scale` is `"auto"`, `True`, `False`/`None`, or
    the name of a scale; `hint` may ask for a `"band"` position scale.
    """

    name: str
    values: Sequence[Any]
    scale: Any = "auto"
    hint: Optional[str] = None


def _defaults(name: str, options: Mapping[str, Any]) -> dict[str, Any]:
    if name in ("x", "y"):
        keys = _POSITION_DEFAULTS
    elif name in ("fx", "fy"):
        keys = _FACET_DEFAULTS
    else:
        return {}
    return {k: options[k] for k in keys if options.get(k) is not None}


class ScaleSet(Mapping[str, ScaleDescriptor]):
    """Descriptors of the scales used by a plot, in first-reference order."""

    def __init__(self, scales: dict[str, ScaleDescriptor]):
        self._scales = scales

    def __getitem__(self, name: str) -> ScaleDescriptor:
        return self._scales[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scales)

    def __len__(self) -> int:
        return len(self._scales)

    def __repr__(self) -> str:
        return f"ScaleSet({self._scales!r})"

    def scale(self, name: str) -> Optional[ScaleDescriptor]:
        """The descriptor for `name`, or None if the plot does not use it."""
        registered(name)
        return self._scales.get(name)

    def accessor(self, name: str) -> Callable[[Any], Any]:
        descriptor = self._scales.get(registered(name).name)
        if descriptor is None:
            raise KeyError(name)

        def scaled(value: Any) -> Any:
            return descriptor.apply(descriptor.prepare(value))

        return scaled

    def scaled(self, channel: Channel) -> list[Any]:
        """Channel values in range space; unscaled channels pass through."""
        name = channel_scale(channel)
        if name is None or name not in self._scales:
            return list(channel.values)
        f = self.accessor(name)
        return [f(v) for v in channel.values]


def plot(
    channels: Iterable[Channel] = (),
    options: Optional[Mapping[str, Any]] = None,
    *,
    config: Optional[Config] = None,
) -> ScaleSet:
    """
    Build the scales for a set of channels.

    `options` holds per-scale options keyed by scale name (mappings or
    descriptors from an earlier compile) alongside top-level options such as
    `width`, `height`, `margin` and the position defaults `zero`, `nice`,
    `clamp`, `round`, `inset`, `align` and `padding`.
    """
    config = config or default_config()
    options = options or {}

    groups: dict[str, list[Channel]] = {}
    for channel in channels:
        name = channel_scale(channel)
        if name is not None:
            groups.setdefault(name, []).append(channel)

    parsed = {
        name: ScaleOptions.parse(options.get(name), _defaults(name, options))
        for name in REGISTRY
    }
    for name in REGISTRY:
        if name not in groups and options.get(name) is not None:
            if parsed[name].declared:
                groups[name] = []

    dimensions = Dimensions.from_options(options, config)
    return ScaleSet(
        {
            name: create_scale(
                registered(name), bound, parsed[name], dimensions, config
            )
            for name, bound in groups.items()
        }
    )


def scale(options: Mapping[str, Any], *, config: Optional[Config] = None) -> ScaleDescriptor:
    """
    Build a single scale outside of a plot, e.g. `scale({"color": {"type":
    "linear"}})`. The mapping must name exactly one scale.
    """
    if not isinstance(options, Mapping) or not options:
        raise InvalidScaleDefinition("invalid scale definition")
    names = [k for k in options if k in REGISTRY]
    if len(names) != 1 or not options[names[0]]:
        raise InvalidScaleDefinition("invalid scale definition")
    name = names[0]
    descriptor = plot((), {name: options[name]}, config=config).scale(name)
    if descriptor is None:
        raise InvalidScaleDefinition("invalid scale definition")
    return descriptor
