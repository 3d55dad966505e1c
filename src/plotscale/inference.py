from typing import Any, NamedTuple, Optional, Sequence
import math

import numpy as np

from .config import Config, default_config
from .errors import InvalidScaleDefinition
from .intervals import is_temporal
from .options import ScaleOptions
from .registry import Family, ScaleEntry, ScaleKind, family_of
from .schemes import SCHEMES, SchemeKind


class Inference(NamedTuple):
    type: str
    family: Family
    # Ordinal scale whose default colors come from a categorical scheme.
    categorical: bool = False
    # Exponent forced by an alias such as sqrt.
    exponent: Optional[float] = None
    # Default scheme implied by the type, e.g. rainbow for cyclical.
    scheme: Optional[str] = None


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.number)) and not isinstance(
        value, (bool, np.bool_)
    )


def is_defined(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (float, np.floating)) and math.isnan(value):
        return False
    return True


def ordinal_key(value: Any) -> tuple[bool, Any]:
    """
    Hashable identity of an ordinal value. Booleans stay distinct from the
    equal numbers 0 and 1, and numpy scalars match their Python values.
    """
    if isinstance(value, np.generic):
        value = value.item()
    return isinstance(value, bool), value


def _first_defined(values: Sequence[Any]) -> Any:
    for value in values:
        if is_defined(value):
            return value
    return None


def _ordinal_type(entry: ScaleEntry, hints: Sequence[str]) -> Inference:
    if entry.is_position:
        if "band" in hints:
            return Inference("band", Family.Band)
        return Inference("point", Family.Point)
    return Inference("ordinal", Family.Ordinal, categorical=True)


def _scheme_kind(name: Optional[str]) -> Optional[SchemeKind]:
    if not isinstance(name, str):
        return None
    scheme = SCHEMES.get(name.lower())
    return None if scheme is None else scheme.kind


def _declared(
    entry: ScaleEntry, type: str, hints: Sequence[str], config: Config
) -> Inference:
    family = family_of(type)
    if family is None:
        raise InvalidScaleDefinition(f"unknown scale type: {type} ({entry.name} scale)")

    # Position scales draw discrete values as points or bands.
    if family == Family.Ordinal and entry.is_position and not entry.is_facet:
        return _ordinal_type(entry, hints)

    if not entry.allows(family):
        raise InvalidScaleDefinition(f"invalid type for {entry.name} scale: {type}")

    match type:
        case "sqrt":
            return Inference("pow", family, exponent=0.5)
        case "diverging-sqrt":
            return Inference("diverging-pow", family, exponent=0.5)
        case "sequential":
            return Inference("linear", family)
        case "cyclical":
            return Inference("linear", family, scheme=config.cyclical_scheme)
        case "categorical":
            return Inference("ordinal", family, categorical=True)
        case _:
            return Inference(type, family)


def infer_type(
    entry: ScaleEntry,
    options: ScaleOptions,
    values: Optional[Sequence[Any]],
    hints: Sequence[str] = (),
    config: Optional[Config] = None,
) -> Inference:
    """
    Choose the concrete scale type for a scale. `values` holds the prepared
    values of every channel bound to the scale, or None when no channel is.
    """
    config = config or default_config()

    if options.type == "identity":
        return Inference("identity", Family.Identity)
    if options.type is not None:
        return _declared(entry, options.type, hints, config)

    if entry.is_facet:
        return Inference("band", Family.Band)
    if entry.kind == ScaleKind.Symbol:
        return Inference("ordinal", Family.Ordinal, categorical=True)

    sample = _first_defined(values or ())
    if sample is None and options.domain is not None:
        sample = _first_defined(options.domain)
    if sample is None and values is None and not options.declared:
        raise InvalidScaleDefinition(
            f"invalid scale definition: nothing to infer the {entry.name} scale from"
        )

    if sample is not None and not is_number(sample):
        if is_temporal(sample):
            return Inference("utc", Family.Continuous)
        if entry.kind in (ScaleKind.Position, ScaleKind.Color, ScaleKind.Opacity):
            return _ordinal_type(entry, hints)
        raise InvalidScaleDefinition(
            f"invalid scale definition: {entry.name} scale requires numeric values"
        )

    match entry.kind:
        case ScaleKind.Radius:
            return Inference("pow", Family.Continuous, exponent=0.5)
        case ScaleKind.Color:
            scheme_kind = _scheme_kind(options.scheme)
            if options.pivot is not None or scheme_kind == SchemeKind.Diverging:
                return Inference("diverging", Family.Diverging)
            if scheme_kind == SchemeKind.Categorical:
                return Inference("ordinal", Family.Ordinal, categorical=True)
            return Inference("linear", Family.Continuous)
        case _:
            return Inference("linear", Family.Continuous)
