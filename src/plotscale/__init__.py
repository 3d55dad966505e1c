from .config import IMPLICIT_ORDINAL_DOMAIN_LIMIT, Config
from .descriptors import (
    BandScale,
    ContinuousScale,
    DivergingScale,
    IdentityScale,
    OrdinalScale,
    PointScale,
    ScaleDescriptor,
    ThresholdScale,
)
from .errors import (
    ImplicitDomainOverflowError,
    ImplicitOrdinalDomainOverflow,
    ImplicitUnknownError,
    InvalidScaleDefinition,
    NonMonotonicDomainError,
    ScaleError,
    ScaleWarning,
    UnknownScaleError,
)
from .interpolate import (
    interpolate_number,
    interpolate_oklab,
    interpolate_rgb,
    interpolate_round,
)
from .intervals import NumberInterval, TimeInterval
from .options import IMPLICIT
from .plot import Channel, ScaleSet, plot, scale
from .ranges import Dimensions
from .registry import channel_scale
from .schemes import get_scheme
