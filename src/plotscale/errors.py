class ScaleError(ValueError):
    """Base class for scale configuration and data-shape failures."""


class InvalidScaleDefinition(ScaleError):
    pass


class UnknownScaleError(ScaleError):
    def __init__(self, name: object):
        super().__init__(f"unknown scale: {name}")
        self.name = name


class ImplicitDomainOverflowError(ScaleError):
    pass


ImplicitOrdinalDomainOverflow = ImplicitDomainOverflowError


class ImplicitUnknownError(ScaleError):
    pass


class NonMonotonicDomainError(ScaleError):
    pass


class ScaleWarning(UserWarning):
    """
    Recoverable scale anomaly. The offending input is truncated and inference
    continues.
    """
