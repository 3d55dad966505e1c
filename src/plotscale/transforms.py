from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, override
import math


class Transform(ABC):
    """
    Monotonic mapping from domain space into the linear space in which a
    continuous scale interpolates.
    """

    @abstractmethod
    def apply(self, x: float) -> float:
        pass

    @abstractmethod
    def invert(self, y: float) -> float:
        pass


@dataclass(frozen=True)
class IdentityTransform(Transform):
    @override
    def apply(self, x):
        return x

    @override
    def invert(self, y):
        return y


@dataclass(frozen=True)
class PowTransform(Transform):
    exponent: float = 1.0

    @override
    def apply(self, x):
        if self.exponent == 1:
            return x
        if self.exponent == 0.5:
            return -math.sqrt(-x) if x < 0 else math.sqrt(x)
        return -((-x) ** self.exponent) if x < 0 else x**self.exponent

    @override
    def invert(self, y):
        if self.exponent == 1:
            return y
        e = 1 / self.exponent
        return -((-y) ** e) if y < 0 else y**e


@dataclass(frozen=True)
class LogTransform(Transform):
    """Natural logarithm; `negative` reflects domains below zero."""

    negative: bool = False

    @override
    def apply(self, x):
        if self.negative:
            return -math.log(-x) if x < 0 else math.nan
        return math.log(x) if x > 0 else (-math.inf if x == 0 else math.nan)

    @override
    def invert(self, y):
        return -math.exp(-y) if self.negative else math.exp(y)


@dataclass(frozen=True)
class SymlogTransform(Transform):
    constant: float = 1.0

    @override
    def apply(self, x):
        return math.copysign(math.log1p(abs(x / self.constant)), x)

    @override
    def invert(self, y):
        return math.copysign(math.expm1(abs(y)), y) * self.constant


def scale_transform(
    type: str,
    exponent: Optional[float] = None,
    constant: Optional[float] = None,
    negative: bool = False,
) -> Transform:
    """The transform behind a continuous or diverging scale type."""
    match type.removeprefix("diverging-"):
        case "pow":
            return PowTransform(1.0 if exponent is None else exponent)
        case "log":
            return LogTransform(negative)
        case "symlog":
            return SymlogTransform(1.0 if constant is None else constant)
        case _:
            return IdentityTransform()
