"""
Interest rate value type.

A Rate is a scalar tagged with its compounding convention. Conversions
go through continuous compounding as the common basis, so that the
discount factor implied over any period is preserved:

    (1 + r/m)^m == exp(r_c)

Bare numbers passed where a Rate is expected are interpreted with a
call-site specific default (see as_rate).
"""

from dataclasses import dataclass
from numbers import Real
from typing import Optional, Union
import math

from .conventions import Compounding, Continuous, Periodic


@dataclass(frozen=True)
class Rate:
    """
    Interest rate with a compounding convention.

    Attributes:
        value: Rate in decimal (0.05 = 5%)
        compounding: Periodic(m) or Continuous() (default annual)

    Arithmetic operates on the value and keeps the left operand's
    compounding; a Rate on the right is converted to it first.
    """
    value: float
    compounding: Compounding = Periodic(1)

    def convert(self, compounding: Compounding) -> "Rate":
        """
        Equivalent rate under another compounding convention.

        Args:
            compounding: Target convention

        Returns:
            Rate implying the same discount factor
        """
        if compounding == self.compounding:
            return self
        continuous = self.compounding.to_continuous(self.value)
        return Rate(float(compounding.from_continuous(continuous)), compounding)

    @property
    def continuous(self) -> float:
        """Continuously compounded value."""
        return float(self.compounding.to_continuous(self.value))

    def discount(self, t: float, end: Optional[float] = None) -> float:
        """
        Discount factor at this rate.

        Args:
            t: Time in years, or start time if end is given
            end: Optional end time

        Returns:
            Discount factor over [0, t] or [t, end]
        """
        period = t if end is None else end - t
        return float(self.compounding.discount(self.value, period))

    def accumulation(self, t: float, end: Optional[float] = None) -> float:
        """Accumulation factor, the reciprocal of the discount factor."""
        return 1.0 / self.discount(t, end)

    def isclose(self, other: Union["Rate", float], abs_tol: float = 1e-9) -> bool:
        """Compare two rates after converting other to this compounding."""
        other = self._coerce(other)
        return math.isclose(self.value, other.value, rel_tol=0.0, abs_tol=abs_tol)

    def _coerce(self, other) -> "Rate":
        if isinstance(other, Rate):
            return other.convert(self.compounding)
        if isinstance(other, Real):
            return Rate(float(other), self.compounding)
        return NotImplemented

    def _operate(self, other, op, reflected: bool = False):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        if reflected:
            return Rate(op(other.value, self.value), self.compounding)
        return Rate(op(self.value, other.value), self.compounding)

    def __add__(self, other):
        return self._operate(other, lambda a, b: a + b)

    def __radd__(self, other):
        return self._operate(other, lambda a, b: a + b, reflected=True)

    def __sub__(self, other):
        return self._operate(other, lambda a, b: a - b)

    def __rsub__(self, other):
        return self._operate(other, lambda a, b: a - b, reflected=True)

    def __mul__(self, other):
        return self._operate(other, lambda a, b: a * b)

    def __rmul__(self, other):
        return self._operate(other, lambda a, b: a * b, reflected=True)

    def __truediv__(self, other):
        return self._operate(other, lambda a, b: a / b)

    def __rtruediv__(self, other):
        return self._operate(other, lambda a, b: a / b, reflected=True)

    def __neg__(self) -> "Rate":
        return Rate(-self.value, self.compounding)

    def __lt__(self, other) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self.value < other.value

    def __gt__(self, other) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self.value > other.value

    def __repr__(self) -> str:
        return f"Rate({self.value:.10g}, {self.compounding!r})"


def as_rate(rate: Union[Rate, float], default: Compounding = Periodic(1)) -> Rate:
    """
    Interpret a value as a Rate.

    Args:
        rate: A Rate (returned unchanged) or a bare number
        default: Compounding applied to bare numbers. Callers state
            their own default: annual for zero and forward yields,
            semiannual for par yields.

    Returns:
        Rate
    """
    if isinstance(rate, Rate):
        return rate
    return Rate(float(rate), default)


def convert(rate: Union[Rate, float], compounding: Compounding) -> Rate:
    """Convert a rate (bare numbers are annual) to another compounding."""
    return as_rate(rate).convert(compounding)


def discount(rate: Union[Rate, float], t: float, end: Optional[float] = None) -> float:
    """Discount factor at a rate (bare numbers are annual) over [0, t] or [t, end]."""
    return as_rate(rate).discount(t, end)


def accumulation(rate: Union[Rate, float], t: float, end: Optional[float] = None) -> float:
    """Accumulation factor at a rate (bare numbers are annual)."""
    return as_rate(rate).accumulation(t, end)


__all__ = [
    "Rate",
    "Continuous",
    "Periodic",
    "as_rate",
    "convert",
    "discount",
    "accumulation",
]
