"""
Compounding and market quoting conventions.

Compounding:
- Periodic(m): interest compounded m times per year
- Continuous: interest compounded continuously

Quote conventions describe how a quoted market yield is turned into
an instrument (coupon frequency, and the maturity at or below which
the quote is treated as a zero-coupon instrument):
- Par bonds: semiannual coupons
- Par swaps (fixed leg): quarterly coupons
- CMT (constant maturity treasury): zero coupon up to 1Y, semiannual after
- OIS: single settlement up to 1Y, quarterly after
"""

from dataclasses import dataclass
from typing import Optional, Union
import numpy as np


@dataclass(frozen=True)
class Periodic:
    """
    Periodic compounding at a given frequency per year.

    The frequency is usually a positive integer (1=annual, 2=semi,
    4=quarterly) but may be fractional, e.g. a par rate reported at
    the spacing of a single 9-month coupon is Periodic(4/3).
    """
    frequency: float = 1

    def __post_init__(self):
        if self.frequency <= 0:
            raise ValueError(f"Compounding frequency must be positive, got {self.frequency}")

    def to_continuous(self, value: float) -> float:
        """Continuously compounded equivalent of a periodic rate value."""
        return self.frequency * np.log1p(value / self.frequency)

    def from_continuous(self, value: float) -> float:
        """Periodic rate value equivalent to a continuous rate value."""
        return self.frequency * np.expm1(value / self.frequency)

    def discount(self, value: float, t: float) -> float:
        """Discount factor over t years: (1 + r/m)^(-m*t)."""
        return (1.0 + value / self.frequency) ** (-self.frequency * t)

    def __repr__(self) -> str:
        return f"Periodic({self.frequency:g})"


@dataclass(frozen=True)
class Continuous:
    """Continuous compounding."""

    def to_continuous(self, value: float) -> float:
        return value

    def from_continuous(self, value: float) -> float:
        return value

    def discount(self, value: float, t: float) -> float:
        """Discount factor over t years: exp(-r*t)."""
        return np.exp(-value * t)

    def __repr__(self) -> str:
        return "Continuous()"


Compounding = Union[Periodic, Continuous]


@dataclass(frozen=True)
class QuoteConvention:
    """
    Container for the conventions of a quoted yield.

    Attributes:
        coupon_frequency: Coupons per year for coupon-paying maturities
        short_end: Maturities at or below this (years) settle once, as
            zero-coupon instruments. None means every maturity pays coupons.
    """
    coupon_frequency: int = 2
    short_end: Optional[float] = None

    def __post_init__(self):
        if self.coupon_frequency <= 0:
            raise ValueError(f"Coupon frequency must be positive, got {self.coupon_frequency}")

    def is_zero_coupon(self, maturity: float) -> bool:
        """Whether a quote at this maturity settles once, at maturity."""
        return self.short_end is not None and maturity <= self.short_end

    @property
    def compounding(self) -> Periodic:
        """Compounding implied by the coupon frequency (bond-equivalent yield)."""
        return Periodic(self.coupon_frequency)

    @classmethod
    def par(cls) -> "QuoteConvention":
        """Par bond yields: semiannual coupons at every maturity."""
        return cls(coupon_frequency=2)

    @classmethod
    def par_swap(cls) -> "QuoteConvention":
        """Par swap rates: quarterly fixed leg."""
        return cls(coupon_frequency=4)

    @classmethod
    def cmt(cls) -> "QuoteConvention":
        """Constant maturity treasury yields (bond equivalent)."""
        return cls(coupon_frequency=2, short_end=1.0)

    @classmethod
    def ois(cls) -> "QuoteConvention":
        """OIS rates, settled once up to 1Y and quarterly after (Hull 4.7)."""
        return cls(coupon_frequency=4, short_end=1.0)


__all__ = [
    "Periodic",
    "Continuous",
    "Compounding",
    "QuoteConvention",
]
