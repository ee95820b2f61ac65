"""
Yield curve protocol and discount-derived algebra.

Every curve supplies a discount factor P(0,t); the Curve base class
derives the rest once:
- Discount factor P(t1,t2) and accumulation factor 1/P
- Zero rate z(t)
- Forward rate f(t1, t2)
- Instantaneous forward rate f(t)
- Par yield

Conventions:
    - Times are year fractions from the valuation date (time 0)
    - Discount factor at t=0 is 1.0
    - Zero rates are continuously compounded unless converted
"""

from abc import ABC, abstractmethod
from numbers import Real
from typing import Optional, Sequence, Union
import math
import operator

import numpy as np

from ..conventions import Compounding, Continuous, Periodic
from ..rates import Rate, as_rate
from ..solvers import SolverSettings, newton_solve

# Zero rates at t=0 are read at this time instead
SHORT_END = 1e-6


class Curve(ABC):
    """
    Abstract discount curve.

    Subclasses implement discount_factor(t); they may override zero()
    or instantaneous_forward() where a closed form is cheaper.

    Curves are immutable once built. Arithmetic between curves (or a
    curve and a rate or number) creates a combined curve; see
    curves.combination.
    """

    @abstractmethod
    def discount_factor(self, t: float) -> float:
        """
        Discount factor P(0,t).

        Args:
            t: Year fraction

        Returns:
            Discount factor
        """

    def __call__(self, t: float) -> float:
        return self.discount_factor(t)

    def discount(self, t: float, end: Optional[float] = None) -> float:
        """
        Discount factor P(0,t), or P(t,end) if end is given.

        Args:
            t: Year fraction (start time if end is given)
            end: Optional end time

        Returns:
            Discount factor
        """
        if end is None:
            return self.discount_factor(t)
        return self.discount_factor(end) / self.discount_factor(t)

    def accumulation(self, t: float, end: Optional[float] = None) -> float:
        """Accumulation factor, the reciprocal of discount(t, end)."""
        return 1.0 / self.discount(t, end)

    def zero(self, t: float, compounding: Optional[Compounding] = None) -> Rate:
        """
        Zero (spot) rate z(t) = -ln(P(0,t))/t.

        At t=0 the rate is read at SHORT_END.

        Args:
            t: Year fraction
            compounding: Convention of the result (default continuous)

        Returns:
            Zero rate
        """
        t = max(t, SHORT_END)
        z = Rate(-math.log(self.discount_factor(t)) / t, Continuous())
        return z.convert(compounding or Continuous())

    def forward(
        self,
        start: float,
        end: Optional[float] = None,
        compounding: Optional[Compounding] = None
    ) -> Rate:
        """
        Forward rate between start and end.

        Args:
            start: Start time
            end: End time (default start + 1)
            compounding: Convention of the result (default annual)

        Returns:
            Rate r such that discounting at r over [start, end]
            reproduces P(start, end)
        """
        end = start + 1.0 if end is None else end
        if end <= start:
            raise ValueError("end must be greater than start")

        growth = self.accumulation(end) / self.accumulation(start)
        fwd = Rate(growth ** (1.0 / (end - start)) - 1.0, Periodic(1))
        return fwd.convert(compounding or Periodic(1))

    def instantaneous_forward(self, t: float, h: float = 1e-5) -> float:
        """
        Instantaneous forward rate f(t) = -d/dt [log P(0,t)].

        Central difference; one-sided near t=0.

        Returns:
            Continuously compounded instantaneous forward
        """
        lo = max(t - h, 0.0)
        hi = t + h
        return -(math.log(self.discount_factor(hi)) - math.log(self.discount_factor(lo))) / (hi - lo)

    def par(
        self,
        t: float,
        frequency: float = 2,
        settings: Optional[SolverSettings] = None
    ) -> Rate:
        """
        Par yield for a bond maturing at t.

        The level coupon making the bond worth par is found first, then
        the internal rate of return of the resulting cashflows is
        reported at the frequency of the actual coupon spacing, 1/dt.

        Note: the reported frequency is always 1/dt, where
        dt = min(1/frequency, t). `frequency` only sets the coupon
        schedule; par(0.75, frequency=1) pays a single coupon after 0.75
        years and is reported as Periodic(4/3), not Periodic(1).

        Args:
            t: Maturity
            frequency: Coupons per year (default semiannual)
            settings: Newton settings for the IRR solve

        Returns:
            Par yield
        """
        times = coupon_times(t, frequency)
        dt = min(1.0 / frequency, t)

        coupon_pv = sum(self.discount_factor(s) for s in times)
        coupon = (1.0 - self.discount_factor(t)) / coupon_pv

        cashflows = np.full(len(times) + 1, coupon)
        cashflows[0] = -1.0
        cashflows[-1] += 1.0
        irr = internal_rate_of_return(cashflows, np.concatenate([[0.0], times]), settings=settings)

        return Rate(irr, Continuous()).convert(Periodic(1.0 / dt))

    def _combine(self, other, op, reflected: bool = False):
        from .combination import combine

        if not isinstance(other, (Curve, Rate, Real)):
            return NotImplemented
        if reflected:
            return combine(other, self, op)
        return combine(self, other, op)

    def __add__(self, other):
        return self._combine(other, operator.add)

    def __radd__(self, other):
        return self._combine(other, operator.add, reflected=True)

    def __sub__(self, other):
        return self._combine(other, operator.sub)

    def __rsub__(self, other):
        return self._combine(other, operator.sub, reflected=True)

    def __mul__(self, other):
        return self._combine(other, operator.mul)

    def __rmul__(self, other):
        return self._combine(other, operator.mul, reflected=True)

    def __truediv__(self, other):
        return self._combine(other, operator.truediv)

    def __rtruediv__(self, other):
        return self._combine(other, operator.truediv, reflected=True)


def coupon_times(t: float, frequency: float) -> np.ndarray:
    """
    Coupon payment times of a bond maturing at t.

    Payments fall every dt = min(1/frequency, t) counting back from t;
    the first payment lies in (0, dt].

    Examples:
        coupon_times(1.5, 1) -> [0.5, 1.5]
        coupon_times(1.0, 2) -> [0.5, 1.0]
        coupon_times(0.75, 1) -> [0.75]

    Args:
        t: Maturity (years)
        frequency: Payments per year

    Returns:
        Ascending array of payment times
    """
    if t <= 0:
        raise ValueError(f"Maturity must be positive, got {t}")
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")

    dt = min(1.0 / frequency, t)
    n = int(math.ceil(t / dt - 1e-9))
    return np.array([t - k * dt for k in reversed(range(n))])


def internal_rate_of_return(
    cashflows: Sequence[float],
    times: Sequence[float],
    guess: float = 0.0,
    settings: Optional[SolverSettings] = None
) -> float:
    """
    Continuously compounded internal rate of return.

    Solves sum(cf * exp(-x*t)) = 0 by Newton's method with the
    closed-form derivative.

    Args:
        cashflows: Cashflow amounts (initial outlay negative)
        times: Cashflow times
        guess: Starting rate
        settings: Newton settings

    Returns:
        Continuous rate
    """
    cfs = np.asarray(cashflows, dtype=np.float64)
    ts = np.asarray(times, dtype=np.float64)
    if len(cfs) != len(ts):
        raise ValueError("Cashflows and times must have same length")

    def npv(x):
        return float(np.sum(cfs * np.exp(-x * ts)))

    def npv_prime(x):
        return float(np.sum(-ts * cfs * np.exp(-x * ts)))

    return newton_solve(npv, guess, fprime=npv_prime, settings=settings, label="internal rate of return")


class ConstantCurve(Curve):
    """
    Flat curve at a single rate.

    Bare numbers are taken as annually compounded rates.

    Attributes:
        rate: The curve's rate
    """

    def __init__(self, rate: Union[Rate, float] = 0.0):
        self.rate = as_rate(rate, Periodic(1))

    def discount_factor(self, t: float) -> float:
        return self.rate.discount(t)

    def zero(self, t: float, compounding: Optional[Compounding] = None) -> Rate:
        """Zero rate: the curve's rate at every t (continuous by default)."""
        return self.rate.convert(compounding or Continuous())

    def instantaneous_forward(self, t: float, h: float = 1e-5) -> float:
        return self.rate.continuous

    def __repr__(self) -> str:
        return f"ConstantCurve({self.rate!r})"


class StepCurve(Curve):
    """
    Piecewise-constant rate curve.

    rates[i] applies from times[i-1] (0 for the first) until times[i];
    the last rate also applies beyond the last time. Bare numbers are
    annually compounded, Periodic(1).

    Attributes:
        rates: Rate per period
        times: Period end times (strictly increasing, positive)
    """

    def __init__(
        self,
        rates: Sequence[Union[Rate, float]],
        times: Optional[Sequence[float]] = None
    ):
        times = list(range(1, len(rates) + 1)) if times is None else list(times)
        if len(rates) != len(times):
            raise ValueError("Rates and times must have same length")
        if len(rates) == 0:
            raise ValueError("Need at least one rate")
        if times[0] <= 0 or np.any(np.diff(times) <= 0):
            raise ValueError("Times must be positive and strictly increasing")
        self.rates = [as_rate(r, Periodic(1)) for r in rates]
        self.times = np.asarray(times, dtype=np.float64)

    def rate(self, t: float) -> Rate:
        """Rate applicable at time t."""
        i = min(int(np.searchsorted(self.times, t, side='left')), len(self.times) - 1)
        return self.rates[i]

    def discount_factor(self, t: float) -> float:
        if t <= 0:
            return 1.0
        v = 1.0
        prior = 0.0
        for rate, end in zip(self.rates, self.times):
            if t <= end:
                return v * rate.discount(t - prior)
            v *= rate.discount(end - prior)
            prior = end
        return v * self.rates[-1].discount(t - prior)

    def __repr__(self) -> str:
        return f"StepCurve(n={len(self.rates)}, last={self.times[-1]:g})"


class ForwardStartingCurve(Curve):
    """
    A curve re-anchored at a future time.

    discount(t) is the underlying curve's discount factor from start
    to start + t.
    """

    def __init__(self, curve: Curve, start: float):
        if start < 0:
            raise ValueError(f"Start time must be non-negative, got {start}")
        self.curve = curve
        self.start = start

    def discount_factor(self, t: float) -> float:
        return self.curve.discount(self.start, self.start + t)

    def __repr__(self) -> str:
        return f"ForwardStartingCurve({self.curve!r}, start={self.start})"


__all__ = [
    "Curve",
    "ConstantCurve",
    "ForwardStartingCurve",
    "StepCurve",
    "SHORT_END",
    "coupon_times",
    "internal_rate_of_return",
]
