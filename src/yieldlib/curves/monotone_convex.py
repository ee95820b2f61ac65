"""
Monotone Convex interpolation (Hagan & West, 2006).

Given zero rates at increasing times, builds a continuous
instantaneous forward curve that reproduces every input zero rate and
stays non-negative when the discrete forwards are non-negative.

Construction:
1. Discrete forwards fd_i over each interval (t_{i-1}, t_i], t_0 = 0
2. Instantaneous forwards f_i at each knot, interval-weighted averages
   of the neighbouring discrete forwards, with extrapolated ends
3. Collar f into [0, 2*fd] so forwards stay non-negative
4. In each interval the forward is fd_i + g(x), x in [0, 1], where g is
   a closed-form quadratic (or two-piece quadratic) chosen by the
   sector of (g0, g1) = (f_{i-1} - fd_i, f_i - fd_i)

Reference: P. Hagan, G. West, "Interpolation Methods for Curve
Construction", Applied Mathematical Finance 13(2), 2006.
"""

from enum import Enum
from typing import Optional, Sequence, Tuple, Union
import math

import numpy as np

from ..conventions import Compounding, Continuous
from ..rates import Rate
from .curve import Curve
from .instruments import forward_start


class Sector(Enum):
    """Shape of the forward deviation g over an interval."""
    FLAT = "flat"   # g0 = g1 = 0
    I = "i"         # opposite signs, g1 within [-2g0, -g0/2]: single quadratic
    II = "ii"       # opposite signs, |g1| > 2|g0|: flat then quadratic
    III = "iii"     # opposite signs, |g1| < |g0|/2: quadratic then flat
    IV = "iv"       # same sign: two quadratics meeting at a minimum


def classify_sector(g0: float, g1: float) -> Sector:
    """
    Sector of the forward deviations at the interval ends.

    Args:
        g0: Deviation at the left end
        g1: Deviation at the right end

    Returns:
        Sector
    """
    if g0 == 0 and g1 == 0:
        return Sector.FLAT
    if (g0 < 0 and -0.5 * g0 <= g1 <= -2 * g0) or (g0 > 0 and -2 * g0 <= g1 <= -0.5 * g0):
        return Sector.I
    if (g0 < 0 and g1 > -2 * g0) or (g0 > 0 and g1 < -2 * g0):
        return Sector.II
    if (g0 > 0 and -0.5 * g0 < g1 < 0) or (g0 < 0 and 0 < g1 < -0.5 * g0):
        return Sector.III
    return Sector.IV


def forward_deviation(x: float, f_left: float, f_right: float, fd: float) -> float:
    """
    Forward deviation g(x) from the discrete forward within an interval.

    Args:
        x: Position in the interval, 0 (left knot) to 1 (right knot)
        f_left: Instantaneous forward at the left knot
        f_right: Instantaneous forward at the right knot
        fd: Discrete forward over the interval

    Returns:
        g(x); the instantaneous forward is fd + g(x)
    """
    g0 = f_left - fd
    g1 = f_right - fd
    if x <= 0:
        return g0
    if x >= 1:
        return g1

    sector = classify_sector(g0, g1)
    if sector is Sector.FLAT:
        return 0.0
    if sector is Sector.I:
        return g0 * (1 - 4 * x + 3 * x ** 2) + g1 * (-2 * x + 3 * x ** 2)
    if sector is Sector.II:
        eta = (g1 + 2 * g0) / (g1 - g0)
        if x <= eta:
            return g0
        return g0 + (g1 - g0) * ((x - eta) / (1 - eta)) ** 2
    if sector is Sector.III:
        eta = 3 * g1 / (g1 - g0)
        if x < eta:
            return g1 + (g0 - g1) * ((eta - x) / eta) ** 2
        return g1

    eta = g1 / (g1 + g0)
    a = -g0 * g1 / (g1 + g0)
    if x < eta:
        return a + (g0 - a) * ((eta - x) / eta) ** 2
    return a + (g1 - a) * ((x - eta) / (1 - eta)) ** 2


def forward_deviation_integral(x: float, f_left: float, f_right: float, fd: float) -> float:
    """
    Integral of g over [0, x], in closed form for each sector.

    The integral over the whole interval (x=1) is zero, which is what
    makes the curve reproduce the input zero rates at the knots.
    """
    if x <= 0:
        return 0.0
    g0 = f_left - fd
    g1 = f_right - fd

    sector = classify_sector(g0, g1)
    if sector is Sector.FLAT:
        return 0.0
    if sector is Sector.I:
        return g0 * (x - 2 * x ** 2 + x ** 3) + g1 * (-x ** 2 + x ** 3)
    if sector is Sector.II:
        eta = (g1 + 2 * g0) / (g1 - g0)
        if x <= eta:
            return g0 * x
        return g0 * x + (g1 - g0) * (x - eta) ** 3 / (3 * (1 - eta) ** 2)
    if sector is Sector.III:
        eta = 3 * g1 / (g1 - g0)
        if x < eta:
            return g1 * x + (g0 - g1) * (eta / 3) * (1 - ((eta - x) / eta) ** 3)
        return g1 * x + (g0 - g1) * eta / 3

    eta = g1 / (g1 + g0)
    a = -g0 * g1 / (g1 + g0)
    if x <= eta:
        return a * x + (g0 - a) * (eta / 3) * (1 - ((eta - x) / eta) ** 3)
    return a * x + (g0 - a) * eta / 3 + (g1 - a) * (x - eta) ** 3 / (3 * (1 - eta) ** 2)


def monotone_convex_forwards(
    rates: Sequence[float],
    times: Sequence[float]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Knot forwards for the Monotone Convex method.

    Args:
        rates: Continuous zero rates r_1..r_n
        times: Increasing times t_1..t_n (t_0 = 0 is implied)

    Returns:
        Tuple of (f, fd): instantaneous forwards at t_0..t_n (length
        n+1) and discrete forwards over each interval (length n)
    """
    r = np.asarray(rates, dtype=np.float64)
    t = np.asarray(times, dtype=np.float64)
    n = len(t)

    # Discrete forwards, with t_0 * r_0 = 0
    rt = t * r
    fd = np.empty(n)
    fd[0] = r[0]
    fd[1:] = np.diff(rt) / np.diff(t)

    # Interior knots t_1..t_{n-1}, weighted by the adjacent interval lengths
    tt = np.concatenate([[0.0], t])
    f = np.empty(n + 1)
    for i in range(1, n):
        left = tt[i] - tt[i - 1]
        right = tt[i + 1] - tt[i]
        f[i] = left / (tt[i + 1] - tt[i - 1]) * fd[i] + right / (tt[i + 1] - tt[i - 1]) * fd[i - 1]

    # Ends extrapolate from the unclamped interior values
    f[0] = fd[0] - 0.5 * (f[1] - fd[0])
    f[n] = fd[n - 1] - 0.5 * (f[n - 1] - fd[n - 1])

    f[0] = _collar(f[0], 0.0, 2 * fd[0])
    f[n] = _collar(f[n], 0.0, 2 * fd[n - 1])
    for i in range(1, n):
        f[i] = _collar(f[i], 0.0, 2 * min(fd[i - 1], fd[i]))

    return f, fd


def _collar(value: float, lo: float, hi: float) -> float:
    # Upper bound checked first: when hi < lo the value is set to hi
    if value > hi:
        return hi
    if value < lo:
        return lo
    return value


class MonotoneConvexCurve(Curve):
    """
    Monotone Convex yield curve.

    Attributes:
        rates: Continuous zero rates at the knots
        times: Knot times (strictly increasing, positive)
        f: Instantaneous forwards at 0, t_1, ..., t_n
        fd: Discrete forwards over each interval

    Beyond the last knot the forward is held flat at the last discrete
    forward.
    """

    def __init__(self, rates: Sequence[Union[Rate, float]], times: Sequence[float]):
        """
        Args:
            rates: Zero rates. Bare numbers are continuously compounded;
                Rates are converted to continuous.
            times: Knot times
        """
        if len(rates) != len(times):
            raise ValueError("Rates and times must have same length")
        if len(times) < 2:
            raise ValueError("Need at least 2 points for Monotone Convex interpolation")

        self.times = np.asarray(times, dtype=np.float64)
        if self.times[0] <= 0 or np.any(np.diff(self.times) <= 0):
            raise ValueError("Times must be positive and strictly increasing")

        self.rates = np.array([
            r.convert(Continuous()).value if isinstance(r, Rate) else float(r)
            for r in rates
        ])
        self.f, self.fd = monotone_convex_forwards(self.rates, self.times)

    @classmethod
    def from_quotes(cls, quotes: Sequence) -> "MonotoneConvexCurve":
        """
        Build from zero-coupon quotes (Cashflow instruments).

        Raises:
            ValueError: If a quote is not on a single cashflow
        """
        times, rates = [], []
        for q in quotes:
            flows = q.instrument.cashflows()
            if len(flows) != 1 or forward_start(q.instrument) > 0:
                raise ValueError("Monotone Convex curves take spot zero-coupon quotes only")
            cf = flows[0]
            times.append(cf.time)
            rates.append(-math.log(q.price / cf.amount) / cf.time)
        return cls(rates, times)

    def _locate(self, t: float) -> Tuple[int, float]:
        """Interval index i (0-based, covering (t_{i-1}, t_i]) and position x."""
        i = int(np.searchsorted(self.times, t, side='left'))
        start = self.times[i - 1] if i > 0 else 0.0
        return i, (t - start) / (self.times[i] - start)

    def instantaneous_forward(self, t: float, h: float = 1e-5) -> float:
        """Instantaneous forward fd_i + g(x)."""
        if t <= 0:
            return float(self.f[0])
        if t > self.times[-1]:
            return float(self.fd[-1])
        i, x = self._locate(t)
        return float(self.fd[i] + forward_deviation(x, self.f[i], self.f[i + 1], self.fd[i]))

    def _continuous_zero(self, t: float) -> float:
        if t <= 0:
            return float(self.f[0])
        if t > self.times[-1]:
            tn = self.times[-1]
            return float((tn * self.rates[-1] + (t - tn) * self.fd[-1]) / t)

        i, x = self._locate(t)
        start = self.times[i - 1] if i > 0 else 0.0
        accrued = start * self.rates[i - 1] if i > 0 else 0.0
        width = self.times[i] - start
        integral = forward_deviation_integral(x, self.f[i], self.f[i + 1], self.fd[i])
        return float((accrued + (t - start) * self.fd[i] + width * integral) / t)

    def zero(self, t: float, compounding: Optional[Compounding] = None) -> Rate:
        z = Rate(self._continuous_zero(t), Continuous())
        return z.convert(compounding or Continuous())

    def discount_factor(self, t: float) -> float:
        if t <= 0:
            return 1.0
        return math.exp(-self._continuous_zero(t) * t)

    def __repr__(self) -> str:
        return f"MonotoneConvexCurve(knots={len(self.times)}, max_maturity={self.times[-1]:g})"


__all__ = [
    "MonotoneConvexCurve",
    "Sector",
    "classify_sector",
    "forward_deviation",
    "forward_deviation_integral",
    "monotone_convex_forwards",
]
