"""
Curve bootstrapping engine.

Sequential bootstrap of a zero-rate spline curve:
1. Sort calibration points by maturity
2. Solve one discount factor per maturity, folding over the points
   with the already-solved (maturity, discount) pairs as state:
   - zero-coupon points are solved directly from their price
   - coupon-bearing points are solved by Newton's method so that the
     candidate curve (solved points plus the trial value) reprices them
3. Convert the discount factors to continuous zero rates and fit the
   final spline, anchored at t=0 by the first zero rate

Inputs are either market quotes (bootstrap) or rates with settlement
periods (bootstrap_rates); the rate-vector constructors zero_curve,
par_curve, cmt_curve, ois_curve and forward_curve build on these.
"""

from dataclasses import dataclass
from functools import partial, reduce
from typing import Callable, Optional, Sequence, Tuple, Union
import logging
import math

import numpy as np

from ..conventions import Compounding, Continuous, Periodic
from ..rates import Rate, as_rate
from ..solvers import SolverSettings, newton_solve
from .curve import Curve
from .instruments import (
    Bond,
    Forward,
    Quote,
    forward_start,
    cmt_yield,
    forward_yields,
    ois_yield,
)
from .interpolation import Interpolator, create_interpolator

logger = logging.getLogger(__name__)

# Discount factors are floored here before taking logs
MIN_DISCOUNT = 1e-5

Interpolation = Union[str, Callable]


@dataclass(frozen=True)
class BootstrapPoint:
    """
    One maturity to solve.

    Attributes:
        maturity: Time of the unknown discount factor
        cashflows: (amount, time) pairs of the instrument
        target: Present value the curve must reproduce
        guess: Initial discount factor for the Newton solve
        rate: Rate recorded on the curve for this point
        start: Time the target is paid (0 unless forward starting)
    """
    maturity: float
    cashflows: Tuple[Tuple[float, float], ...]
    target: float
    guess: float
    rate: Optional[Rate] = None
    start: float = 0.0

    @property
    def is_zero_coupon(self) -> bool:
        return (self.start == 0 and len(self.cashflows) == 1
                and math.isclose(self.cashflows[0][1], self.maturity))


class BootstrapCurve(Curve):
    """
    Zero-rate spline curve from a bootstrap.

    discount(t) = exp(-zero_fn(t) * t)

    Attributes:
        rates: Rate per maturity (quoted rates, or solved continuous zeros)
        maturities: Knot maturities
        zero_fn: Interpolator mapping time to continuous zero rate
    """

    def __init__(self, rates: Sequence[Rate], maturities: Sequence[float], zero_fn: Interpolator):
        self.rates = list(rates)
        self.maturities = np.asarray(maturities, dtype=np.float64)
        self.zero_fn = zero_fn

    def discount_factor(self, t: float) -> float:
        if t <= 0:
            return 1.0
        return math.exp(-self.zero_fn(t) * t)

    def zero(self, t: float, compounding: Optional[Compounding] = None) -> Rate:
        z = Rate(self.zero_fn(max(t, 0.0)), Continuous())
        return z.convert(compounding or Continuous())

    def instantaneous_forward(self, t: float, h: float = 1e-5) -> float:
        """f(t) = z(t) + t * dz/dt"""
        return self.zero_fn(t) + t * self.zero_fn.derivative(t)

    def __repr__(self) -> str:
        return f"BootstrapCurve(knots={len(self.maturities)}, max_maturity={self.maturities[-1]:g})"


def _zero_spline(
    knots: Sequence[Tuple[float, float]],
    interpolation: Interpolation
) -> Tuple[np.ndarray, np.ndarray, Interpolator]:
    """Fit the zero-rate spline over (maturity, discount) knots."""
    times = np.array([t for t, _ in knots], dtype=np.float64)
    dfs = np.array([d for _, d in knots], dtype=np.float64)
    zeros = -np.log(np.maximum(dfs, MIN_DISCOUNT)) / times

    zero_fn = create_interpolator(interpolation)
    zero_fn.fit(np.concatenate([[0.0], times]), np.concatenate([[zeros[0]], zeros]))
    return times, zeros, zero_fn


def _spline_discount(zero_fn: Interpolator, t: float) -> float:
    return 1.0 if t <= 0 else math.exp(-zero_fn(t) * t)


def _bootstrap_step(
    solved: Tuple[Tuple[float, float], ...],
    point: BootstrapPoint,
    interpolation: Interpolation,
    settings: Optional[SolverSettings],
) -> Tuple[Tuple[float, float], ...]:
    """Solve the discount factor at point.maturity given the solved points."""
    if point.is_zero_coupon:
        df = point.target / point.cashflows[0][0]
    else:
        def residual(v):
            _, _, zero_fn = _zero_spline(solved + ((point.maturity, v),), interpolation)
            pv = sum(a * _spline_discount(zero_fn, t) for a, t in point.cashflows)
            return pv - point.target * _spline_discount(zero_fn, point.start)

        df = newton_solve(
            residual,
            point.guess,
            settings=settings,
            label=f"discount factor at t={point.maturity:g}"
        )

    logger.debug("Bootstrapped t=%g: discount factor %.12g", point.maturity, df)
    return solved + ((point.maturity, df),)


def _fold(
    points: Sequence[BootstrapPoint],
    interpolation: Interpolation,
    settings: Optional[SolverSettings],
) -> BootstrapCurve:
    if not points:
        raise ValueError("Need at least one calibration point")

    points = sorted(points, key=lambda p: p.maturity)
    maturities = np.array([p.maturity for p in points])
    if maturities[0] <= 0:
        raise ValueError("Maturities must be positive")
    if np.any(np.diff(maturities) <= 0):
        raise ValueError("Maturities must be distinct")

    step = partial(_bootstrap_step, interpolation=interpolation, settings=settings)
    knots = reduce(step, points, ())

    times, zeros, zero_fn = _zero_spline(knots, interpolation)
    rates = [p.rate if p.rate is not None else Rate(float(z), Continuous()) for p, z in zip(points, zeros)]
    return BootstrapCurve(rates, times, zero_fn)


def _quote_point(quote: Quote) -> BootstrapPoint:
    instrument = quote.instrument
    start = forward_start(instrument)
    cashflows = tuple((cf.amount, cf.time) for cf in instrument.cashflows())
    inner = instrument.instrument if isinstance(instrument, Forward) else instrument

    if isinstance(inner, Bond) and inner.coupon_rate != 0:
        guess = Rate(inner.coupon_rate, Periodic(inner.frequency)).discount(instrument.maturity)
    else:
        # a forward price covers maturity - start; stretch it back to 0
        span = instrument.maturity - start
        guess = (quote.price / cashflows[-1][0]) ** (instrument.maturity / span)

    return BootstrapPoint(instrument.maturity, cashflows, quote.price, guess, start=start)


def bootstrap(
    quotes: Sequence[Quote],
    interpolation: Interpolation = "quadratic",
    settings: Optional[SolverSettings] = None
) -> BootstrapCurve:
    """
    Bootstrap a zero-rate spline curve from quotes.

    Args:
        quotes: Calibration quotes (any order; one per maturity)
        interpolation: "quadratic" (default), "linear", "cubic", or a
            callable (xs, ys) -> (x -> y) over continuous zero rates
        settings: Newton settings for coupon-bearing instruments

    Returns:
        BootstrapCurve repricing every quote
    """
    return _fold([_quote_point(q) for q in quotes], interpolation, settings)


def bootstrap_rates(
    rates: Sequence[Union[Rate, float]],
    maturities: Sequence[float],
    settlement_periods: Optional[Sequence[Optional[float]]] = None,
    interpolation: Interpolation = "quadratic",
    settings: Optional[SolverSettings] = None,
    default_compounding: Compounding = Periodic(1)
) -> BootstrapCurve:
    """
    Bootstrap from quoted rates and their settlement periods.

    A period of None means the rate settles once, at maturity. A period
    p means coupons of rate * p at p, 2p, ..., maturity plus principal
    at maturity; the target is the value of that stream discounted at
    the quoted rate itself.

    Args:
        rates: Quoted rates (bare numbers use default_compounding)
        maturities: Maturities (years)
        settlement_periods: Period lengths, None for zero coupon
            (default all None)
        interpolation: Interpolation over continuous zero rates
        settings: Newton settings
        default_compounding: Compounding for bare numbers (default annual)

    Returns:
        BootstrapCurve with the quoted rates recorded
    """
    if len(rates) != len(maturities):
        raise ValueError("Rates and maturities must have same length")
    if settlement_periods is None:
        settlement_periods = [None] * len(rates)
    if len(settlement_periods) != len(rates):
        raise ValueError("Settlement periods and rates must have same length")

    points = []
    for r, m, period in zip(rates, maturities, settlement_periods):
        rate = as_rate(r, default_compounding)
        if period is None:
            cashflows = ((1.0, m),)
        else:
            n = int(math.floor(m / period + 1e-9))
            times = [period * k for k in range(1, n + 1)]
            if not times or not math.isclose(times[-1], m):
                times.append(m)
            amounts = [rate.value * period] * len(times)
            amounts[-1] += 1.0
            cashflows = tuple(zip(amounts, times))

        target = sum(a * rate.discount(t) for a, t in cashflows)
        points.append(BootstrapPoint(m, cashflows, target, rate.discount(m), rate))

    return _fold(points, interpolation, settings)


def zero_curve(
    rates: Sequence[Union[Rate, float]],
    maturities: Optional[Sequence[float]] = None,
    interpolation: Interpolation = "quadratic"
) -> BootstrapCurve:
    """
    Curve through zero (spot) rates.

    Bare numbers are annually compounded, Periodic(1). Maturities
    default to 1, 2, ..., n.
    """
    maturities = list(range(1, len(rates) + 1)) if maturities is None else maturities
    return bootstrap_rates(rates, maturities, interpolation=interpolation)


def par_curve(
    rates: Sequence[Union[Rate, float]],
    maturities: Optional[Sequence[float]] = None,
    interpolation: Interpolation = "quadratic",
    settings: Optional[SolverSettings] = None
) -> BootstrapCurve:
    """
    Curve from par yields.

    Bare numbers are bond-equivalent semiannual yields, Periodic(2).
    Maturities up to 1Y settle once; longer maturities pay coupons at
    the frequency of each rate's compounding.
    """
    maturities = list(range(1, len(rates) + 1)) if maturities is None else maturities
    rates = [as_rate(r, Periodic(2)) for r in rates]

    periods = []
    for r, m in zip(rates, maturities):
        if m <= 1:
            periods.append(None)
        elif isinstance(r.compounding, Periodic):
            periods.append(1.0 / r.compounding.frequency)
        else:
            raise ValueError("Par yields beyond 1Y need periodic compounding")

    return bootstrap_rates(rates, maturities, periods, interpolation, settings)


def cmt_curve(
    rates: Sequence[Union[Rate, float]],
    maturities: Optional[Sequence[float]] = None,
    interpolation: Interpolation = "quadratic",
    settings: Optional[SolverSettings] = None
) -> BootstrapCurve:
    """Curve from constant maturity treasury yields (see cmt_yield)."""
    return bootstrap(cmt_yield(list(rates), maturities), interpolation, settings)


def ois_curve(
    rates: Sequence[Union[Rate, float]],
    maturities: Optional[Sequence[float]] = None,
    interpolation: Interpolation = "quadratic",
    settings: Optional[SolverSettings] = None
) -> BootstrapCurve:
    """Curve from OIS rates (see ois_yield)."""
    return bootstrap(ois_yield(list(rates), maturities), interpolation, settings)


def forward_curve(
    rates: Sequence[Union[Rate, float]],
    maturities: Optional[Sequence[float]] = None,
    interpolation: Interpolation = "quadratic"
) -> BootstrapCurve:
    """Curve from a strip of forward rates (see forward_yields)."""
    return bootstrap(forward_yields(rates, maturities), interpolation)


__all__ = [
    "BootstrapCurve",
    "BootstrapPoint",
    "MIN_DISCOUNT",
    "bootstrap",
    "bootstrap_rates",
    "zero_curve",
    "par_curve",
    "cmt_curve",
    "ois_curve",
    "forward_curve",
]
