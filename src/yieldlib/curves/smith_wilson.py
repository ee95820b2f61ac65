"""
Smith-Wilson yield curve.

Calibrates a kernel expansion around an ultimate forward rate (UFR) so
that a set of instruments reprices exactly, with a single linear solve:

    P(t) = exp(-ufr*t) * (1 + sum_i H(alpha, u_i, t) * qb_i)

where H is the Wilson kernel

    H(alpha, t1, t2) = alpha*min(t1,t2) + exp(-alpha*max(t1,t2)) * sinh(-alpha*min(t1,t2))

As t grows the kernel term flattens and the zero rate converges to
the UFR. Used for Solvency II (EIOPA) risk-free curves.

Calibration inputs:
- Zero-coupon quotes (identity cashflow matrix)
- Swap and bullet bond quotes (coupon schedule on a common time grid)
- Generic Quote objects (union of cashflow times), including forwards
- Times, cashflow matrix and prices directly
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging
import math

import numpy as np

from ..conventions import Compounding, Continuous
from ..rates import Rate
from .curve import SHORT_END, Curve
from .instruments import Quote, forward_start

logger = logging.getLogger(__name__)


def wilson_kernel(alpha: float, t1, t2) -> np.ndarray:
    """
    Wilson kernel H(alpha, t1, t2), broadcast over arrays.

    Evaluated with the smaller time in the sinh term.
    """
    t1 = np.asarray(t1, dtype=np.float64)
    t2 = np.asarray(t2, dtype=np.float64)
    tmin = np.minimum(t1, t2)
    tmax = np.maximum(t1, t2)
    return alpha * tmin + np.exp(-alpha * tmax) * np.sinh(-alpha * tmin)


def _check_frequency(frequency) -> int:
    if frequency <= 0 or int(frequency) != frequency:
        raise ValueError(f"Frequency must be a positive integer, got {frequency}")
    return int(frequency)


@dataclass(frozen=True)
class ZeroCouponQuote:
    """Price of a zero-coupon bond paying 1 at maturity."""
    price: float
    maturity: float


@dataclass(frozen=True)
class SwapQuote:
    """
    Par swap rate; the fixed leg pays yield_/frequency per period and the
    swap is priced at 1.
    """
    yield_: float
    maturity: float
    frequency: int

    def __post_init__(self):
        _check_frequency(self.frequency)

    @property
    def price(self) -> float:
        return 1.0


@dataclass(frozen=True)
class BulletBondQuote:
    """Bullet bond paying yield_/frequency per period, at a given price."""
    yield_: float
    price: float
    maturity: float
    frequency: int

    def __post_init__(self):
        _check_frequency(self.frequency)


def timepoints(quotes: Sequence) -> np.ndarray:
    """
    Common payment time grid for swap or bullet bond quotes.

    The grid step is 1/lcm(frequencies); maturities are rounded down to
    the grid and the grid runs to the largest of them.
    """
    times, _ = _coupon_grid(quotes)
    return times


def cashflow_matrix(quotes: Sequence) -> np.ndarray:
    """
    Cashflows of swap or bullet bond quotes on the common time grid.

    Returns:
        Matrix with one row per grid time and one column per quote
    """
    _, matrix = _coupon_grid(quotes)
    return matrix


def _coupon_grid(quotes: Sequence) -> Tuple[np.ndarray, np.ndarray]:
    frequencies = [_check_frequency(q.frequency) for q in quotes]
    steps_per_year = math.lcm(*frequencies)

    # Work in integer grid steps so schedules line up exactly
    last_step = [int(math.floor(q.maturity * steps_per_year + 1e-9)) for q in quotes]
    n_steps = max(last_step)
    if n_steps < 1:
        raise ValueError("Maturities must be at least one payment period")

    matrix = np.zeros((n_steps, len(quotes)))
    for j, (q, f, m) in enumerate(zip(quotes, frequencies, last_step)):
        period = steps_per_year // f
        for k in range(m, 0, -period):
            matrix[k - 1, j] = q.yield_ / f
        matrix[m - 1, j] += 1.0

    times = np.arange(1, n_steps + 1) / steps_per_year
    return times, matrix


class SmithWilsonCurve(Curve):
    """
    Smith-Wilson curve.

    Attributes:
        u: Calibration times
        qb: Calibrated kernel weights (one per time)
        ufr: Ultimate forward rate (continuously compounded)
        alpha: Convergence speed to the UFR
    """

    def __init__(
        self,
        u: Sequence[float],
        qb: Sequence[float],
        ufr: float,
        alpha: float
    ):
        u = np.asarray(u, dtype=np.float64)
        qb = np.asarray(qb, dtype=np.float64)
        if len(u) != len(qb):
            raise ValueError(f"Length of u ({len(u)}) and qb ({len(qb)}) must match")
        if alpha <= 0:
            raise ValueError(f"alpha must be positive, got {alpha}")
        self.u = u
        self.qb = qb
        self.ufr = ufr
        self.alpha = alpha

    @classmethod
    def calibrate(
        cls,
        times: Sequence[float],
        cashflows,
        prices: Sequence[float],
        ufr: float,
        alpha: float
    ) -> "SmithWilsonCurve":
        """
        Calibrate to instruments given as a cashflow matrix.

        Solves (Q' H Q) b = p - q with Q = diag(exp(-ufr*t)) C and
        q = column sums of Q; then qb = Q b.

        Args:
            times: Cashflow times (rows of the matrix)
            cashflows: Matrix, one row per time and one column per instrument
            prices: Instrument prices
            ufr: Ultimate forward rate (continuous)
            alpha: Convergence speed

        Returns:
            SmithWilsonCurve repricing every instrument
        """
        times = np.asarray(times, dtype=np.float64)
        C = np.atleast_2d(np.asarray(cashflows, dtype=np.float64))
        p = np.asarray(prices, dtype=np.float64)
        if C.shape != (len(times), len(p)):
            raise ValueError(
                f"Cashflow matrix shape {C.shape} does not match "
                f"{len(times)} times and {len(p)} prices"
            )

        Q = np.exp(-ufr * times)[:, None] * C
        q = Q.sum(axis=0)
        H = wilson_kernel(alpha, times[:, None], times[None, :])
        b = np.linalg.solve(Q.T @ H @ Q, p - q)

        logger.debug("Calibrated Smith-Wilson curve to %d instruments over %d times", len(p), len(times))
        return cls(times, Q @ b, ufr, alpha)

    @classmethod
    def from_zero_coupon_quotes(
        cls,
        quotes: Sequence[ZeroCouponQuote],
        ufr: float,
        alpha: float
    ) -> "SmithWilsonCurve":
        """Calibrate to zero-coupon prices (identity cashflow matrix)."""
        times = [q.maturity for q in quotes]
        return cls.calibrate(times, np.eye(len(quotes)), [q.price for q in quotes], ufr, alpha)

    @classmethod
    def from_swap_quotes(
        cls,
        quotes: Sequence[SwapQuote],
        ufr: float,
        alpha: float
    ) -> "SmithWilsonCurve":
        """Calibrate to par swap rates, each priced at 1."""
        times, matrix = _coupon_grid(quotes)
        return cls.calibrate(times, matrix, np.ones(len(quotes)), ufr, alpha)

    @classmethod
    def from_bullet_bond_quotes(
        cls,
        quotes: Sequence[BulletBondQuote],
        ufr: float,
        alpha: float
    ) -> "SmithWilsonCurve":
        """Calibrate to bullet bond prices."""
        times, matrix = _coupon_grid(quotes)
        return cls.calibrate(times, matrix, [q.price for q in quotes], ufr, alpha)

    @classmethod
    def from_quotes(
        cls,
        quotes: Sequence[Quote],
        ufr: float,
        alpha: float
    ) -> "SmithWilsonCurve":
        """
        Calibrate to generic quotes.

        The time grid is the union of all instruments' cashflow times.
        A Forward quote becomes a zero-price contract: its cashflows less
        the quoted price paid at its start.
        """
        flows, prices = [], []
        for q in quotes:
            fl = [(cf.amount, cf.time) for cf in q.instrument.cashflows()]
            start = forward_start(q.instrument)
            if start > 0:
                fl.append((-q.price, start))
                prices.append(0.0)
            else:
                prices.append(q.price)
            flows.append(fl)

        times = sorted({round(t, 12) for fl in flows for _, t in fl})
        index = {t: i for i, t in enumerate(times)}

        matrix = np.zeros((len(times), len(quotes)))
        for j, fl in enumerate(flows):
            for amount, t in fl:
                matrix[index[round(t, 12)], j] += amount

        return cls.calibrate(times, matrix, prices, ufr, alpha)

    def _kernel_sum(self, t: float) -> float:
        if len(self.u) == 0:
            return 0.0
        return float(wilson_kernel(self.alpha, self.u, t) @ self.qb)

    def discount_factor(self, t: float) -> float:
        return math.exp(-self.ufr * t) * (1.0 + self._kernel_sum(t))

    def zero(self, t: float, compounding: Optional[Compounding] = None) -> Rate:
        """Zero rate ufr - ln(1 + H.qb)/t; read at SHORT_END for t=0."""
        t = max(t, SHORT_END)
        z = Rate(self.ufr - math.log1p(self._kernel_sum(t)) / t, Continuous())
        return z.convert(compounding or Continuous())

    def __repr__(self) -> str:
        return f"SmithWilsonCurve(n={len(self.u)}, ufr={self.ufr:.6g}, alpha={self.alpha:.6g})"


__all__ = [
    "SmithWilsonCurve",
    "wilson_kernel",
    "ZeroCouponQuote",
    "SwapQuote",
    "BulletBondQuote",
    "timepoints",
    "cashflow_matrix",
]
