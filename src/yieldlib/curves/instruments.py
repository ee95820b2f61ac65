"""
Calibration instruments and market quotes.

A Quote pairs an observed price with an instrument whose cashflows
are known:
- Cashflow: a single payment (zero-coupon bond)
- Bond: fixed coupon bond paying coupon_rate/frequency per period
  plus principal of 1 at maturity
- Forward: another instrument starting at a future time

Quote adapters translate a market convention (zero-coupon price or
yield, par yield, CMT, OIS, forward yields) into Quotes. Each adapter
accepts a scalar yield and maturity, or sequences of both (maturities
default to 1, 2, ..., n).
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union
import functools

import numpy as np

from ..conventions import Periodic, QuoteConvention
from ..rates import Rate, as_rate
from .curve import Curve, coupon_times


@dataclass(frozen=True)
class Cashflow:
    """
    A single payment.

    Attributes:
        amount: Payment amount
        time: Payment time (years)
    """
    amount: float
    time: float

    @property
    def maturity(self) -> float:
        return self.time

    def cashflows(self) -> List["Cashflow"]:
        return [self]


@dataclass(frozen=True)
class Bond:
    """
    Fixed coupon bullet bond with unit principal.

    Coupons of coupon_rate/frequency are paid at
    coupon_times(maturity, frequency): every 1/frequency years counting
    back from maturity, the first payment falling in (0, 1/frequency].
    A zero coupon_rate gives a single payment of 1 at maturity.

    Attributes:
        coupon_rate: Annual coupon rate (decimal)
        frequency: Coupons per year
        maturity: Maturity (years)
    """
    coupon_rate: float
    frequency: float
    maturity: float

    def __post_init__(self):
        if self.frequency <= 0:
            raise ValueError(f"Bond frequency must be positive, got {self.frequency}")
        if self.maturity <= 0:
            raise ValueError(f"Bond maturity must be positive, got {self.maturity}")

    def cashflows(self) -> List[Cashflow]:
        """Coupon and principal payments in time order."""
        if self.coupon_rate == 0:
            return [Cashflow(1.0, self.maturity)]

        coupon = self.coupon_rate / self.frequency
        times = coupon_times(self.maturity, self.frequency)
        flows = [Cashflow(coupon, float(t)) for t in times]
        flows[-1] = Cashflow(coupon + 1.0, flows[-1].time)
        return flows


@dataclass(frozen=True)
class Forward:
    """
    Instrument starting at a future time.

    The inner instrument's times are relative to start: Forward(1.0,
    Cashflow(1.0, 3.0)) pays 1.0 at time 4.0. A quote on a Forward is a
    price paid at start, so its value is discounted back to start only.

    Attributes:
        start: Start time (years)
        instrument: Cashflow or Bond, timed from start
    """
    start: float
    instrument: Union[Cashflow, Bond]

    def __post_init__(self):
        if self.start < 0:
            raise ValueError(f"Forward start must be non-negative, got {self.start}")

    @property
    def maturity(self) -> float:
        return self.start + self.instrument.maturity

    def cashflows(self) -> List[Cashflow]:
        """Inner cashflows moved to absolute times."""
        return [Cashflow(cf.amount, self.start + cf.time) for cf in self.instrument.cashflows()]


Instrument = Union[Cashflow, Bond, Forward]


def forward_start(instrument: Instrument) -> float:
    """Time the instrument's price is paid: its start for a Forward, else 0."""
    return instrument.start if isinstance(instrument, Forward) else 0.0


@dataclass(frozen=True)
class Quote:
    """
    Observed price of an instrument.

    Attributes:
        price: Quoted price (per unit principal)
        instrument: Cashflow, Bond or Forward
    """
    price: float
    instrument: Instrument

    @property
    def maturity(self) -> float:
        return self.instrument.maturity


def present_value(curve: Curve, instrument: Instrument) -> float:
    """
    Present value of an instrument's cashflows under a curve.

    A Forward is valued at its start, where its quoted price is paid.

    Args:
        curve: Discount curve
        instrument: Cashflow, Bond or Forward

    Returns:
        Sum of discounted cashflows
    """
    start = forward_start(instrument)
    return float(sum(cf.amount * curve.discount(start, cf.time) for cf in instrument.cashflows()))


def repricing_errors(curve: Curve, quotes: Sequence[Quote]) -> np.ndarray:
    """
    Model price minus quoted price for each quote.

    Returns:
        Array of errors, in quote order
    """
    return np.array([present_value(curve, q.instrument) - q.price for q in quotes])


def _is_sequence(x) -> bool:
    return isinstance(x, (list, tuple, np.ndarray))


def _vectorized(adapter):
    """Let a scalar quote adapter also map over sequences of yields."""

    @functools.wraps(adapter)
    def wrapper(value, maturity=None, **kwargs):
        if not _is_sequence(value):
            if maturity is None:
                raise ValueError("maturity is required for a single quote")
            return adapter(value, maturity, **kwargs)

        values = list(value)
        maturities = range(1, len(values) + 1) if maturity is None else list(maturity)
        if len(values) != len(maturities):
            raise ValueError("Yields and maturities must have same length")
        return [adapter(v, m, **kwargs) for v, m in zip(values, maturities)]

    return wrapper


@_vectorized
def zcb_price(price: float, maturity: float) -> Quote:
    """Quote for a zero-coupon bond from its price (a discount factor)."""
    return Quote(float(price), Cashflow(1.0, maturity))


@_vectorized
def zcb_yield(yield_: Union[Rate, float], maturity: float) -> Quote:
    """
    Quote for a zero-coupon bond from its zero (spot) yield.

    Bare numbers are annually compounded, Periodic(1).
    """
    rate = as_rate(yield_, Periodic(1))
    return Quote(rate.discount(maturity), Cashflow(1.0, maturity))


@_vectorized
def par_yield(
    yield_: Union[Rate, float],
    maturity: float,
    frequency: Optional[int] = None
) -> Quote:
    """
    Quote for a bond priced at par from its par yield.

    Coupons are semiannual unless a frequency is given; bare numbers are
    bond-equivalent at that frequency (Periodic(2) by default). A Rate
    with periodic compounding sets the coupon frequency itself.
    """
    if isinstance(yield_, Rate) and isinstance(yield_.compounding, Periodic):
        frequency = yield_.compounding.frequency
    elif frequency is None:
        frequency = QuoteConvention.par().coupon_frequency

    compounding = Periodic(frequency)
    coupon = as_rate(yield_, compounding).convert(compounding)
    return Quote(1.0, Bond(coupon.value, frequency, maturity))


@_vectorized
def par_swap_yield(
    yield_: Union[Rate, float],
    maturity: float,
    frequency: Optional[int] = None
) -> Quote:
    """
    Quote for the fixed leg of a par swap.

    Quarterly coupons by default; otherwise as par_yield.
    """
    if frequency is None:
        frequency = QuoteConvention.par_swap().coupon_frequency
    return par_yield(yield_, maturity, frequency=frequency)


def _convention_quote(yield_: Union[Rate, float], maturity: float, convention: QuoteConvention) -> Quote:
    if convention.is_zero_coupon(maturity):
        rate = as_rate(yield_, Periodic(1))
        return Quote(rate.discount(maturity), Bond(0.0, 1, maturity))

    compounding = convention.compounding
    coupon = as_rate(yield_, compounding).convert(compounding)
    return Quote(1.0, Bond(coupon.value, convention.coupon_frequency, maturity))


@_vectorized
def cmt_yield(yield_: Union[Rate, float], maturity: float) -> Quote:
    """
    Quote from a constant maturity treasury yield.

    Maturities up to 1Y are zero-coupon (bare numbers annual, Periodic(1));
    longer maturities are semiannual par bonds (bare numbers Periodic(2)).
    """
    return _convention_quote(yield_, maturity, QuoteConvention.cmt())


@_vectorized
def ois_yield(yield_: Union[Rate, float], maturity: float) -> Quote:
    """
    Quote from an OIS rate.

    Maturities up to 1Y settle once (bare numbers annual, Periodic(1));
    longer maturities settle quarterly (bare numbers Periodic(4)).
    """
    return _convention_quote(yield_, maturity, QuoteConvention.ois())


def forward_yields(
    yields: Sequence[Union[Rate, float]],
    times: Optional[Sequence[float]] = None
) -> List[Quote]:
    """
    Zero-coupon quotes from a strip of forward rates.

    yields[i] applies from times[i-1] (0 for the first) to times[i].
    Bare numbers are annually compounded, Periodic(1).

    Args:
        yields: Forward rates
        times: Period end times (default 1, 2, ..., n)

    Returns:
        List of zero-coupon quotes priced at the chained discount factors
    """
    times = list(range(1, len(yields) + 1)) if times is None else list(times)
    if len(times) != len(yields):
        raise ValueError("Yields and times must have same length")

    quotes = []
    df = 1.0
    prior = 0.0
    for y, t in zip(yields, times):
        df *= as_rate(y, Periodic(1)).discount(t - prior)
        prior = t
        quotes.append(Quote(df, Cashflow(1.0, t)))
    return quotes


def forward_yield(
    yield_: Union[Rate, float],
    start: float = 0.0,
    duration: float = 1.0
) -> Quote:
    """
    Quote for a forward-starting zero-coupon bond from its forward rate.

    The bond pays 1 at start + duration and is priced at start at the
    forward discount factor. Bare numbers are annually compounded,
    Periodic(1).

    Args:
        yield_: Forward rate from start to start + duration
        start: Start time (years)
        duration: Length of the forward period (years)

    Returns:
        Quote on a Forward instrument
    """
    rate = as_rate(yield_, Periodic(1))
    return Quote(rate.discount(duration), Forward(start, Cashflow(1.0, duration)))


__all__ = [
    "Cashflow",
    "Bond",
    "Forward",
    "forward_start",
    "Quote",
    "present_value",
    "repricing_errors",
    "zcb_price",
    "zcb_yield",
    "par_yield",
    "par_swap_yield",
    "cmt_yield",
    "ois_yield",
    "forward_yields",
    "forward_yield",
]
