"""
Curves package - yield curve construction and manipulation.

Provides:
- Curve: Discount curve protocol with derived zero, forward and par rates
- bootstrap, par_curve, cmt_curve, ...: Zero-rate spline bootstrapping
- SmithWilsonCurve: Kernel curve converging to an ultimate forward rate
- MonotoneConvexCurve: Hagan-West forward-preserving interpolation
- NelsonSiegelCurve, NelsonSiegelSvenssonCurve: Parametric curve fitting
- CompositeCurve: Arithmetic between curves
"""

from .curve import (
    Curve,
    ConstantCurve,
    ForwardStartingCurve,
    StepCurve,
    SHORT_END,
    coupon_times,
    internal_rate_of_return,
)
from .interpolation import (
    Interpolator,
    LinearInterpolator,
    SplineInterpolator,
    FunctionInterpolator,
    create_interpolator,
)
from .instruments import (
    Cashflow,
    Bond,
    Forward,
    forward_start,
    Quote,
    present_value,
    repricing_errors,
    zcb_price,
    zcb_yield,
    par_yield,
    par_swap_yield,
    cmt_yield,
    ois_yield,
    forward_yields,
    forward_yield,
)
from .bootstrap import (
    BootstrapCurve,
    BootstrapPoint,
    bootstrap,
    bootstrap_rates,
    zero_curve,
    par_curve,
    cmt_curve,
    ois_curve,
    forward_curve,
)
from .smith_wilson import (
    SmithWilsonCurve,
    ZeroCouponQuote,
    SwapQuote,
    BulletBondQuote,
    wilson_kernel,
    timepoints,
    cashflow_matrix,
)
from .monotone_convex import (
    MonotoneConvexCurve,
    Sector,
    classify_sector,
    forward_deviation,
    forward_deviation_integral,
    monotone_convex_forwards,
)
from .combination import CompositeCurve, combine
from .fit import FitResult, fit
from .nss import NelsonSiegelCurve, NelsonSiegelSvenssonCurve

__all__ = [
    "Curve",
    "ConstantCurve",
    "ForwardStartingCurve",
    "StepCurve",
    "SHORT_END",
    "coupon_times",
    "internal_rate_of_return",
    "Interpolator",
    "LinearInterpolator",
    "SplineInterpolator",
    "FunctionInterpolator",
    "create_interpolator",
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
    "BootstrapCurve",
    "BootstrapPoint",
    "bootstrap",
    "bootstrap_rates",
    "zero_curve",
    "par_curve",
    "cmt_curve",
    "ois_curve",
    "forward_curve",
    "SmithWilsonCurve",
    "ZeroCouponQuote",
    "SwapQuote",
    "BulletBondQuote",
    "wilson_kernel",
    "timepoints",
    "cashflow_matrix",
    "MonotoneConvexCurve",
    "Sector",
    "classify_sector",
    "forward_deviation",
    "forward_deviation_integral",
    "monotone_convex_forwards",
    "CompositeCurve",
    "combine",
    "FitResult",
    "fit",
    "NelsonSiegelCurve",
    "NelsonSiegelSvenssonCurve",
]
