"""
YieldLib: Interest Rate Term Structure Library

A modular library for:
- Representing interest rates with their compounding conventions
- Building yield curves from market quotes (bootstrapped splines,
  Smith-Wilson, Monotone Convex, Nelson-Siegel-Svensson)
- Deriving discount factors, zero, forward and par rates from any curve
- Combining curves arithmetically (risk-free plus spread, scaling)

Times are year fractions from the valuation date; there is no calendar.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import Periodic, Continuous, Compounding, QuoteConvention
from .rates import Rate, as_rate, convert, discount, accumulation
from .solvers import SolverSettings, ConvergenceError, DEFAULT_SOLVER

# Curves
from .curves import (
    Curve,
    ConstantCurve,
    ForwardStartingCurve,
    StepCurve,
    BootstrapCurve,
    SmithWilsonCurve,
    MonotoneConvexCurve,
    CompositeCurve,
    NelsonSiegelCurve,
    NelsonSiegelSvenssonCurve,
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
    bootstrap,
    bootstrap_rates,
    zero_curve,
    par_curve,
    cmt_curve,
    ois_curve,
    forward_curve,
    combine,
    fit,
    FitResult,
)

# Reporting
from .reporting import curve_table, repricing_table, export_to_csv

__all__ = [
    # Version
    "__version__",
    # Conventions
    "Periodic",
    "Continuous",
    "Compounding",
    "QuoteConvention",
    # Rates
    "Rate",
    "as_rate",
    "convert",
    "discount",
    "accumulation",
    # Solvers
    "SolverSettings",
    "ConvergenceError",
    "DEFAULT_SOLVER",
    # Curves
    "Curve",
    "ConstantCurve",
    "ForwardStartingCurve",
    "StepCurve",
    "BootstrapCurve",
    "SmithWilsonCurve",
    "MonotoneConvexCurve",
    "CompositeCurve",
    "NelsonSiegelCurve",
    "NelsonSiegelSvenssonCurve",
    # Instruments and quotes
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
    # Construction
    "bootstrap",
    "bootstrap_rates",
    "zero_curve",
    "par_curve",
    "cmt_curve",
    "ois_curve",
    "forward_curve",
    "combine",
    "fit",
    "FitResult",
    # Reporting
    "curve_table",
    "repricing_table",
    "export_to_csv",
]
