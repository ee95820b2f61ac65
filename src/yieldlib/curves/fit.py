"""
Least-squares fitting of parametric curves to quotes.

A model is fitted by minimising sum(loss(PV - price)) over its
parameter vector. The local optimiser is L-BFGS-B with parameter bounds;
when it fails, or leaves a large residual, differential evolution is
tried over the same bounds and the better result is kept.

Supported models:
- ConstantCurve (one parameter, the annual rate)
- NelsonSiegelCurve and NelsonSiegelSvenssonCurve, or any class with
  from_array, bounds and initial_guess
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import math

import numpy as np
from scipy.optimize import OptimizeResult, differential_evolution, minimize

from .curve import ConstantCurve, Curve
from .instruments import Quote, forward_start, repricing_errors

logger = logging.getLogger(__name__)

Bounds = List[Tuple[float, float]]


def squared(x: float) -> float:
    return x * x


def minimize_with_fallback(
    objective: Callable[[np.ndarray], float],
    x0: np.ndarray,
    bounds: Bounds,
    fallback_threshold: float = 1e-6,
    seed: int = 42
) -> OptimizeResult:
    """
    Minimise with L-BFGS-B, falling back to differential evolution.

    Args:
        objective: Function of the parameter vector
        x0: Starting parameters
        bounds: (low, high) per parameter
        fallback_threshold: Objective value above which the global
            search is also tried
        seed: Seed for differential evolution

    Returns:
        scipy OptimizeResult of the better of the two searches
    """
    result = minimize(
        objective,
        x0,
        method="L-BFGS-B",
        bounds=bounds,
        options={'maxiter': 1000, 'ftol': 1e-15, 'gtol': 1e-12}
    )

    if not result.success:
        logger.warning("Local optimisation failed (%s); trying differential evolution", result.message)

    # Try global optimization if local fails
    if not result.success or result.fun > fallback_threshold:
        result_de = differential_evolution(
            objective,
            bounds,
            maxiter=500,
            tol=1e-10,
            seed=seed,
            polish=True
        )
        if result_de.fun < result.fun:
            result = result_de

    return result


class _ConstantModel:
    """Parameter space of a ConstantCurve: its annual rate."""

    @staticmethod
    def from_array(arr: Sequence[float]) -> ConstantCurve:
        return ConstantCurve(float(arr[0]))

    @staticmethod
    def bounds() -> Bounds:
        return [(-0.5, 0.5)]

    @staticmethod
    def initial_guess(level: float = 0.04) -> np.ndarray:
        return np.array([level])


@dataclass
class FitResult:
    """
    Outcome of a fit.

    Attributes:
        curve: Fitted curve
        loss: Final objective value
        success: Whether the optimiser reported convergence
        errors: Model PV minus quoted price, per quote
    """
    curve: Curve
    loss: float
    success: bool
    errors: np.ndarray


def _level_guess(quotes: Sequence[Quote]) -> float:
    """Average yield of the quotes, treating all cashflows as paid at maturity."""
    levels = []
    for q in quotes:
        total = sum(cf.amount for cf in q.instrument.cashflows())
        levels.append(-math.log(q.price / total) / (q.maturity - forward_start(q.instrument)))
    return float(np.mean(levels))


def fit(
    model_cls,
    quotes: Sequence[Quote],
    loss: Callable[[float], float] = squared,
    x0: Optional[Sequence[float]] = None
) -> FitResult:
    """
    Fit a parametric curve so that it reprices quotes as closely as possible.

    Args:
        model_cls: ConstantCurve, NelsonSiegelCurve or
            NelsonSiegelSvenssonCurve
        quotes: Calibration quotes
        loss: Penalty applied to each pricing error (default squared)
        x0: Starting parameters (default from the model and the
            average quote yield)

    Returns:
        FitResult with the fitted curve
    """
    if not quotes:
        raise ValueError("Need at least one quote to fit")

    model = _ConstantModel if model_cls is ConstantCurve else model_cls
    for attr in ("from_array", "bounds", "initial_guess"):
        if not hasattr(model, attr):
            raise ValueError(f"Cannot fit {getattr(model_cls, '__name__', model_cls)}: no parameter space")

    start = model.initial_guess(_level_guess(quotes)) if x0 is None else np.asarray(x0, dtype=np.float64)

    def objective(params):
        curve = model.from_array(params)
        return float(sum(loss(e) for e in repricing_errors(curve, quotes)))

    result = minimize_with_fallback(objective, start, model.bounds())
    curve = model.from_array(result.x)

    logger.debug("Fitted %r to %d quotes, loss %.3g", curve, len(quotes), result.fun)
    return FitResult(curve, float(result.fun), bool(result.success), repricing_errors(curve, quotes))


__all__ = [
    "FitResult",
    "fit",
    "minimize_with_fallback",
    "squared",
]
