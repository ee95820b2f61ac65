"""Root-finding used by curve calibration (Newton-Raphson via scipy)."""

from dataclasses import dataclass
from typing import Callable, Optional
import logging

from scipy import optimize

logger = logging.getLogger(__name__)


class ConvergenceError(RuntimeError):
    """Raised when a strict solve fails to converge."""


@dataclass(frozen=True)
class SolverSettings:
    """
    Newton iteration settings.

    Attributes:
        max_iter: Iteration cap per solve
        tol: Absolute tolerance on the step size
        strict: Raise ConvergenceError instead of returning the last
            iterate when the cap is reached
    """
    max_iter: int = 100
    tol: float = 1e-12
    strict: bool = False


DEFAULT_SOLVER = SolverSettings()


def newton_solve(
    func: Callable[[float], float],
    x0: float,
    fprime: Optional[Callable[[float], float]] = None,
    settings: Optional[SolverSettings] = None,
    label: str = "root",
) -> float:
    """
    Solve func(x) = 0 by Newton's method.

    Without fprime the secant method is used (numerical derivative).
    When the iteration cap is reached the last iterate is returned and
    a warning is logged; it may be inaccurate. Set strict=True in the
    settings to raise instead.

    Args:
        func: Function to zero
        x0: Initial guess
        fprime: Optional closed-form derivative
        settings: Iteration settings (default DEFAULT_SOLVER)
        label: Name of the quantity being solved, for log messages

    Returns:
        Root estimate
    """
    settings = settings or DEFAULT_SOLVER
    root, result = optimize.newton(
        func,
        x0,
        fprime=fprime,
        tol=settings.tol,
        maxiter=settings.max_iter,
        full_output=True,
        disp=False,
    )
    root = float(root)

    if not result.converged:
        msg = (f"Newton solve for {label} did not converge after "
               f"{result.iterations} iterations ({result.flag}); last iterate {root:.12g}")
        if settings.strict:
            raise ConvergenceError(msg)
        logger.warning(msg)
    else:
        logger.debug("Solved %s = %.12g in %d iterations", label, root, result.iterations)

    return root


__all__ = [
    "ConvergenceError",
    "SolverSettings",
    "DEFAULT_SOLVER",
    "newton_solve",
]
