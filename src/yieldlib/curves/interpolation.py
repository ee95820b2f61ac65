"""
Interpolation methods for zero-rate curves.

Provides:
- LinearInterpolator: Piecewise linear (degree 1)
- SplineInterpolator: B-spline of a given degree through the knots
  (degree 2 "quadratic" is the bootstrap default)
- FunctionInterpolator: Wraps a caller-supplied (xs, ys) -> (x -> y) builder

All interpolators pass exactly through the knots and extend linearly
beyond them from the boundary value and slope, so the forward curve
does not jump at the last knot.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Union
import numpy as np
from scipy.interpolate import make_interp_spline


class Interpolator(ABC):
    """Abstract base class for curve interpolation."""

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None

    def fit(self, times: np.ndarray, values: np.ndarray) -> "Interpolator":
        """
        Fit the interpolator to knots.

        Args:
            times: Knot year fractions (strictly increasing)
            values: Knot values (zero rates)

        Returns:
            self
        """
        times = np.asarray(times, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if len(times) < 2:
            raise ValueError("Need at least 2 points for interpolation")
        if np.any(np.diff(times) <= 0):
            raise ValueError("Times must be strictly increasing")

        self.times = times
        self.values = values
        self._fit()
        return self

    @abstractmethod
    def _fit(self) -> None:
        """Build the interpolant from self.times and self.values."""

    @abstractmethod
    def _evaluate(self, t: float) -> float:
        """Value inside [times[0], times[-1]]."""

    @abstractmethod
    def _slope(self, t: float) -> float:
        """First derivative inside [times[0], times[-1]]."""

    def interpolate(self, t: float) -> float:
        """
        Interpolate at a single point, extending linearly outside the knots.

        Args:
            t: Year fraction

        Returns:
            Interpolated value
        """
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")

        lo, hi = self.times[0], self.times[-1]
        if t < lo:
            return self._evaluate(lo) + self._slope(lo) * (t - lo)
        if t > hi:
            return self._evaluate(hi) + self._slope(hi) * (t - hi)
        return self._evaluate(t)

    def derivative(self, t: float) -> float:
        """
        First derivative at t (the boundary slope outside the knots).

        Useful for computing instantaneous forward rates.
        """
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")
        return self._slope(min(max(t, self.times[0]), self.times[-1]))

    def __call__(self, t: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(t)


class LinearInterpolator(Interpolator):
    """Piecewise linear interpolation between knots."""

    def _fit(self) -> None:
        self._slopes = np.diff(self.values) / np.diff(self.times)

    def _segment(self, t: float) -> int:
        idx = np.searchsorted(self.times, t, side='right') - 1
        return int(max(0, min(idx, len(self.times) - 2)))

    def _evaluate(self, t: float) -> float:
        return float(np.interp(t, self.times, self.values))

    def _slope(self, t: float) -> float:
        return float(self._slopes[self._segment(t)])


class SplineInterpolator(Interpolator):
    """
    Interpolating B-spline of the given degree (scipy make_interp_spline).

    The degree drops to len(knots) - 1 when there are too few knots,
    so a two-knot quadratic spline is a straight line.
    """

    def __init__(self, degree: int = 2):
        super().__init__()
        if degree < 1:
            raise ValueError(f"Spline degree must be at least 1, got {degree}")
        self.degree = degree
        self._spline = None
        self._spline_derivative = None

    def _fit(self) -> None:
        k = min(self.degree, len(self.times) - 1)
        self._spline = make_interp_spline(self.times, self.values, k=k)
        self._spline_derivative = self._spline.derivative()

    def _evaluate(self, t: float) -> float:
        return float(self._spline(t))

    def _slope(self, t: float) -> float:
        return float(self._spline_derivative(t))


class FunctionInterpolator(Interpolator):
    """
    Caller-supplied interpolation.

    Args:
        builder: Function taking (xs, ys) arrays and returning a
            callable x -> y that passes through the knots
        h: Step for the numerical derivative
    """

    def __init__(self, builder: Callable, h: float = 1e-6):
        super().__init__()
        self.builder = builder
        self.h = h
        self._fn = None

    def _fit(self) -> None:
        self._fn = self.builder(self.times, self.values)

    def _evaluate(self, t: float) -> float:
        return float(self._fn(t))

    def _slope(self, t: float) -> float:
        lo = max(t - self.h, self.times[0])
        hi = min(t + self.h, self.times[-1])
        return (self._evaluate(hi) - self._evaluate(lo)) / (hi - lo)


def create_interpolator(method: Union[str, Callable] = "quadratic") -> Interpolator:
    """
    Factory function to create an interpolator.

    Args:
        method: One of "linear", "quadratic", "cubic", or a callable
            builder (xs, ys) -> (x -> y)

    Returns:
        Interpolator instance (unfitted)
    """
    if callable(method):
        return FunctionInterpolator(method)

    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator()
    elif method in ("quadratic", "quadratic_spline"):
        return SplineInterpolator(degree=2)
    elif method in ("cubic", "cubic_spline"):
        return SplineInterpolator(degree=3)
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "SplineInterpolator",
    "FunctionInterpolator",
    "create_interpolator",
]
