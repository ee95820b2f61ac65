"""
Nelson-Siegel and Nelson-Siegel-Svensson parametric yield curves.

The models give the continuously compounded zero rate in closed form:

    z(t) = b0 + b1 * [(1-e^(-t/tau1))/(t/tau1)]
              + b2 * [(1-e^(-t/tau1))/(t/tau1) - e^(-t/tau1)]
              + b3 * [(1-e^(-t/tau2))/(t/tau2) - e^(-t/tau2)]

Nelson-Siegel is the first three terms. Parameters:
    b0: Long-term level (asymptotic rate)
    b1: Short-term component (slope)
    b2: Medium-term hump (curvature 1)
    b3: Second hump (curvature 2), Svensson extension
    tau1: Decay for first hump
    tau2: Decay for second hump

This is commonly used for:
- Treasury par yield curves
- Sovereign bond curve fitting
- Central bank yield curve publications
"""

from typing import List, Optional, Sequence, Tuple
import math

import numpy as np

from ..conventions import Compounding, Continuous
from ..rates import Rate
from .curve import Curve
from .fit import minimize_with_fallback


def _loadings(t: float, tau: float) -> Tuple[float, float]:
    """Slope and curvature loadings at t for decay tau."""
    x = t / tau
    decay = math.exp(-x)
    slope = -math.expm1(-x) / x
    return slope, slope - decay


class NelsonSiegelCurve(Curve):
    """
    Nelson-Siegel yield curve.

    Attributes:
        beta0: Long-term level
        beta1: Short-term component
        beta2: Medium-term hump
        tau: Decay (must be positive)
    """

    n_params = 4

    def __init__(self, beta0: float, beta1: float, beta2: float, tau: float):
        if tau <= 0:
            raise ValueError(f"tau must be positive, got {tau}")
        self.beta0 = beta0
        self.beta1 = beta1
        self.beta2 = beta2
        self.tau = tau

    def _continuous_zero(self, t: float) -> float:
        if t <= 0:
            # Short rate, the limit as t -> 0
            return self.beta0 + self.beta1
        slope, hump = _loadings(t, self.tau)
        return self.beta0 + self.beta1 * slope + self.beta2 * hump

    def zero(self, t: float, compounding: Optional[Compounding] = None) -> Rate:
        z = Rate(self._continuous_zero(t), Continuous())
        return z.convert(compounding or Continuous())

    def discount_factor(self, t: float) -> float:
        if t <= 0:
            return 1.0
        return math.exp(-self._continuous_zero(t) * t)

    def instantaneous_forward(self, t: float, h: float = 1e-5) -> float:
        """f(t) = b0 + b1*e^(-t/tau) + b2*(t/tau)*e^(-t/tau)"""
        x = max(t, 0.0) / self.tau
        decay = math.exp(-x)
        return self.beta0 + self.beta1 * decay + self.beta2 * x * decay

    def to_array(self) -> np.ndarray:
        """Convert to numpy array for optimization."""
        return np.array([self.beta0, self.beta1, self.beta2, self.tau])

    @classmethod
    def from_array(cls, arr: Sequence[float]) -> "NelsonSiegelCurve":
        """Create from numpy array."""
        return cls(*(float(v) for v in arr))

    @staticmethod
    def bounds() -> List[Tuple[float, float]]:
        return [
            (-0.5, 0.5),    # beta0: reasonable rate range
            (-0.5, 0.5),    # beta1
            (-0.5, 0.5),    # beta2
            (0.1, 10.0),    # tau: positive, reasonable range
        ]

    @classmethod
    def initial_guess(cls, level: float = 0.04) -> np.ndarray:
        """Upward sloping curve with a slight hump around a given level."""
        return np.array([level, -0.02, 0.01, 1.5])

    @classmethod
    def fit_zero_rates(
        cls,
        maturities: Sequence[float],
        rates: Sequence[float],
        weights: Optional[Sequence[float]] = None
    ) -> "NelsonSiegelCurve":
        """
        Fit to observed continuously compounded zero rates.

        Args:
            maturities: Maturities in years
            rates: Observed zero rates (decimal)
            weights: Optional weights for each observation

        Returns:
            Fitted curve
        """
        if len(maturities) != len(rates):
            raise ValueError("Maturities and rates must have same length")
        if len(maturities) < cls.n_params:
            raise ValueError(f"Need at least {cls.n_params} points to fit {cls.__name__}")

        tau = np.array(maturities, dtype=np.float64)
        y_obs = np.array(rates, dtype=np.float64)
        w = np.array(weights, dtype=np.float64) if weights is not None else np.ones_like(tau)
        w = w / w.sum()

        def objective(params):
            curve = cls.from_array(params)
            y_pred = np.array([curve._continuous_zero(t) for t in tau])
            return float(np.sum(w * (y_pred - y_obs) ** 2))

        result = minimize_with_fallback(objective, cls.initial_guess(float(np.mean(y_obs))), cls.bounds())
        return cls.from_array(result.x)

    def __repr__(self) -> str:
        return (f"NelsonSiegelCurve(beta0={self.beta0:.4f}, beta1={self.beta1:.4f}, "
                f"beta2={self.beta2:.4f}, tau={self.tau:.2f})")


class NelsonSiegelSvenssonCurve(NelsonSiegelCurve):
    """
    Nelson-Siegel-Svensson yield curve: Nelson-Siegel plus a second hump.

    Attributes:
        beta0, beta1, beta2, beta3: Level, slope and the two humps
        tau1, tau2: Decays of the first and second humps (positive)
    """

    n_params = 6

    def __init__(
        self,
        beta0: float,
        beta1: float,
        beta2: float,
        beta3: float,
        tau1: float,
        tau2: float
    ):
        if tau2 <= 0:
            raise ValueError(f"tau2 must be positive, got {tau2}")
        super().__init__(beta0, beta1, beta2, tau1)
        self.beta3 = beta3
        self.tau2 = tau2

    @property
    def tau1(self) -> float:
        return self.tau

    def _continuous_zero(self, t: float) -> float:
        if t <= 0:
            return self.beta0 + self.beta1
        _, second_hump = _loadings(t, self.tau2)
        return super()._continuous_zero(t) + self.beta3 * second_hump

    def instantaneous_forward(self, t: float, h: float = 1e-5) -> float:
        """f(t) = NS forward + b3*(t/tau2)*e^(-t/tau2)"""
        x = max(t, 0.0) / self.tau2
        return super().instantaneous_forward(t) + self.beta3 * x * math.exp(-x)

    def to_array(self) -> np.ndarray:
        return np.array([self.beta0, self.beta1, self.beta2, self.beta3, self.tau1, self.tau2])

    @staticmethod
    def bounds() -> List[Tuple[float, float]]:
        return [
            (-0.5, 0.5),    # beta0
            (-0.5, 0.5),    # beta1
            (-0.5, 0.5),    # beta2
            (-0.5, 0.5),    # beta3
            (0.1, 10.0),    # tau1
            (0.1, 20.0),    # tau2: can be larger
        ]

    @classmethod
    def initial_guess(cls, level: float = 0.04) -> np.ndarray:
        return np.array([level, -0.02, 0.01, 0.01, 1.5, 3.0])

    def __repr__(self) -> str:
        return (f"NelsonSiegelSvenssonCurve(beta0={self.beta0:.4f}, beta1={self.beta1:.4f}, "
                f"beta2={self.beta2:.4f}, beta3={self.beta3:.4f}, "
                f"tau1={self.tau1:.2f}, tau2={self.tau2:.2f})")


__all__ = [
    "NelsonSiegelCurve",
    "NelsonSiegelSvenssonCurve",
]
