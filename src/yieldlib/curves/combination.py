"""
Curve arithmetic.

Curves, Rates and numbers combine with + - * / into new curves. The
operation is applied to the annually compounded zero rates of the two
operands at each time:

    a(t) = P_left(t)^(-1/t) - 1
    P(t) = (1 + op(a(t), b(t)))^(-t)

Typical use is a risk-free curve plus a spread curve, or a scaled
curve. Two flat curves collapse to a single flat curve.
"""

from numbers import Real
from typing import Callable, Union
import operator

from ..rates import Rate
from .curve import ConstantCurve, Curve

SUPPORTED_OPS = {
    operator.add: "+",
    operator.sub: "-",
    operator.mul: "*",
    operator.truediv: "/",
}

Operand = Union[Curve, Rate, float]


def _annual_zero(curve: Curve, t: float) -> float:
    return curve.discount_factor(t) ** (-1.0 / t) - 1.0


def _check_op(op: Callable) -> None:
    if op not in SUPPORTED_OPS:
        raise ValueError(f"Unsupported curve operation: {op!r}")


class CompositeCurve(Curve):
    """
    Curve combining two curves' annual zero rates with an operator.

    Attributes:
        left: Left operand
        right: Right operand
        op: One of operator.add, sub, mul, truediv
    """

    def __init__(self, left: Curve, right: Curve, op: Callable):
        _check_op(op)
        self.left = left
        self.right = right
        self.op = op

    def discount_factor(self, t: float) -> float:
        if t <= 0:
            return 1.0
        rate = self.op(_annual_zero(self.left, t), _annual_zero(self.right, t))
        return (1.0 + rate) ** (-t)

    def __repr__(self) -> str:
        return f"CompositeCurve({self.left!r} {SUPPORTED_OPS[self.op]} {self.right!r})"


def _lift(x: Operand) -> Curve:
    if isinstance(x, Curve):
        return x
    if isinstance(x, (Rate, Real)):
        return ConstantCurve(x)
    raise TypeError(f"Cannot combine a curve with {type(x).__name__}")


def combine(a: Operand, b: Operand, op: Callable) -> Curve:
    """
    Combine two operands into a curve.

    Args:
        a: Left operand (Curve, Rate, or number taken as annual rate)
        b: Right operand
        op: operator.add, operator.sub, operator.mul or operator.truediv

    Returns:
        ConstantCurve when both operands are flat, else CompositeCurve
    """
    _check_op(op)
    left, right = _lift(a), _lift(b)
    if isinstance(left, ConstantCurve) and isinstance(right, ConstantCurve):
        return ConstantCurve(op(left.rate, right.rate))
    return CompositeCurve(left, right, op)


__all__ = [
    "CompositeCurve",
    "combine",
]
