"""
Unit tests for rates and compounding conventions.
"""

import math

import pytest

from yieldlib.conventions import Continuous, Periodic, QuoteConvention
from yieldlib.rates import Rate, accumulation, as_rate, convert, discount


class TestCompounding:
    """Tests for Periodic and Continuous."""

    def test_periodic_requires_positive_frequency(self):
        with pytest.raises(ValueError):
            Periodic(0)
        with pytest.raises(ValueError):
            Periodic(-2)

    def test_fractional_frequency(self):
        """A 9-month spacing gives Periodic(4/3)."""
        p = Periodic(4 / 3)
        assert abs(p.discount(0.05, 0.75) - (1 + 0.05 * 0.75) ** -1) < 1e-12

    def test_equality(self):
        assert Periodic(2) == Periodic(2)
        assert Periodic(2) != Periodic(4)
        assert Continuous() == Continuous()

    def test_repr(self):
        assert repr(Periodic(2)) == "Periodic(2)"
        assert repr(Continuous()) == "Continuous()"


class TestQuoteConvention:
    """Tests for quote convention presets."""

    def test_presets(self):
        assert QuoteConvention.par().coupon_frequency == 2
        assert QuoteConvention.par_swap().coupon_frequency == 4
        assert QuoteConvention.cmt().coupon_frequency == 2
        assert QuoteConvention.ois().coupon_frequency == 4

    def test_zero_coupon_short_end(self):
        cmt = QuoteConvention.cmt()
        assert cmt.is_zero_coupon(0.5)
        assert cmt.is_zero_coupon(1.0)
        assert not cmt.is_zero_coupon(1.5)
        assert not QuoteConvention.par().is_zero_coupon(0.5)

    def test_compounding(self):
        assert QuoteConvention.ois().compounding == Periodic(4)

    def test_invalid_frequency(self):
        with pytest.raises(ValueError):
            QuoteConvention(coupon_frequency=0)


class TestRate:
    """Tests for Rate conversion and arithmetic."""

    def test_default_compounding_is_annual(self):
        assert Rate(0.05).compounding == Periodic(1)

    def test_semiannual_to_continuous(self):
        r = Rate(0.1, Periodic(2)).convert(Continuous())
        assert abs(r.value - 2 * math.log(1.05)) < 1e-12
        assert abs(r.value - 0.09758) < 1e-5

    def test_semiannual_to_quarterly(self):
        r = Rate(0.1, Periodic(2)).convert(Periodic(4))
        assert r.compounding == Periodic(4)
        assert r.value == pytest.approx(0.09878030638383972, abs=1e-12)

    def test_round_trip(self):
        r = Rate(0.05, Periodic(1))
        back = r.convert(Continuous()).convert(Periodic(12)).convert(Periodic(1))
        assert abs(back.value - 0.05) < 1e-12

    def test_conversion_is_idempotent(self):
        r = Rate(0.07, Periodic(2))
        once = r.convert(Continuous())
        assert once.convert(Continuous()) == once
        assert r.convert(Periodic(2)) is r

    def test_conversion_preserves_discount(self):
        r = Rate(0.06, Periodic(2))
        for c in [Continuous(), Periodic(1), Periodic(12)]:
            assert abs(r.convert(c).discount(7.5) - r.discount(7.5)) < 1e-12

    def test_discount_and_accumulation(self):
        r = Rate(0.035)
        for t in [0, 0.5, 1, 10]:
            assert abs(r.discount(t) - 1.035 ** -t) < 1e-12
            assert abs(r.accumulation(t) - 1.035 ** t) < 1e-12
        assert abs(r.discount(3, 5) - 1.035 ** -2) < 1e-12

    def test_continuous_discount(self):
        r = Rate(0.05, Continuous())
        assert abs(r.discount(2) - math.exp(-0.1)) < 1e-12

    def test_arithmetic_with_numbers(self):
        r = Rate(0.05, Periodic(2))
        assert (r + 0.01).compounding == Periodic(2)
        assert (r + 0.01).isclose(Rate(0.06, Periodic(2)))
        assert (0.01 + r).isclose(Rate(0.06, Periodic(2)))
        assert (r - 0.01).isclose(Rate(0.04, Periodic(2)))
        assert (0.1 - r).isclose(Rate(0.05, Periodic(2)))
        assert (r * 2).isclose(Rate(0.10, Periodic(2)))
        assert (r / 2).isclose(Rate(0.025, Periodic(2)))
        assert (-r).value == -0.05

    def test_arithmetic_converts_right_operand(self):
        left = Rate(0.05, Periodic(1))
        right = Rate(0.01, Continuous())
        total = left + right
        assert total.compounding == Periodic(1)
        assert abs(total.value - (0.05 + math.expm1(0.01))) < 1e-12

    def test_comparisons(self):
        assert Rate(0.05) < Rate(0.06)
        assert Rate(0.06) > 0.05
        # 5% continuous is more than 5% annual
        assert Rate(0.05, Continuous()) > Rate(0.05, Periodic(1))

    def test_isclose_across_compounding(self):
        r = Rate(0.05, Periodic(1))
        assert r.isclose(r.convert(Continuous()))
        assert not r.isclose(Rate(0.05, Continuous()))


class TestModuleFunctions:
    """Tests for functions accepting bare numbers."""

    def test_as_rate(self):
        assert as_rate(0.05) == Rate(0.05, Periodic(1))
        assert as_rate(0.05, Periodic(2)) == Rate(0.05, Periodic(2))
        r = Rate(0.05, Continuous())
        assert as_rate(r, Periodic(2)) is r

    def test_scalar_discount(self):
        for t in [0, 0.5, 1, 10]:
            assert abs(discount(0.05, t) - 1.05 ** -t) < 1e-12
            assert abs(accumulation(0.05, t) - 1.05 ** t) < 1e-12

    def test_scalar_convert(self):
        assert abs(convert(0.05, Continuous()).value - math.log(1.05)) < 1e-12
