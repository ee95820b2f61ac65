"""
Unit tests for Monotone Convex interpolation.

Reference values from G. Dehlbom, "Interpolation of the yield curve"
(Uppsala University, 2020).
"""

import math

import numpy as np
import pytest
from scipy.integrate import quad

from yieldlib.conventions import Continuous, Periodic
from yieldlib.rates import Rate
from yieldlib.curves import (
    MonotoneConvexCurve,
    Sector,
    classify_sector,
    forward_deviation,
    forward_deviation_integral,
    forward_yield,
    monotone_convex_forwards,
    par_yield,
    zcb_price,
    zcb_yield,
)


@pytest.fixture
def prices():
    return [0.98, 0.955, 0.92, 0.88, 0.83]


@pytest.fixture
def times():
    return [1, 2, 3, 4, 5]


@pytest.fixture
def rates(prices, times):
    return [-math.log(p) / t for p, t in zip(prices, times)]


@pytest.fixture
def curve(rates, times):
    return MonotoneConvexCurve(rates, times)


def reference_zero(t):
    """Dehlbom's piecewise zero rate, with rounded coefficients."""
    if t <= 1:
        return 0.0014 * t ** 2 + 0.0188
    if t <= 1.0233:
        return -0.0028 / t + 0.0230
    if t <= 2:
        return 0.0029 * t ** 2 - 0.0088 * t - 0.0058 / t + 0.0319
    if t <= 3:
        return -0.0022 * t ** 2 + 0.0212 * t + 0.0324 / t - 0.0268
    if t <= 4:
        return 0.0031 * t ** 2 - 0.0274 * t - 0.1188 / t + 0.1217
    return -0.0035 * t ** 2 + 0.0525 * t + 0.314 / t - 0.2005


class TestKnotForwards:
    """Tests for discrete and instantaneous knot forwards."""

    def test_discrete_forwards(self, rates, times):
        _, fd = monotone_convex_forwards(rates, times)
        np.testing.assert_allclose(fd, [0.0202, 0.0258, 0.0373, 0.0445, 0.0585], atol=1e-4)

    def test_instantaneous_forwards(self, rates, times):
        f, _ = monotone_convex_forwards(rates, times)
        assert len(f) == 6
        np.testing.assert_allclose(f, [0.0188, 0.023, 0.0316, 0.0409, 0.0515, 0.0620], atol=1e-4)

    def test_curve_stores_forwards(self, curve, rates, times):
        f, fd = monotone_convex_forwards(rates, times)
        np.testing.assert_array_equal(curve.f, f)
        np.testing.assert_array_equal(curve.fd, fd)

    def test_forwards_are_collared(self):
        # a hump in the discrete forwards pushes the raw end forwards negative
        f, fd = monotone_convex_forwards([0.01, 0.055, 0.04], [1, 2, 3])
        assert np.all(f >= 0)
        assert f[0] <= 2 * fd[0]
        assert f[-1] <= 2 * fd[-1]


class TestForwardDeviation:
    """Tests for g(x) and its integral."""

    def test_reference_values(self):
        cases = [
            (0.5, 0.018793076350927487, 0.023021969250703423, 0.020202707317519466,
             0.0042 * 0.5 ** 2 - 0.0014),
            (0.0, 0.023021969250703423, 0.03158945081076577, 0.02584123118388738,
             -0.0028),
            (0.5, 0.023021969250703423, 0.03158945081076577, 0.02584123118388738,
             0.0087 * 0.5 ** 2 - 0.0002 * 0.5 - 0.0028),
            (0.5, 0.03158945081076577, 0.04089471650423902, 0.03733767043764417,
             -0.0063 * 0.5 ** 2 + 0.0156 * 0.5 - 0.0057),
            (0.5, 0.04089471650423902, 0.051473984626221235, 0.04445176257083387,
             0.0102 * 0.5 ** 2 + 0.0004 * 0.5 - 0.0036),
        ]
        for x, f_left, f_right, fd, expected in cases:
            assert abs(forward_deviation(x, f_left, f_right, fd) - expected) < 1e-4

    @pytest.mark.parametrize("g0,g1,sector", [
        (0.0, 0.0, Sector.FLAT),
        (-0.01, 0.01, Sector.I),
        (0.01, -0.005, Sector.I),
        (-0.01, 0.03, Sector.II),
        (0.01, -0.03, Sector.II),
        (0.01, -0.001, Sector.III),
        (-0.01, 0.001, Sector.III),
        (0.01, 0.02, Sector.IV),
        (-0.01, -0.02, Sector.IV),
    ])
    def test_classify_sector(self, g0, g1, sector):
        assert classify_sector(g0, g1) is sector

    @pytest.mark.parametrize("g0,g1", [
        (-0.01, 0.01), (-0.01, 0.03), (0.01, -0.001), (0.01, 0.02), (-0.01, -0.02),
    ])
    def test_end_values_and_zero_integral(self, g0, g1):
        fd = 0.05
        f_left, f_right = fd + g0, fd + g1
        assert forward_deviation(0.0, f_left, f_right, fd) == pytest.approx(g0)
        assert forward_deviation(1.0, f_left, f_right, fd) == pytest.approx(g1)
        # g averages to zero over the interval
        assert abs(forward_deviation_integral(1.0, f_left, f_right, fd)) < 1e-15

    @pytest.mark.parametrize("g0,g1", [
        (-0.01, 0.01), (-0.01, 0.03), (0.01, -0.001), (0.01, 0.02),
    ])
    def test_integral_matches_quadrature(self, g0, g1):
        fd = 0.05
        expected, _ = quad(lambda x: forward_deviation(x, fd + g0, fd + g1, fd), 0.0, 0.7, limit=200)
        assert forward_deviation_integral(0.7, fd + g0, fd + g1, fd) == pytest.approx(expected, abs=1e-10)


class TestMonotoneConvexCurve:
    """Tests for the curve."""

    def test_reference_zero_rates(self, curve):
        for t in np.linspace(0, 5, 30):
            assert abs(curve.zero(t).value - reference_zero(t)) < 1e-4

    def test_knots_exact(self, curve, rates, times):
        for r, t in zip(rates, times):
            assert curve.zero(t).value == pytest.approx(r, abs=1e-14)

    def test_discount_factors(self, curve, prices, times):
        for p, t in zip(prices, times):
            assert curve.discount(t) == pytest.approx(p, abs=1e-14)
        assert curve.discount(0) == 1.0

    def test_non_negative_forwards(self, curve):
        for t in np.linspace(0, 6, 61):
            assert curve.instantaneous_forward(t) >= 0

    def test_forward_curve(self):
        c = MonotoneConvexCurve([0.03, 0.04, 0.047, 0.06, 0.06], [1, 2, 3, 4, 5])
        assert c.instantaneous_forward(0.5) == pytest.approx(0.02875)
        assert c.instantaneous_forward(1) == pytest.approx(0.04)
        assert c.instantaneous_forward(2) == pytest.approx(0.0555)
        assert c.instantaneous_forward(2.5) == pytest.approx(0.0571254591368226)
        assert c.instantaneous_forward(5) == pytest.approx(0.05025)

    def test_flat_extrapolation(self):
        c = MonotoneConvexCurve([0.03, 0.04, 0.047, 0.06, 0.06], [1, 2, 3, 4, 5])
        assert c.instantaneous_forward(5.2) == pytest.approx(0.06)
        assert c.zero(7).value == pytest.approx((5 * 0.06 + 2 * 0.06) / 7)

    def test_zero_at_origin(self, curve):
        assert curve.zero(0).value == pytest.approx(curve.f[0])
        assert curve.zero(1e-9).value == pytest.approx(curve.f[0], abs=1e-8)

    def test_rate_inputs_are_converted(self, rates, times):
        periodic = [Rate(r, Continuous()).convert(Periodic(1)) for r in rates]
        c = MonotoneConvexCurve(periodic, times)
        np.testing.assert_allclose(c.rates, rates, atol=1e-15)

    def test_from_quotes(self, curve, prices, times):
        c = MonotoneConvexCurve.from_quotes(zcb_price(prices, times))
        np.testing.assert_allclose(c.f, curve.f, atol=1e-15)
        assert c.discount(2.5) == pytest.approx(curve.discount(2.5))

    def test_from_quotes_rejects_coupon_bonds(self):
        with pytest.raises(ValueError):
            MonotoneConvexCurve.from_quotes(par_yield([0.02, 0.03], [2, 3]))

    def test_from_quotes_rejects_forwards(self):
        with pytest.raises(ValueError):
            MonotoneConvexCurve.from_quotes([zcb_yield(0.03, 1), forward_yield(0.04, 1, 1)])

    @pytest.mark.parametrize("knot", [1, 2, 3, 4])
    def test_forward_continuous_at_knots(self, curve, knot):
        eps = 1e-9
        left = curve.instantaneous_forward(knot - eps)
        right = curve.instantaneous_forward(knot + eps)
        assert abs(left - right) < 1e-6

    def test_validation(self):
        with pytest.raises(ValueError):
            MonotoneConvexCurve([0.02], [1])
        with pytest.raises(ValueError):
            MonotoneConvexCurve([0.02, 0.03], [1, 2, 3])
        with pytest.raises(ValueError):
            MonotoneConvexCurve([0.02, 0.03], [2, 1])
        with pytest.raises(ValueError):
            MonotoneConvexCurve([0.02, 0.03], [0, 1])
