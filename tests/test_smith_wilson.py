"""
Unit tests for the Smith-Wilson curve.
"""

import logging
import math

import numpy as np
import pytest

from yieldlib.conventions import Continuous
from yieldlib.curves import (
    BulletBondQuote,
    ForwardStartingCurve,
    SmithWilsonCurve,
    SwapQuote,
    ZeroCouponQuote,
    cashflow_matrix,
    forward_yield,
    par_yield,
    repricing_errors,
    timepoints,
    wilson_kernel,
    zcb_yield,
    zcb_price,
)

UFR = 0.03
ALPHA = 0.1


class TestSmithWilsonCurve:
    """Construction and basic behaviour."""

    def test_attributes(self):
        sw = SmithWilsonCurve([5.0, 7.0], [2.3, -1.2], UFR, ALPHA)
        assert sw.ufr == UFR
        assert sw.alpha == ALPHA
        np.testing.assert_array_equal(sw.u, [5.0, 7.0])
        np.testing.assert_array_equal(sw.qb, [2.3, -1.2])

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            SmithWilsonCurve([5.0, 7.0], [2.4, -3.4, 8.9], UFR, ALPHA)

    def test_alpha_must_be_positive(self):
        with pytest.raises(ValueError):
            SmithWilsonCurve([5.0], [1.0], UFR, 0.0)

    def test_empty_is_flat(self):
        sw = SmithWilsonCurve([], [], UFR, ALPHA)
        assert sw.discount(10.0) == math.exp(-UFR * 10.0)
        assert sw.accumulation(10.0) == pytest.approx(math.exp(UFR * 10.0))
        assert sw.zero(8.0).value == pytest.approx(UFR)
        assert sw.forward(5.0, 8.0, Continuous()).value == pytest.approx(UFR)

    def test_zero_weights_is_flat(self):
        sw = SmithWilsonCurve([5.0, 7.0], [0.0, 0.0], UFR, ALPHA)
        assert sw.discount(10.0) == math.exp(-UFR * 10.0)

    def test_discount_at_zero(self):
        sw = SmithWilsonCurve([5.0, 7.0], [2.3, -1.2], UFR, ALPHA)
        assert sw.discount(0) == 1.0
        assert math.isfinite(sw.zero(0).value)

    def test_kernel_symmetric(self):
        assert wilson_kernel(ALPHA, 2.0, 5.0) == pytest.approx(wilson_kernel(ALPHA, 5.0, 2.0))
        assert wilson_kernel(ALPHA, 0.0, 5.0) == 0.0


class TestCalibration:
    """Calibration round trips."""

    def test_single_zero_yield_payment(self):
        sw = SmithWilsonCurve.from_quotes([zcb_price(1.0, 4)], UFR, ALPHA)
        assert sw.discount(4.0) == pytest.approx(1.0, abs=1e-12)
        # in the long end it is still the UFR
        assert sw.forward(1000.0, 2000.0, Continuous()).value == pytest.approx(UFR, abs=1e-8)

    def test_identity_cashflows(self):
        times = [1.0, 2.5, 5.6]
        prices = [0.9, 0.7, 0.5]
        sw = SmithWilsonCurve.calibrate(times, np.eye(3), prices, UFR, ALPHA)
        np.testing.assert_allclose([sw.discount(t) for t in times], prices, rtol=1e-10)

    def test_non_diagonal_cashflows(self):
        times = [1.0, 2.5, 5.6]
        prices = [1.0, 0.9]
        cfs = np.array([[0.1, 0.1],
                        [1.0, 0.1],
                        [0.0, 1.0]])
        sw = SmithWilsonCurve.calibrate(times, cfs, prices, UFR, ALPHA)
        dfs = np.array([sw.discount(t) for t in times])
        np.testing.assert_allclose(cfs.T @ dfs, prices, rtol=1e-10)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            SmithWilsonCurve.calibrate([1.0, 2.0], np.eye(3), [0.9, 0.8, 0.7], UFR, ALPHA)

    def test_zero_coupon_quotes(self):
        times = [1.2, 4.5, 5.6]
        prices = [1.0, 0.9, 1.2]
        quotes = [ZeroCouponQuote(p, t) for p, t in zip(prices, times)]
        sw = SmithWilsonCurve.from_zero_coupon_quotes(quotes, UFR, ALPHA)
        for t, p in zip(times, prices):
            assert sw.discount(t) == pytest.approx(p, rel=1e-10)

    def test_debug_logging(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="yieldlib.curves.smith_wilson"):
            SmithWilsonCurve.calibrate([1.0], np.eye(1), [0.97], UFR, ALPHA)
        assert "1 instruments" in caplog.text


class TestSwapAndBondQuotes:
    """Swap and bullet bond quotes on a common payment grid."""

    @pytest.fixture
    def maturities(self):
        return [1.2, 2.5, 3.6]

    @pytest.fixture
    def interests(self):
        return [-0.02, 0.3, 0.04]

    @pytest.fixture
    def payments(self):
        # Maturities are rounded down to the semiannual grid: 1.0, 2.5, 3.5
        return np.array([
            [-0.01, 0.15, 0.02],
            [0.99, 0.15, 0.02],
            [0.0, 0.15, 0.02],
            [0.0, 0.15, 0.02],
            [0.0, 1.15, 0.02],
            [0.0, 0.0, 0.02],
            [0.0, 0.0, 1.02],
        ])

    def test_payment_grid(self, maturities, interests, payments):
        quotes = [SwapQuote(r, m, 2) for r, m in zip(interests, maturities)]
        np.testing.assert_allclose(timepoints(quotes), np.arange(1, 8) * 0.5)
        np.testing.assert_allclose(cashflow_matrix(quotes), payments, atol=1e-15)

    def test_uneven_frequencies(self, maturities, interests):
        quotes = [SwapQuote(r, m, f) for r, m, f in zip(interests, maturities, [2, 1, 2])]
        expected = np.array([
            [-0.01, 0.0, 0.02],
            [0.99, 0.0, 0.02],
            [0.0, 0.3, 0.02],
            [0.0, 0.0, 0.02],
            [0.0, 1.3, 0.02],
            [0.0, 0.0, 0.02],
            [0.0, 0.0, 1.02],
        ])
        np.testing.assert_allclose(cashflow_matrix(quotes), expected, atol=1e-15)

    def test_swap_round_trip(self, maturities, interests, payments):
        quotes = [SwapQuote(r, m, 2) for r, m in zip(interests, maturities)]
        sw = SmithWilsonCurve.from_swap_quotes(quotes, UFR, ALPHA)
        dfs = np.array([sw.discount(t) for t in np.arange(1, 8) * 0.5])
        np.testing.assert_allclose(payments.T @ dfs, np.ones(3), rtol=1e-10)

    def test_bullet_bond_round_trip(self, maturities, interests, payments):
        prices = [1.3, 0.1, 4.5]
        quotes = [BulletBondQuote(r, p, m, 2) for r, p, m in zip(interests, prices, maturities)]
        sw = SmithWilsonCurve.from_bullet_bond_quotes(quotes, UFR, ALPHA)
        dfs = np.array([sw.discount(t) for t in np.arange(1, 8) * 0.5])
        np.testing.assert_allclose(payments.T @ dfs, prices, rtol=1e-10)

    def test_forward_starting(self, maturities, interests):
        quotes = [SwapQuote(r, m, 2) for r, m in zip(interests, maturities)]
        sw = SmithWilsonCurve.from_swap_quotes(quotes, UFR, ALPHA)
        fwd = ForwardStartingCurve(sw, 1.0)
        assert fwd.discount(3.7) == pytest.approx(sw.discount(1.0, 4.7))

    def test_invalid_frequency(self):
        with pytest.raises(ValueError):
            SwapQuote(0.02, 5, 0)
        with pytest.raises(ValueError):
            BulletBondQuote(0.02, 1.0, 5, 1.5)

    def test_generic_quotes(self):
        quotes = par_yield([0.02, 0.025, 0.03], [1, 2, 5])
        sw = SmithWilsonCurve.from_quotes(quotes, UFR, ALPHA)
        assert np.all(np.abs(repricing_errors(sw, quotes)) < 1e-10)

    def test_forward_quotes(self):
        quotes = [zcb_yield(0.03, 1), forward_yield(0.04, 1, 1), forward_yield(0.045, 2, 3)]
        sw = SmithWilsonCurve.from_quotes(quotes, UFR, ALPHA)
        assert sw.discount(1, 2) == pytest.approx(1 / 1.04, abs=1e-10)
        assert sw.discount(2, 5) == pytest.approx(1.045 ** -3, abs=1e-10)
        np.testing.assert_allclose(sw.u, [1, 2, 5])
        assert np.all(np.abs(repricing_errors(sw, quotes)) < 1e-10)


class TestEIOPA:
    """EIOPA risk free rate (no VA), 31 August 2021."""

    EXPECTED_QB = [
        -0.59556534586390800, -0.07442224713453920, -0.34193181987682400,
        1.54054875814153000, -2.15552046042343000, 0.73559290752221900,
        1.89365225129089000, -2.75927773116240000, 2.24893737130629000,
        -1.51625404117395000, 0.19284859623817400, 1.13410725406271000,
        0.00153268224642171, 0.00147942301778158, -1.85022125156483000,
        0.00336230229850928, 0.00324546553910162, 0.00313268874430658,
        0.00302383083427276, 1.36047951448615000,
    ]

    def test_matches_published_weights(self):
        ufr = math.log(1.036)
        alpha = 0.133394
        maturities = list(range(1, 13)) + [15, 20]
        rates = [-0.00615, -0.00575, -0.00535, -0.00485, -0.00425, -0.00375, -0.003145,
                 -0.00245, -0.00185, -0.00125, -0.000711, -0.00019, 0.00111, 0.00215]

        quotes = [SwapQuote(r, m, 1) for r, m in zip(rates, maturities)]
        sw = SmithWilsonCurve.from_swap_quotes(quotes, ufr, alpha)

        np.testing.assert_allclose(sw.u, np.arange(1, 21))
        assert list(sw.qb) == pytest.approx(self.EXPECTED_QB, rel=1e-6, abs=1e-6)

    def test_converges_to_ufr(self):
        ufr = math.log(1.036)
        sw = SmithWilsonCurve(np.arange(1, 21), self.EXPECTED_QB, ufr, 0.133394)
        assert sw.forward(150.0, 151.0, Continuous()).value == pytest.approx(ufr, abs=1e-4)
