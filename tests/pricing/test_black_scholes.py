"""
Tests for the Black-Scholes-Merton pricing engine.

Covers prices against reference values, put-call parity, Greek bounds and
finite-difference checks, expiry/zero-volatility edge cases, and the
implied-volatility solver.
"""

import math
from datetime import date, timedelta

import numpy as np
import pytest

from options_analytics.errors import ConvergenceError, DomainRangeError
from options_analytics.models.contracts import OptionContract, OptionType
from options_analytics.pricing.black_scholes import (
    black_scholes_greeks,
    black_scholes_price,
    black_scholes_price_grid,
    calculate_implied_volatility,
    calculate_option_greeks,
    calculate_option_price,
    time_to_expiration,
)

AS_OF = date(2026, 1, 20)

PARITY_CASES = [
    # S, K, T, sigma, r, q
    (100.0, 100.0, 1.0, 0.20, 0.05, 0.0),
    (450.0, 430.0, 59 / 365, 0.18, 0.045, 0.013),
    (50.0, 65.0, 0.25, 0.55, 0.01, 0.0),
    (120.0, 80.0, 2.0, 0.35, 0.03, 0.02),
    (10.0, 10.5, 7 / 365, 0.90, 0.0, 0.0),
]


class TestBlackScholesPrice:
    """Test closed-form prices."""

    def test_reference_values(self):
        """Test the textbook S=K=100, T=1, sigma=20%, r=5% case."""
        call = black_scholes_price(OptionType.CALL, 100.0, 100.0, 1.0, 0.20, 0.05)
        put = black_scholes_price(OptionType.PUT, 100.0, 100.0, 1.0, 0.20, 0.05)

        assert call == pytest.approx(10.450583572185565, abs=1e-6)
        assert put == pytest.approx(5.573526022256971, abs=1e-6)

    @pytest.mark.parametrize("S,K,T,sigma,r,q", PARITY_CASES)
    def test_put_call_parity(self, S, K, T, sigma, r, q):
        """Test C - P = S e^(-qT) - K e^(-rT)."""
        call = black_scholes_price(OptionType.CALL, S, K, T, sigma, r, q)
        put = black_scholes_price(OptionType.PUT, S, K, T, sigma, r, q)

        assert call - put == pytest.approx(S * math.exp(-q * T) - K * math.exp(-r * T), abs=1e-6)

    def test_expired_option_is_intrinsic(self):
        """Test T = 0 prices the intrinsic value."""
        assert black_scholes_price(OptionType.CALL, 110.0, 100.0, 0.0, 0.25, 0.05) == 10.0
        assert black_scholes_price(OptionType.PUT, 110.0, 100.0, 0.0, 0.25, 0.05) == 0.0
        assert black_scholes_price(OptionType.PUT, 90.0, 100.0, -0.1, 0.25, 0.05) == 10.0

    def test_contract_past_expiration_is_intrinsic(self):
        """Test a contract valued after its expiration date."""
        contract = OptionContract("SPY", OptionType.CALL, 100.0, AS_OF - timedelta(days=3))

        assert calculate_option_price(contract, 110.0, 0.2, 0.05, as_of=AS_OF) == 10.0

    def test_zero_volatility_is_discounted_intrinsic(self):
        """Test sigma = 0 collapses to the discounted forward intrinsic value."""
        call = black_scholes_price(OptionType.CALL, 100.0, 90.0, 1.0, 0.0, 0.05)
        put = black_scholes_price(OptionType.PUT, 100.0, 90.0, 1.0, 0.0, 0.05)

        assert call == pytest.approx(100.0 - 90.0 * math.exp(-0.05), abs=1e-9)
        assert put == pytest.approx(0.0, abs=1e-9)

    def test_call_bounded_by_spot(self):
        """Test 0 <= call <= S for a very high volatility."""
        call = black_scholes_price(OptionType.CALL, 100.0, 100.0, 1.0, 4.0, 0.05)
        assert 0.0 <= call <= 100.0

    def test_grid_matches_scalar_price(self):
        """Test the vectorised grid reproduces scalar prices."""
        spots = np.array([400.0, 450.0, 500.0])
        grid = black_scholes_price_grid(OptionType.PUT, spots, 450.0, 0.5, 0.2, 0.05)

        for spot, price in zip(spots, grid):
            assert price == pytest.approx(black_scholes_price(OptionType.PUT, spot, 450.0, 0.5, 0.2, 0.05))

    def test_grid_broadcasts_volatilities(self):
        """Test the grid accepts a volatility array with a scalar spot."""
        vols = np.linspace(0.1, 0.5, 5)
        grid = black_scholes_price_grid(OptionType.CALL, 100.0, 100.0, 1.0, vols, 0.05)

        assert grid.shape == (5,)
        assert np.all(np.diff(grid) > 0)

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"underlying_price": 0.0}, "underlying_price"),
            ({"underlying_price": -5.0}, "underlying_price"),
            ({"strike": 0.0}, "strike"),
            ({"volatility": -0.1}, "volatility"),
            ({"volatility": float("nan")}, "volatility"),
            ({"risk_free_rate": float("inf")}, "risk_free_rate"),
        ],
    )
    def test_domain_errors(self, kwargs, field):
        """Test out-of-domain inputs raise DomainRangeError, never produce a price."""
        args = {
            "option_type": OptionType.CALL,
            "underlying_price": 100.0,
            "strike": 100.0,
            "time_to_expiry": 1.0,
            "volatility": 0.2,
            "risk_free_rate": 0.05,
        }
        args.update(kwargs)

        with pytest.raises(DomainRangeError) as exc_info:
            black_scholes_price(**args)
        assert exc_info.value.field == field

    def test_time_to_expiration_uses_calendar_days(self):
        """Test T = calendar days / 365."""
        assert time_to_expiration(date(2026, 3, 20), AS_OF) == pytest.approx(59 / 365)


class TestBlackScholesGreeks:
    """Test analytic Greeks."""

    @pytest.mark.parametrize("S,K,T,sigma,r,q", PARITY_CASES)
    def test_greek_bounds(self, S, K, T, sigma, r, q):
        """Test call delta in [0, 1], put delta in [-1, 0], gamma and vega >= 0."""
        call = black_scholes_greeks(OptionType.CALL, S, K, T, sigma, r, q)
        put = black_scholes_greeks(OptionType.PUT, S, K, T, sigma, r, q)

        assert 0.0 <= call.delta <= 1.0
        assert -1.0 <= put.delta <= 0.0
        assert call.gamma >= 0.0
        assert put.gamma >= 0.0
        assert call.vega >= 0.0
        assert put.vega >= 0.0

    @pytest.mark.parametrize("S,K,T,sigma,r,q", PARITY_CASES)
    def test_call_put_delta_gap(self, S, K, T, sigma, r, q):
        """Test call delta - put delta = e^(-qT) and equal gamma/vega."""
        call = black_scholes_greeks(OptionType.CALL, S, K, T, sigma, r, q)
        put = black_scholes_greeks(OptionType.PUT, S, K, T, sigma, r, q)

        assert call.delta - put.delta == pytest.approx(math.exp(-q * T), abs=1e-9)
        assert call.gamma == pytest.approx(put.gamma)
        assert call.vega == pytest.approx(put.vega)

    @pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
    def test_greeks_match_finite_differences(self, option_type):
        """Test delta, gamma, vega (per point), rho (per point) and theta (per day)."""
        S, K, T, sigma, r = 100.0, 105.0, 0.5, 0.25, 0.04
        greeks = black_scholes_greeks(option_type, S, K, T, sigma, r)

        def price(S=S, T=T, sigma=sigma, r=r):
            return black_scholes_price(option_type, S, K, T, sigma, r)

        h = 0.01
        assert greeks.delta == pytest.approx((price(S=S + h) - price(S=S - h)) / (2 * h), abs=1e-5)
        assert greeks.gamma == pytest.approx(
            (price(S=S + h) - 2 * price() + price(S=S - h)) / (h * h), abs=1e-3
        )
        assert greeks.vega == pytest.approx((price(sigma=sigma + 0.001) - price(sigma=sigma - 0.001)) / 0.2, abs=1e-5)
        assert greeks.rho == pytest.approx((price(r=r + 0.001) - price(r=r - 0.001)) / 0.2, abs=1e-5)
        assert greeks.theta == pytest.approx(price(T=T - 1 / 365) - price(), abs=1e-3)

    def test_expired_greeks_are_zero(self):
        """Test T <= 0 yields all-zero Greeks."""
        greeks = black_scholes_greeks(OptionType.CALL, 110.0, 100.0, 0.0, 0.2, 0.05)
        assert greeks.to_dict() == {"delta": 0.0, "gamma": 0.0, "theta": 0.0, "vega": 0.0, "rho": 0.0}

    def test_zero_volatility_itm_call_has_unit_delta(self):
        """Test sigma = 0 in the money: delta e^(-qT), gamma and vega zero."""
        greeks = black_scholes_greeks(OptionType.CALL, 100.0, 90.0, 1.0, 0.0, 0.05)

        assert greeks.delta == pytest.approx(1.0)
        assert greeks.gamma == 0.0
        assert greeks.vega == 0.0

    def test_theta_negative_for_long_atm_call(self):
        """Test a long ATM call loses value each day."""
        contract = OptionContract("SPY", OptionType.CALL, 450.0, date(2026, 3, 20))
        greeks = calculate_option_greeks(contract, 450.0, 0.2, 0.05, as_of=AS_OF)

        assert greeks.theta < 0


class TestImpliedVolatility:
    """Test the implied-volatility solver."""

    @pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
    @pytest.mark.parametrize("strike", [90.0, 100.0, 110.0])
    @pytest.mark.parametrize("sigma", [0.15, 0.25, 0.40])
    def test_round_trip(self, option_type, strike, sigma):
        """Test IV(price(sigma)) recovers sigma within 1e-4."""
        contract = OptionContract("XYZ", option_type, strike, date(2026, 3, 20))
        price = calculate_option_price(contract, 100.0, sigma, 0.05, as_of=AS_OF)

        implied = calculate_implied_volatility(contract, 100.0, price, 0.05, as_of=AS_OF)

        assert implied == pytest.approx(sigma, abs=1e-4)

    def test_iteration_cap_raises_convergence_error(self):
        """Test max_iterations=1 from a distant seed cannot converge."""
        contract = OptionContract("XYZ", OptionType.CALL, 100.0, date(2026, 3, 20))
        price = calculate_option_price(contract, 100.0, 0.2, 0.05, as_of=AS_OF)

        with pytest.raises(ConvergenceError) as exc_info:
            calculate_implied_volatility(
                contract, 100.0, price, 0.05, as_of=AS_OF, initial_guess=1.5, max_iterations=1
            )

        assert exc_info.value.iterations == 1
        assert exc_info.value.last_estimate is not None

    def test_price_below_intrinsic_rejected(self):
        """Test a price under the no-arbitrage floor raises DomainRangeError."""
        contract = OptionContract("XYZ", OptionType.CALL, 80.0, date(2026, 3, 20))

        with pytest.raises(DomainRangeError) as exc_info:
            calculate_implied_volatility(contract, 100.0, 15.0, 0.05, as_of=AS_OF)
        assert exc_info.value.field == "market_price"

    def test_price_above_spot_rejected(self):
        """Test a call priced above the spot raises DomainRangeError."""
        contract = OptionContract("XYZ", OptionType.CALL, 100.0, date(2026, 3, 20))

        with pytest.raises(DomainRangeError):
            calculate_implied_volatility(contract, 100.0, 120.0, 0.05, as_of=AS_OF)

    def test_expired_contract_rejected(self):
        """Test IV is undefined once the contract has expired."""
        contract = OptionContract("XYZ", OptionType.PUT, 100.0, AS_OF)

        with pytest.raises(DomainRangeError) as exc_info:
            calculate_implied_volatility(contract, 100.0, 2.0, 0.05, as_of=AS_OF)
        assert exc_info.value.field == "expiration"
