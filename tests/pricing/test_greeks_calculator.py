"""
Tests for strategy and portfolio Greeks aggregation.
"""

from datetime import timedelta

import pytest

from options_analytics.models.contracts import GreeksCalculation, MarketSnapshot, OptionContract, OptionType
from options_analytics.pricing.black_scholes import calculate_option_greeks, calculate_option_price
from options_analytics.pricing.greeks_calculator import GreeksCalculator
from tests.fixtures.market_fixtures import AS_OF, EXPIRATION


@pytest.fixture
def calculator():
    return GreeksCalculator()


class TestStrategyGreeks:
    """Test leg and strategy aggregation."""

    def test_single_long_leg_equals_contract_greeks(self, calculator, sample_long_call):
        """Test a 1-lot long call aggregates to the per-share contract Greeks."""
        leg = sample_long_call.legs[0]
        expected = calculate_option_greeks(leg.contract, 100.0, 0.25, 0.05, as_of=AS_OF)

        greeks = calculator.strategy_greeks(sample_long_call, 100.0, 0.25, 0.05, as_of=AS_OF)

        assert greeks.delta == pytest.approx(expected.delta)
        assert greeks.gamma == pytest.approx(expected.gamma)
        assert greeks.theta == pytest.approx(expected.theta)

    def test_short_leg_flips_sign(self, calculator, sample_bull_call_spread):
        """Test the short leg contributes negatively."""
        long_leg, short_leg = sorted(sample_bull_call_spread.legs, key=lambda leg: leg.sign, reverse=True)
        long_greeks = calculate_option_greeks(long_leg.contract, 450.0, 0.2, 0.05, as_of=AS_OF)
        short_greeks = calculate_option_greeks(short_leg.contract, 450.0, 0.2, 0.05, as_of=AS_OF)

        greeks = calculator.strategy_greeks(sample_bull_call_spread, 450.0, 0.2, 0.05, as_of=AS_OF)

        assert greeks.delta == pytest.approx(long_greeks.delta - short_greeks.delta)
        assert greeks.vega == pytest.approx(long_greeks.vega - short_greeks.vega)
        assert greeks.delta > 0

    def test_dollar_greeks_scale_by_multiplier(self, calculator, sample_iron_condor):
        """Test dollar=True multiplies every Greek by the contract multiplier."""
        per_share = calculator.strategy_greeks(sample_iron_condor, 450.0, 0.2, 0.05, as_of=AS_OF)
        dollar = calculator.strategy_greeks(sample_iron_condor, 450.0, 0.2, 0.05, as_of=AS_OF, dollar=True)

        for name, value in per_share.to_dict().items():
            assert getattr(dollar, name) == pytest.approx(value * 100)

    def test_iron_condor_is_near_delta_neutral(self, calculator, sample_iron_condor):
        """Test a centred condor has small delta, short gamma and positive theta."""
        greeks = calculator.strategy_greeks(sample_iron_condor, 450.0, 0.2, 0.05, as_of=AS_OF)

        assert abs(greeks.delta) < 0.05
        assert greeks.gamma < 0
        assert greeks.theta > 0
        assert greeks.vega < 0

    def test_straddle_is_long_gamma_and_vega(self, calculator, sample_straddle):
        greeks = calculator.strategy_greeks(sample_straddle, 450.0, 0.2, 0.05, as_of=AS_OF)

        assert greeks.gamma > 0
        assert greeks.vega > 0
        assert greeks.theta < 0

    def test_expired_strategy_has_zero_greeks(self, calculator, sample_iron_condor):
        """Test every leg past expiration contributes nothing."""
        greeks = calculator.strategy_greeks(
            sample_iron_condor, 450.0, 0.2, 0.05, as_of=EXPIRATION + timedelta(days=1)
        )

        assert greeks == GreeksCalculation.zero()


class TestStrategyValue:
    """Test theoretical strategy valuation."""

    def test_long_call_value_in_dollars(self, calculator, sample_long_call):
        contract = sample_long_call.legs[0].contract
        price = calculate_option_price(contract, 100.0, 0.25, 0.05, as_of=AS_OF)

        value = calculator.strategy_value(sample_long_call, 100.0, 0.25, 0.05, as_of=AS_OF)

        assert value == pytest.approx(price * 100)

    def test_credit_strategy_has_negative_value(self, calculator, sample_iron_condor):
        """Test a short condor is a liability while the short strikes have time value."""
        value = calculator.strategy_value(sample_iron_condor, 450.0, 0.2, 0.05, as_of=AS_OF)

        assert value < 0
        assert value > -1000  # bounded by the 10-point wing width

    def test_value_at_expiration_is_intrinsic(self, calculator, sample_bull_call_spread):
        """Test on expiration day the spread is worth its capped intrinsic value."""
        value = calculator.strategy_value(sample_bull_call_spread, 470.0, 0.2, 0.05, as_of=EXPIRATION)

        assert value == pytest.approx(1000.0)


class TestPortfolioGreeks:
    """Test portfolio aggregation across snapshots."""

    def test_portfolio_sums_strategies(self, calculator, sample_iron_condor, sample_long_call, market_snapshot):
        xyz_snapshot = MarketSnapshot(100.0, 0.30, 0.05, AS_OF)

        total = calculator.portfolio_greeks(
            [(sample_iron_condor, market_snapshot), (sample_long_call, xyz_snapshot)],
            dollar=True,
        )

        condor = calculator.strategy_greeks(sample_iron_condor, 450.0, 0.2, 0.05, as_of=AS_OF, dollar=True)
        call = calculator.strategy_greeks(sample_long_call, 100.0, 0.3, 0.05, as_of=AS_OF, dollar=True)
        assert total.delta == pytest.approx(condor.delta + call.delta)
        assert total.theta == pytest.approx(condor.theta + call.theta)

    def test_empty_portfolio_is_zero(self, calculator):
        assert calculator.portfolio_greeks([]) == GreeksCalculation.zero()


class TestGreeksSensitivity:
    """Test second-order sensitivities."""

    def test_call_delta_rises_with_price(self, calculator):
        contract = OptionContract("SPY", OptionType.CALL, 450.0, EXPIRATION)

        sensitivity = calculator.greeks_sensitivity(contract, 450.0, 0.2, 0.05, as_of=AS_OF)

        base = calculate_option_greeks(contract, 450.0, 0.2, 0.05, as_of=AS_OF)
        shifted = calculate_option_greeks(contract, 454.5, 0.2, 0.05, as_of=AS_OF)
        assert sensitivity.delta_change == pytest.approx(shifted.delta - base.delta)
        assert sensitivity.delta_change > 0

    def test_theta_decay_uses_next_day(self, calculator):
        contract = OptionContract("SPY", OptionType.PUT, 440.0, EXPIRATION)

        sensitivity = calculator.greeks_sensitivity(contract, 450.0, 0.2, 0.05, as_of=AS_OF)

        today = calculate_option_greeks(contract, 450.0, 0.2, 0.05, as_of=AS_OF)
        tomorrow = calculate_option_greeks(contract, 450.0, 0.2, 0.05, as_of=AS_OF + timedelta(days=1))
        assert sensitivity.theta_decay == pytest.approx(tomorrow.theta - today.theta)
