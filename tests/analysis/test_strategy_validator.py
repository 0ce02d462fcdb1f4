"""
Tests for pre-execution strategy validation.
"""

from datetime import timedelta

import pytest

from options_analytics.analysis import (
    MarketConditions,
    MarketTrend,
    RiskLevel,
    StrategyConstraints,
    assess_risk_level,
    validate_multi_leg_strategy,
)
from options_analytics.errors import DomainRangeError
from options_analytics.models.contracts import OptionContract, OptionsLeg, OptionType, PositionSide
from options_analytics.strategies import create_cash_secured_put, create_custom
from tests.fixtures.market_fixtures import AS_OF, EXPIRATION


def _short_call(strike=460.0, price=3.0):
    contract = OptionContract("SPY", OptionType.CALL, strike, EXPIRATION)
    return OptionsLeg(contract=contract, side=PositionSide.SHORT, quantity=1, entry_price=price)


class TestRiskLevel:
    """Test assess_risk_level."""

    def test_iron_condor_is_medium(self, sample_iron_condor):
        """Test 700 / 300 = 2.33."""
        assert assess_risk_level(sample_iron_condor) == RiskLevel.MEDIUM

    def test_debit_spread_is_low(self, sample_bull_call_spread):
        assert assess_risk_level(sample_bull_call_spread) == RiskLevel.LOW

    def test_unlimited_profit_is_low(self, sample_long_call):
        assert assess_risk_level(sample_long_call) == RiskLevel.LOW

    def test_unlimited_loss_is_high(self):
        assert assess_risk_level(create_custom([_short_call()])) == RiskLevel.HIGH

    def test_lopsided_credit_is_high(self):
        """Test 9700 / 300 > 3."""
        assert assess_risk_level(create_cash_secured_put("XYZ", 100.0, EXPIRATION, 3.0)) == RiskLevel.HIGH


class TestExpirationChecks:
    """Test expiry errors and warnings."""

    def test_clean_strategy_is_valid(self, sample_iron_condor, market_conditions):
        result = validate_multi_leg_strategy(sample_iron_condor, market_conditions=market_conditions, as_of=AS_OF)

        assert result.is_valid
        assert result.errors == ()
        assert result.warnings == ()
        assert result.risk_level == RiskLevel.MEDIUM

    def test_expired_legs_are_errors(self, sample_iron_condor, log_messages):
        result = validate_multi_leg_strategy(sample_iron_condor, as_of=EXPIRATION)

        assert not result.is_valid
        assert len(result.errors) == 4
        assert "Option SPY260320P00430000 has expired" in result.errors
        assert any("rejected" in message for message in log_messages)

    def test_near_expiry_is_warning(self, sample_iron_condor):
        result = validate_multi_leg_strategy(sample_iron_condor, as_of=EXPIRATION - timedelta(days=5))

        assert result.is_valid
        assert "Option SPY260320C00460000 expires in 5 days" in result.warnings


class TestMarketChecks:
    """Test assignment, liquidity and regime warnings."""

    @pytest.mark.parametrize("price", [0.0, -450.0])
    def test_rejects_non_positive_underlying_price(self, price):
        with pytest.raises(DomainRangeError) as exc_info:
            MarketConditions(underlying_price=price)
        assert exc_info.value.field == "underlying_price"

    def test_itm_short_call_near_expiry(self, sample_covered_call):
        market = MarketConditions(underlying_price=470.0)

        result = validate_multi_leg_strategy(
            sample_covered_call, market_conditions=market, as_of=EXPIRATION - timedelta(days=20)
        )

        assert any("Early assignment risk" in warning for warning in result.warnings)

    def test_otm_short_call_no_assignment_warning(self, sample_covered_call):
        market = MarketConditions(underlying_price=450.0)

        result = validate_multi_leg_strategy(
            sample_covered_call, market_conditions=market, as_of=EXPIRATION - timedelta(days=20)
        )

        assert not any("assignment" in warning for warning in result.warnings)

    def test_low_volume_leg(self, sample_iron_condor):
        market = MarketConditions(
            underlying_price=450.0,
            option_volumes={"SPY260320P00430000": 5, "SPY260320P00440000": 500},
        )

        result = validate_multi_leg_strategy(sample_iron_condor, market_conditions=market, as_of=AS_OF)

        liquidity = [warning for warning in result.warnings if "Low liquidity" in warning]
        assert liquidity == ["Low liquidity for SPY260320P00430000. May have difficulty closing position."]

    def test_straddle_in_high_iv(self, sample_straddle):
        market = MarketConditions(underlying_price=450.0, volatility_rank=85.0)

        result = validate_multi_leg_strategy(sample_straddle, market_conditions=market, as_of=AS_OF)

        assert "High volatility environment. Long straddle may be expensive." in result.warnings

    def test_iron_condor_in_low_iv(self, sample_iron_condor):
        market = MarketConditions(underlying_price=450.0, volatility_rank=10.0)

        result = validate_multi_leg_strategy(sample_iron_condor, market_conditions=market, as_of=AS_OF)

        assert any("Low volatility environment" in warning for warning in result.warnings)
        assert result.is_valid

    def test_trend_recommendations(self, sample_covered_call):
        csp = create_cash_secured_put("SPY", 440.0, EXPIRATION, 4.0)

        bullish = validate_multi_leg_strategy(
            csp, market_conditions=MarketConditions(450.0, trend=MarketTrend.BULLISH), as_of=AS_OF
        )
        bearish = validate_multi_leg_strategy(
            sample_covered_call, market_conditions=MarketConditions(450.0, trend="bearish"), as_of=AS_OF
        )

        assert bullish.recommendations == ("Bullish market conditions favor cash-secured puts.",)
        assert "Bearish conditions may result in stock assignment for covered calls." in bearish.recommendations


class TestStructureChecks:
    """Test leg-count and unlimited-risk warnings."""

    def test_unlimited_risk_warning(self):
        result = validate_multi_leg_strategy(create_custom([_short_call()]), as_of=AS_OF)

        assert "Strategy has unlimited risk. Consider risk management measures." in result.warnings
        assert result.risk_level == RiskLevel.HIGH

    def test_complex_strategy_warning(self, sample_iron_condor):
        custom = create_custom(list(sample_iron_condor.legs) + [_short_call(480.0, 0.5)])

        result = validate_multi_leg_strategy(custom, as_of=AS_OF)

        assert any(warning.startswith("Complex strategy") for warning in result.warnings)


class TestConstraints:
    """Test account and risk constraints."""

    @pytest.mark.parametrize(
        "constraints,message",
        [
            (StrategyConstraints(buying_power=500.0), "Insufficient buying power"),
            (StrategyConstraints(cash=500.0), "Insufficient collateral"),
            (StrategyConstraints(max_risk=500.0), "exceeds risk limit"),
            (StrategyConstraints(max_capital_required=500.0), "exceeds limit"),
        ],
    )
    def test_capital_constraints(self, sample_iron_condor, constraints, message):
        result = validate_multi_leg_strategy(sample_iron_condor, constraints=constraints, as_of=AS_OF)

        assert not result.is_valid
        assert any(message in error for error in result.errors)

    def test_constraints_satisfied(self, sample_iron_condor, market_conditions):
        constraints = StrategyConstraints(
            max_risk=1000.0,
            max_capital_required=1000.0,
            buying_power=5000.0,
            cash=5000.0,
            delta_range=(-0.1, 0.1),
        )

        result = validate_multi_leg_strategy(
            sample_iron_condor, constraints=constraints, market_conditions=market_conditions, as_of=AS_OF
        )

        assert result.is_valid

    def test_delta_out_of_range(self, sample_iron_condor, market_conditions):
        constraints = StrategyConstraints(delta_range=(0.5, 1.0))

        result = validate_multi_leg_strategy(
            sample_iron_condor, constraints=constraints, market_conditions=market_conditions, as_of=AS_OF
        )

        assert any("outside allowed range" in error for error in result.errors)

    def test_minimum_probability_of_profit(self, sample_iron_condor, market_conditions):
        constraints = StrategyConstraints(min_probability_of_profit=0.9)

        result = validate_multi_leg_strategy(
            sample_iron_condor, constraints=constraints, market_conditions=market_conditions, as_of=AS_OF
        )

        assert any("Probability of profit" in error for error in result.errors)

    def test_greeks_constraints_need_implied_volatility(self, sample_iron_condor):
        constraints = StrategyConstraints(delta_range=(-0.1, 0.1))

        without_market = validate_multi_leg_strategy(sample_iron_condor, constraints=constraints, as_of=AS_OF)
        without_iv = validate_multi_leg_strategy(
            sample_iron_condor,
            constraints=constraints,
            market_conditions=MarketConditions(underlying_price=450.0),
            as_of=AS_OF,
        )

        for result in (without_market, without_iv):
            assert result.is_valid
            assert any("Implied volatility not provided" in warning for warning in result.warnings)

    def test_account_constraints_apply_without_market(self, sample_iron_condor):
        result = validate_multi_leg_strategy(
            sample_iron_condor, constraints=StrategyConstraints(max_risk=500.0), as_of=AS_OF
        )

        assert not result.is_valid
        assert result.errors == ("Max loss 700.00 exceeds risk limit 500.00",)
