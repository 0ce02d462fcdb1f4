"""
Tests for StrategyGreeksValidator.
"""

import pytest

from options_analytics.analysis import StrategyGreeksLimits, StrategyGreeksValidator
from options_analytics.models.contracts import MarketSnapshot
from options_analytics.strategies import create_vertical_spread
from tests.fixtures.market_fixtures import AS_OF, EXPIRATION


def _snapshot(price: float, volatility: float = 0.20) -> MarketSnapshot:
    return MarketSnapshot(underlying_price=price, volatility=volatility, risk_free_rate=0.05, as_of=AS_OF)


@pytest.fixture
def validator():
    return StrategyGreeksValidator()


class TestIronCondorDelta:
    """Test iron condor neutrality limits."""

    def test_centred_condor_passes(self, validator, sample_iron_condor, market_snapshot):
        is_valid, violations = validator.validate_strategy(sample_iron_condor, market_snapshot)

        assert is_valid
        assert violations == []

    def test_condor_with_tested_call_side_fails(self, validator, sample_iron_condor, log_messages):
        is_valid, violations = validator.validate_strategy(sample_iron_condor, _snapshot(470.0, volatility=0.10))

        assert not is_valid
        assert "bearish bias" in violations[0]
        assert any("rejected" in message for message in log_messages)

    def test_custom_limit(self, sample_iron_condor, market_snapshot):
        validator = StrategyGreeksValidator(limits=StrategyGreeksLimits(iron_condor_max_abs_delta=0.01))

        is_valid, _ = validator.validate_strategy(sample_iron_condor, market_snapshot)

        assert not is_valid


class TestDirectionalLimits:
    """Test vertical spread and long volatility limits."""

    def test_single_vertical_passes(self, validator, sample_bull_call_spread, market_snapshot):
        is_valid, _ = validator.validate_strategy(sample_bull_call_spread, market_snapshot)
        assert is_valid

    def test_oversized_vertical_fails(self, validator, market_snapshot):
        spread = create_vertical_spread("SPY", "call", 450, 460, EXPIRATION, 6.0, 2.0, quantity=10)

        is_valid, violations = validator.validate_strategy(spread, market_snapshot)

        assert not is_valid
        assert violations[0].startswith("Vertical spread delta")

    def test_centred_straddle_passes(self, validator, sample_straddle):
        """Test at S = 445 the 450 straddle has near-zero delta (forward drift)."""
        is_valid, _ = validator.validate_strategy(sample_straddle, _snapshot(445.0))
        assert is_valid

    def test_drifted_straddle_fails(self, validator, sample_straddle):
        is_valid, violations = validator.validate_strategy(sample_straddle, _snapshot(470.0))

        assert not is_valid
        assert "Re-center the strikes" in violations[0]

    def test_unchecked_variant_passes(self, validator, sample_long_call):
        is_valid, violations = validator.validate_strategy(sample_long_call, _snapshot(130.0))

        assert is_valid
        assert violations == []
