"""
Market fixtures for testing pricing and analysis.

All fixtures value on AS_OF (2026-01-20); strategies expire on EXPIRATION
(2026-03-20), 59 calendar days later.

Usage:
    def test_value(market_snapshot):
        assert market_snapshot.underlying_price == 450.0
"""

from datetime import date

import pytest

from options_analytics.analysis.models import MarketConditions, MarketTrend
from options_analytics.models.contracts import MarketSnapshot

AS_OF = date(2026, 1, 20)
EXPIRATION = date(2026, 3, 20)


@pytest.fixture
def market_snapshot():
    """
    SPY market snapshot at 450 with 20% volatility and a 5% rate.

    Returns:
        MarketSnapshot: underlying 450.0, volatility 0.20, rate 0.05, as_of AS_OF
    """
    return MarketSnapshot(
        underlying_price=450.0,
        volatility=0.20,
        risk_free_rate=0.05,
        as_of=AS_OF,
    )


@pytest.fixture
def market_conditions():
    """
    Neutral market regime at 450 with IV known (enables Greeks-based checks).

    Returns:
        MarketConditions: IV rank 50, neutral trend, implied volatility 0.20
    """
    return MarketConditions(
        underlying_price=450.0,
        volatility_rank=50.0,
        trend=MarketTrend.NEUTRAL,
        implied_volatility=0.20,
        risk_free_rate=0.05,
    )
