"""Test fixtures for options analytics tests.

This package provides reusable test fixtures for:
- Market snapshots and market conditions
- Built strategies (iron condor, spreads, straddle, covered call, ...)
- Positions and closed trade histories

Fixtures are auto-discovered by pytest through conftest.py.
"""

from tests.fixtures.market_fixtures import (
    AS_OF,
    EXPIRATION,
    market_conditions,
    market_snapshot,
)
from tests.fixtures.strategy_fixtures import (
    sample_bull_call_spread,
    sample_covered_call,
    sample_iron_condor,
    sample_long_call,
    sample_straddle,
)
from tests.fixtures.trade_fixtures import (
    open_condor_position,
    sample_trades,
)

__all__ = [
    # Market fixtures
    "AS_OF",
    "EXPIRATION",
    "market_conditions",
    "market_snapshot",
    # Strategy fixtures
    "sample_bull_call_spread",
    "sample_covered_call",
    "sample_iron_condor",
    "sample_long_call",
    "sample_straddle",
    # Trade fixtures
    "open_condor_position",
    "sample_trades",
]
