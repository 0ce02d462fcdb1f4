"""
Options Analytics

Black-Scholes pricing and Greeks, multi-leg strategy construction and
analysis, position lifecycle and portfolio performance analytics.

Layers (each depends only on the ones above it):
    models      - contracts, legs, Greeks, market snapshots, positions, trades
    pricing     - Black-Scholes, implied volatility, GreeksCalculator
    strategies  - variant specs, OptionsStrategy, builders, payoff
    analysis    - MultiLegAnalyzer, validation, position lifecycle
    analytics   - attribution, risk metrics, trade statistics, reports
"""

from options_analytics.analysis import (
    MultiLegAnalyzer,
    StrategyGreeksValidator,
    close_position,
    expire_position,
    open_position,
    revalue_position,
    validate_multi_leg_strategy,
)
from options_analytics.analytics import PerformanceAnalytics, calculate_pnl_attribution
from options_analytics.errors import (
    ConvergenceError,
    DomainRangeError,
    OptionsAnalyticsError,
    PositionStateError,
    StrategyDefinitionError,
)
from options_analytics.models import (
    GreeksCalculation,
    HistoricalTrade,
    MarketSnapshot,
    OptionContract,
    OptionsLeg,
    OptionsPosition,
    OptionType,
    PositionSide,
)
from options_analytics.pricing import GreeksCalculator, calculate_implied_volatility
from options_analytics.strategies import OptionsStrategy, StrategyType, build_strategy

__version__ = "0.6.0"

__all__ = [
    "MultiLegAnalyzer",
    "StrategyGreeksValidator",
    "close_position",
    "expire_position",
    "open_position",
    "revalue_position",
    "validate_multi_leg_strategy",
    "PerformanceAnalytics",
    "calculate_pnl_attribution",
    "ConvergenceError",
    "DomainRangeError",
    "OptionsAnalyticsError",
    "PositionStateError",
    "StrategyDefinitionError",
    "GreeksCalculation",
    "HistoricalTrade",
    "MarketSnapshot",
    "OptionContract",
    "OptionsLeg",
    "OptionsPosition",
    "OptionType",
    "PositionSide",
    "GreeksCalculator",
    "calculate_implied_volatility",
    "OptionsStrategy",
    "StrategyType",
    "build_strategy",
]
