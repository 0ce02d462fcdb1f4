"""
Multi-Leg Analysis

Strategy analysis (Greeks, profiles, risk metrics, recommendations),
pre-execution validation and the position lifecycle.
"""

from options_analytics.analysis.analyzer import MultiLegAnalyzer
from options_analytics.analysis.greeks_validator import StrategyGreeksLimits, StrategyGreeksValidator
from options_analytics.analysis.models import (
    MarketConditions,
    MarketTrend,
    PnLPoint,
    RiskLevel,
    StrategyAnalysis,
    StrategyConstraints,
    StrategyRiskMetrics,
    StrategyValidation,
    TimeDecayPoint,
    VolatilityPoint,
)
from options_analytics.analysis.positions import (
    close_position,
    expire_position,
    open_position,
    revalue_position,
    to_historical_trade,
)
from options_analytics.analysis.validator import assess_risk_level, validate_multi_leg_strategy

__all__ = [
    "MultiLegAnalyzer",
    "StrategyGreeksLimits",
    "StrategyGreeksValidator",
    "MarketConditions",
    "MarketTrend",
    "PnLPoint",
    "RiskLevel",
    "StrategyAnalysis",
    "StrategyConstraints",
    "StrategyRiskMetrics",
    "StrategyValidation",
    "TimeDecayPoint",
    "VolatilityPoint",
    "close_position",
    "expire_position",
    "open_position",
    "revalue_position",
    "to_historical_trade",
    "assess_risk_level",
    "validate_multi_leg_strategy",
]
