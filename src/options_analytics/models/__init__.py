"""
Core Data Models

Contracts, legs, Greeks, market snapshots, positions and trade records.
"""

from options_analytics.models.contracts import (
    GreeksCalculation,
    MarketSnapshot,
    OpenAction,
    OptionContract,
    OptionsLeg,
    OptionType,
    PositionSide,
)
from options_analytics.models.positions import (
    HistoricalTrade,
    OptionsPosition,
    PositionStatus,
)

__all__ = [
    "GreeksCalculation",
    "MarketSnapshot",
    "OpenAction",
    "OptionContract",
    "OptionsLeg",
    "OptionType",
    "PositionSide",
    "HistoricalTrade",
    "OptionsPosition",
    "PositionStatus",
]
