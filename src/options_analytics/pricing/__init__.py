"""
Pricing & Greeks Engine

Black-Scholes-Merton valuation, analytic Greeks, implied volatility, and
strategy/portfolio Greeks aggregation.
"""

from options_analytics.pricing.black_scholes import (
    DAYS_PER_YEAR,
    black_scholes_greeks,
    black_scholes_price,
    black_scholes_price_grid,
    calculate_implied_volatility,
    calculate_option_greeks,
    calculate_option_price,
    d1_d2,
    intrinsic_value,
    time_to_expiration,
)
from options_analytics.pricing.greeks_calculator import GreeksCalculator, GreeksSensitivity

__all__ = [
    "DAYS_PER_YEAR",
    "black_scholes_greeks",
    "black_scholes_price",
    "black_scholes_price_grid",
    "calculate_implied_volatility",
    "calculate_option_greeks",
    "calculate_option_price",
    "d1_d2",
    "intrinsic_value",
    "time_to_expiration",
    "GreeksCalculator",
    "GreeksSensitivity",
]
