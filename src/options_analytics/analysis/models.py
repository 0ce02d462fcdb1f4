"""
Analysis Data Models

Outputs of the multi-leg analyzer and validator, plus the market and
constraint inputs of validation.

Key patterns:
- dataclass(slots=True, frozen=True): analysis results are values
- Profiles are tuples of small point records
- Validation findings are data (errors/warnings lists), never exceptions
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Mapping

from options_analytics.errors import require_positive
from options_analytics.models.contracts import GreeksCalculation


class RiskLevel(str, Enum):
    """Overall risk classification of a strategy."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MarketTrend(str, Enum):
    """Directional market regime."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(slots=True, frozen=True)
class PnLPoint:
    """At-expiration P&L (dollars) at one underlying price."""

    price: float
    pnl: float


@dataclass(slots=True, frozen=True)
class TimeDecayPoint:
    """Strategy value and theta with a given number of days remaining."""

    days_remaining: int
    portfolio_value: float
    theta: float


@dataclass(slots=True, frozen=True)
class VolatilityPoint:
    """Strategy value and vega at one volatility level."""

    volatility: float
    portfolio_value: float
    vega: float


@dataclass(slots=True, frozen=True)
class StrategyRiskMetrics:
    """
    Strategy-level risk metrics.

    Attributes:
        greeks: Aggregated strategy Greeks
        value_at_risk: One-day delta VaR (|delta| x one-sigma daily move x multiplier)
        max_drawdown: Maximum loss of the strategy (math.inf = unlimited)
        probability_of_profit: Probability the expiration payoff is positive (0-1)
        expected_value: Expected expiration P&L in dollars
    """

    greeks: GreeksCalculation
    value_at_risk: float
    max_drawdown: float
    probability_of_profit: float
    expected_value: float


@dataclass(slots=True, frozen=True)
class StrategyAnalysis:
    """
    Complete multi-leg analysis of a strategy.

    Attributes:
        strategy_name: Name of the analyzed strategy
        as_of: Valuation date
        greeks: Strategy Greeks (sign x contracts x per-share Greeks)
        risk_metrics: StrategyRiskMetrics
        pnl_profile: At-expiration P&L over the price range
        time_decay_profile: Value/theta as expiration approaches
        volatility_profile: Value/vega over the volatility range
        recommendations: Advisory strings
        current_value: Signed theoretical value of all legs in dollars
    """

    strategy_name: str
    as_of: date
    greeks: GreeksCalculation
    risk_metrics: StrategyRiskMetrics
    pnl_profile: tuple[PnLPoint, ...]
    time_decay_profile: tuple[TimeDecayPoint, ...]
    volatility_profile: tuple[VolatilityPoint, ...]
    recommendations: tuple[str, ...]
    current_value: float


@dataclass(slots=True, frozen=True)
class MarketConditions:
    """
    Market regime inputs for strategy validation.

    Attributes:
        underlying_price: Current underlying price
        volatility_rank: IV rank in [0, 100]
        trend: Directional regime
        option_volumes: Daily volume per OCC option symbol (missing = unknown)
        implied_volatility: Current IV, needed for Greeks-based constraint checks
        risk_free_rate: Rate used for Greeks-based constraint checks
    """

    underlying_price: float
    volatility_rank: float = 50.0
    trend: MarketTrend = MarketTrend.NEUTRAL
    option_volumes: Mapping[str, int] = field(default_factory=dict)
    implied_volatility: float | None = None
    risk_free_rate: float = 0.05

    def __post_init__(self):
        require_positive(self.underlying_price, "underlying_price")
        if not isinstance(self.trend, MarketTrend):
            object.__setattr__(self, "trend", MarketTrend(str(self.trend).lower()))


@dataclass(slots=True, frozen=True)
class StrategyConstraints:
    """
    Account and risk constraints; None disables a check.

    Attributes:
        max_risk: Maximum acceptable max loss in dollars
        max_capital_required: Maximum acceptable margin in dollars
        buying_power: Available buying power (margin must fit)
        cash: Available cash (collateral must fit)
        delta_range: Allowed (min, max) strategy delta
        min_probability_of_profit: Minimum acceptable probability of profit
    """

    max_risk: float | None = None
    max_capital_required: float | None = None
    buying_power: float | None = None
    cash: float | None = None
    delta_range: tuple[float, float] | None = None
    min_probability_of_profit: float | None = None


@dataclass(slots=True, frozen=True)
class StrategyValidation:
    """
    Result of validating a strategy before execution.

    Attributes:
        is_valid: True when there are no errors
        errors: Blocking findings
        warnings: Non-blocking findings
        risk_level: LOW / MEDIUM / HIGH
        recommendations: Market-condition advice
    """

    is_valid: bool
    errors: tuple[str, ...]
    warnings: tuple[str, ...]
    risk_level: RiskLevel
    recommendations: tuple[str, ...]
