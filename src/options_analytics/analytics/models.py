"""
Performance Analytics Data Models

Results of P&L attribution, risk metrics, trade statistics and the
performance report.

Key patterns:
- dataclass(slots=True, frozen=True): reports are plain values, safe to
  serialize (see options_analytics.serialization)
- Period breakdowns are plain dicts keyed by ISO day / ISO week / month
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from options_analytics.analysis.models import RiskLevel
from options_analytics.models.contracts import GreeksCalculation


class AnalysisPeriod(str, Enum):
    """Look-back window of a performance report."""

    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"


@dataclass(slots=True, frozen=True)
class PositionAttribution:
    """
    Greek decomposition of one position's P&L between two snapshots.

    total_pnl == delta + gamma + theta + vega + rho + residual contributions.
    """

    position_id: str
    strategy: str
    underlying: str
    total_pnl: float
    delta_contribution: float
    gamma_contribution: float
    theta_contribution: float
    vega_contribution: float
    rho_contribution: float
    residual_contribution: float

    @property
    def explained_pnl(self) -> float:
        """P&L explained by the Greeks (everything except the residual)."""
        return (
            self.delta_contribution
            + self.gamma_contribution
            + self.theta_contribution
            + self.vega_contribution
            + self.rho_contribution
        )


@dataclass(slots=True, frozen=True)
class PnLAttribution:
    """Portfolio P&L attribution with per-position, per-strategy and per-underlying totals."""

    total_pnl: float
    delta_contribution: float
    gamma_contribution: float
    theta_contribution: float
    vega_contribution: float
    rho_contribution: float
    residual_contribution: float
    by_position: tuple[PositionAttribution, ...]
    by_strategy: dict[str, float]
    by_underlying: dict[str, float]


@dataclass(slots=True, frozen=True)
class DrawdownMetrics:
    """
    Largest peak-to-trough decline of cumulative P&L.

    Attributes:
        max_drawdown: Decline in P&L units (>= 0)
        max_drawdown_percent: Decline as a percent of the peak (0 when the peak is 0)
        peak_index: Index of the peak observation (None when the peak is the starting 0)
        trough_index: Index of the trough observation (None without a drawdown)
    """

    max_drawdown: float
    max_drawdown_percent: float
    peak_index: int | None = None
    trough_index: int | None = None


@dataclass(slots=True, frozen=True)
class RiskMetrics:
    """
    Risk metrics over a return series.

    Attributes:
        value_at_risk_95: 5th percentile return
        value_at_risk_99: 1st percentile return
        expected_shortfall: Mean return beyond the VaR (95% by default)
        max_drawdown: Largest peak-to-trough decline of cumulative P&L
        max_drawdown_percent: Same as a percent of the peak
        sharpe_ratio: Annualized Sharpe ratio
        sortino_ratio: Annualized Sortino ratio (inf without negative returns)
        calmar_ratio: Total P&L / max(max_drawdown, 1)
        volatility: Annualized volatility
        leverage: Capital at risk / portfolio value
    """

    value_at_risk_95: float
    value_at_risk_99: float
    expected_shortfall: float
    max_drawdown: float
    max_drawdown_percent: float
    sharpe_ratio: float
    sortino_ratio: float
    calmar_ratio: float
    volatility: float
    leverage: float = 0.0


@dataclass(slots=True, frozen=True)
class StrategyMetrics:
    """Trade statistics of one strategy tag."""

    strategy: str
    total_trades: int
    total_pnl: float
    win_rate: float
    avg_win: float
    avg_loss: float
    profit_factor: float
    expectancy: float
    max_consecutive_wins: int
    max_consecutive_losses: int
    best_trade: float
    worst_trade: float
    avg_holding_period: float
    sharpe_ratio: float
    max_drawdown: float
    max_drawdown_percent: float
    calmar_ratio: float

    @classmethod
    def empty(cls, strategy: str) -> "StrategyMetrics":
        return cls(
            strategy=strategy,
            total_trades=0,
            total_pnl=0.0,
            win_rate=0.0,
            avg_win=0.0,
            avg_loss=0.0,
            profit_factor=0.0,
            expectancy=0.0,
            max_consecutive_wins=0,
            max_consecutive_losses=0,
            best_trade=0.0,
            worst_trade=0.0,
            avg_holding_period=0.0,
            sharpe_ratio=0.0,
            max_drawdown=0.0,
            max_drawdown_percent=0.0,
            calmar_ratio=0.0,
        )


@dataclass(slots=True, frozen=True)
class PnLAnalysis:
    """Realized/unrealized P&L summary of a report period."""

    total_pnl: float
    realized_pnl: float
    unrealized_pnl: float
    return_percent: float
    total_invested: float
    daily_pnl: tuple[float, ...]
    volatility: float
    winning_trades: int
    losing_trades: int
    total_trades: int


@dataclass(slots=True, frozen=True)
class GreeksAnalysis:
    """Exposure summary of the open positions' dollar Greeks."""

    portfolio_greeks: GreeksCalculation
    delta_exposure: float
    gamma_exposure: float
    theta_decay: float
    vega_exposure: float
    rho_exposure: float
    net_delta: float
    is_market_neutral: bool
    time_decay_risk: RiskLevel


@dataclass(slots=True, frozen=True)
class StrategyBreakdown:
    """Per-strategy metrics with the best/worst strategies by P&L and win rate."""

    by_strategy: dict[str, StrategyMetrics]
    most_profitable: str | None
    least_profitable: str | None
    best_win_rate: str | None
    worst_win_rate: str | None


@dataclass(slots=True, frozen=True)
class PeriodPnL:
    """Realized P&L of one calendar period."""

    period: str
    pnl: float


@dataclass(slots=True, frozen=True)
class TimeAnalysis:
    """Realized P&L by day (YYYY-MM-DD), ISO week (YYYY-Www) and month (YYYY-MM)."""

    daily_pnl: dict[str, float]
    weekly_pnl: dict[str, float]
    monthly_pnl: dict[str, float]
    best_month: PeriodPnL | None
    worst_month: PeriodPnL | None
    avg_monthly_return: float
    monthly_volatility: float


@dataclass(slots=True, frozen=True)
class PerformanceReport:
    """Complete portfolio performance report for one look-back period."""

    period: AnalysisPeriod
    start_date: date
    end_date: date
    portfolio_value: float
    pnl_analysis: PnLAnalysis
    risk_metrics: RiskMetrics
    greeks_analysis: GreeksAnalysis
    strategy_breakdown: StrategyBreakdown
    time_analysis: TimeAnalysis
    recommendations: tuple[str, ...]
    generated_at: datetime
