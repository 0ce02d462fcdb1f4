"""
Performance Analytics

P&L attribution, risk metrics, per-strategy trade statistics and the
portfolio performance report.
"""

from options_analytics.analytics.attribution import calculate_pnl_attribution, calculate_position_attribution
from options_analytics.analytics.frames import daily_pnl, equity_curve, period_pnl, trades_to_frame
from options_analytics.analytics.models import (
    AnalysisPeriod,
    DrawdownMetrics,
    GreeksAnalysis,
    PeriodPnL,
    PerformanceReport,
    PnLAnalysis,
    PnLAttribution,
    PositionAttribution,
    RiskMetrics,
    StrategyBreakdown,
    StrategyMetrics,
    TimeAnalysis,
)
from options_analytics.analytics.performance import PerformanceAnalytics, period_start
from options_analytics.analytics.risk_metrics import (
    annualized_volatility,
    calculate_expected_shortfall,
    calculate_max_drawdown,
    calculate_risk_metrics,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_var,
)
from options_analytics.analytics.trade_statistics import calculate_strategy_metrics, consecutive_streaks

__all__ = [
    "calculate_pnl_attribution",
    "calculate_position_attribution",
    "daily_pnl",
    "equity_curve",
    "period_pnl",
    "trades_to_frame",
    "AnalysisPeriod",
    "DrawdownMetrics",
    "GreeksAnalysis",
    "PeriodPnL",
    "PerformanceReport",
    "PnLAnalysis",
    "PnLAttribution",
    "PositionAttribution",
    "RiskMetrics",
    "StrategyBreakdown",
    "StrategyMetrics",
    "TimeAnalysis",
    "PerformanceAnalytics",
    "period_start",
    "annualized_volatility",
    "calculate_expected_shortfall",
    "calculate_max_drawdown",
    "calculate_risk_metrics",
    "calculate_sharpe_ratio",
    "calculate_sortino_ratio",
    "calculate_var",
    "calculate_strategy_metrics",
    "consecutive_streaks",
]
