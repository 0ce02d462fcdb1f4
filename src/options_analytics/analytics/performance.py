"""
Portfolio Performance Analytics

Builds a PerformanceReport for a look-back period from open positions and
closed trades.

Key patterns:
- PerformanceAnalytics: stateless service configured by AnalyticsMetricsConfig
- Polars trade frames for daily/weekly/monthly P&L (see analytics.frames)
- numpy for risk statistics (see analytics.risk_metrics)

Report sections:
- P&L analysis: realized (period trades) + unrealized (open positions)
- Risk metrics: daily P&L as a fraction of portfolio value
  (raw dollars when portfolio value is 0); drawdown on dollar P&L
- Greeks analysis: summed dollar Greeks of open positions
- Strategy breakdown: StrategyMetrics per strategy tag
- Time analysis: P&L by day, ISO week and month
- Recommendations: rule-based hints from the above

Trades belong to a period when their open date falls in [start, end].
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Sequence

import numpy as np
from loguru import logger

from options_analytics.analysis.models import RiskLevel
from options_analytics.analytics.attribution import calculate_pnl_attribution
from options_analytics.analytics.frames import equity_curve, period_pnl, trades_to_frame
from options_analytics.analytics.models import (
    AnalysisPeriod,
    GreeksAnalysis,
    PeriodPnL,
    PerformanceReport,
    PnLAnalysis,
    PnLAttribution,
    RiskMetrics,
    StrategyBreakdown,
    StrategyMetrics,
    TimeAnalysis,
)
from options_analytics.analytics.risk_metrics import annualized_volatility, calculate_risk_metrics
from options_analytics.analytics.trade_statistics import calculate_strategy_metrics
from options_analytics.config.analytics_config import AnalyticsMetricsConfig
from options_analytics.errors import require_non_negative
from options_analytics.models.contracts import GreeksCalculation, MarketSnapshot
from options_analytics.models.positions import HistoricalTrade, OptionsPosition

logger = logger.bind(component="PerformanceAnalytics")

MARKET_NEUTRAL_DELTA = 10.0
HIGH_THETA_DECAY = -500.0
MEDIUM_THETA_DECAY = -200.0
HIGH_DRAWDOWN_PERCENT = 20.0
MIN_SHARPE_RATIO = 1.0


def _subtract_months(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def period_start(period: AnalysisPeriod, end: date) -> date:
    """First day of a look-back period ending on end."""
    if period == AnalysisPeriod.ONE_WEEK:
        return end - timedelta(days=7)
    months = {
        AnalysisPeriod.ONE_MONTH: 1,
        AnalysisPeriod.THREE_MONTHS: 3,
        AnalysisPeriod.SIX_MONTHS: 6,
        AnalysisPeriod.ONE_YEAR: 12,
    }[period]
    return _subtract_months(end, months)


class PerformanceAnalytics:
    """
    Portfolio performance analytics.

    Usage:
        >>> analytics = PerformanceAnalytics()
        >>> report = analytics.generate_performance_report(positions, trades, 100_000, "3M")
        >>> print(report.risk_metrics.sharpe_ratio)
    """

    def __init__(self, config: AnalyticsMetricsConfig | None = None):
        self.config = config or AnalyticsMetricsConfig()

    def generate_performance_report(
        self,
        positions: Sequence[OptionsPosition],
        trades: Sequence[HistoricalTrade],
        portfolio_value: float,
        period: AnalysisPeriod | str = AnalysisPeriod.ONE_MONTH,
        as_of: date | None = None,
    ) -> PerformanceReport:
        """
        Generate the performance report of one period.

        Args:
            positions: Current positions (only OPEN ones contribute)
            trades: Closed trades (filtered to the period by open date)
            portfolio_value: Account value in dollars (>= 0)
            period: "1W", "1M", "3M", "6M" or "1Y"
            as_of: End of the period (default: today)

        Returns:
            PerformanceReport

        Raises:
            ValueError: If period is not a known AnalysisPeriod
            DomainRangeError: If portfolio_value is negative
        """
        require_non_negative(portfolio_value, "portfolio_value")
        period = AnalysisPeriod(period)
        end = as_of or date.today()
        start = period_start(period, end)

        period_trades = [t for t in trades if start <= t.open_date <= end]
        open_positions = [p for p in positions if p.is_open]

        logger.info(
            f"Generating {period.value} report {start} → {end}: "
            f"{len(period_trades)} trades, {len(open_positions)} open positions"
        )

        frame = trades_to_frame(period_trades)
        daily = period_pnl(frame, 'day')

        pnl_analysis = self._pnl_analysis(open_positions, period_trades, list(daily.values()))
        risk_metrics = self._risk_metrics(open_positions, list(daily.values()), portfolio_value)
        greeks_analysis = self._greeks_analysis(open_positions)
        breakdown = self._strategy_breakdown(period_trades)
        time_analysis = self._time_analysis(daily, period_pnl(frame, 'week'), period_pnl(frame, 'month'))

        report = PerformanceReport(
            period=period,
            start_date=start,
            end_date=end,
            portfolio_value=portfolio_value,
            pnl_analysis=pnl_analysis,
            risk_metrics=risk_metrics,
            greeks_analysis=greeks_analysis,
            strategy_breakdown=breakdown,
            time_analysis=time_analysis,
            recommendations=tuple(self._recommendations(pnl_analysis, risk_metrics, breakdown)),
            generated_at=datetime.now(),
        )

        logger.info(
            f"✓ Report ready: P&L ${pnl_analysis.total_pnl:,.2f} "
            f"({pnl_analysis.return_percent:+.2f}%), Sharpe {risk_metrics.sharpe_ratio:.2f}"
        )
        return report

    def attribute_pnl(
        self,
        positions: Iterable[OptionsPosition],
        markets: Mapping[str, MarketSnapshot],
        previous_markets: Mapping[str, MarketSnapshot] | None = None,
    ) -> PnLAttribution:
        """Greek attribution of open positions (see analytics.attribution)."""
        return calculate_pnl_attribution(positions, markets, previous_markets)

    def strategy_metrics(self, strategy: str, trades: Iterable[HistoricalTrade]) -> StrategyMetrics:
        return calculate_strategy_metrics(strategy, trades)

    def equity_curve(self, trades: Iterable[HistoricalTrade]):
        """Daily equity curve as a polars DataFrame (date, pnl, equity, drawdown)."""
        return equity_curve(trades)

    def _pnl_analysis(
        self,
        open_positions: Sequence[OptionsPosition],
        trades: Sequence[HistoricalTrade],
        daily: list[float],
    ) -> PnLAnalysis:
        realized = sum(t.realized_pnl for t in trades)
        unrealized = sum(p.unrealized_pnl for p in open_positions)
        total = realized + unrealized

        invested = sum(abs(t.cost_basis) for t in trades) + sum(abs(p.cost_basis) for p in open_positions)
        return_percent = total / invested * 100 if invested > 0 else 0.0

        return PnLAnalysis(
            total_pnl=total,
            realized_pnl=realized,
            unrealized_pnl=unrealized,
            return_percent=return_percent,
            total_invested=invested,
            daily_pnl=tuple(daily),
            volatility=annualized_volatility(daily, self.config.trading_days),
            winning_trades=sum(1 for t in trades if t.realized_pnl > 0),
            losing_trades=sum(1 for t in trades if t.realized_pnl < 0),
            total_trades=len(trades),
        )

    def _risk_metrics(
        self,
        open_positions: Sequence[OptionsPosition],
        daily: list[float],
        portfolio_value: float,
    ) -> RiskMetrics:
        if portfolio_value > 0:
            returns = [pnl / portfolio_value for pnl in daily]
            risk_free_rate = self.config.sharpe_risk_free_rate
            leverage = sum(p.strategy.margin for p in open_positions) / portfolio_value
        else:
            returns = daily
            risk_free_rate = 0.0
            leverage = 0.0

        return calculate_risk_metrics(
            returns,
            pnls=daily,
            risk_free_rate=risk_free_rate,
            trading_days=self.config.trading_days,
            leverage=leverage,
            shortfall_confidence=self.config.expected_shortfall_confidence,
        )

    def _greeks_analysis(self, open_positions: Sequence[OptionsPosition]) -> GreeksAnalysis:
        total = GreeksCalculation.zero()
        for position in open_positions:
            total = total + position.greeks

        if total.theta < HIGH_THETA_DECAY:
            decay_risk = RiskLevel.HIGH
        elif total.theta < MEDIUM_THETA_DECAY:
            decay_risk = RiskLevel.MEDIUM
        else:
            decay_risk = RiskLevel.LOW

        return GreeksAnalysis(
            portfolio_greeks=total,
            delta_exposure=sum(abs(p.greeks.delta) for p in open_positions),
            gamma_exposure=total.gamma,
            theta_decay=total.theta,
            vega_exposure=total.vega,
            rho_exposure=total.rho,
            net_delta=total.delta,
            is_market_neutral=abs(total.delta) < MARKET_NEUTRAL_DELTA,
            time_decay_risk=decay_risk,
        )

    def _strategy_breakdown(self, trades: Sequence[HistoricalTrade]) -> StrategyBreakdown:
        tags = sorted({t.strategy for t in trades})
        by_strategy = {tag: calculate_strategy_metrics(tag, trades) for tag in tags}

        if not by_strategy:
            return StrategyBreakdown(
                by_strategy={},
                most_profitable=None,
                least_profitable=None,
                best_win_rate=None,
                worst_win_rate=None,
            )

        metrics = list(by_strategy.values())
        return StrategyBreakdown(
            by_strategy=by_strategy,
            most_profitable=max(metrics, key=lambda m: m.total_pnl).strategy,
            least_profitable=min(metrics, key=lambda m: m.total_pnl).strategy,
            best_win_rate=max(metrics, key=lambda m: m.win_rate).strategy,
            worst_win_rate=min(metrics, key=lambda m: m.win_rate).strategy,
        )

    def _time_analysis(
        self,
        daily: dict[str, float],
        weekly: dict[str, float],
        monthly: dict[str, float],
    ) -> TimeAnalysis:
        best_month = worst_month = None
        avg_monthly = volatility = 0.0

        if monthly:
            best_key = max(monthly, key=monthly.get)
            worst_key = min(monthly, key=monthly.get)
            best_month = PeriodPnL(period=best_key, pnl=monthly[best_key])
            worst_month = PeriodPnL(period=worst_key, pnl=monthly[worst_key])

            values = np.array(list(monthly.values()), dtype=float)
            avg_monthly = float(values.mean())
            if values.size > 1:
                volatility = float(np.std(values, ddof=1))

        return TimeAnalysis(
            daily_pnl=daily,
            weekly_pnl=weekly,
            monthly_pnl=monthly,
            best_month=best_month,
            worst_month=worst_month,
            avg_monthly_return=avg_monthly,
            monthly_volatility=volatility,
        )

    def _recommendations(
        self,
        pnl: PnLAnalysis,
        risk: RiskMetrics,
        breakdown: StrategyBreakdown,
    ) -> list[str]:
        recommendations = []

        if pnl.return_percent < 0:
            recommendations.append(
                "Portfolio is losing money: review entry criteria and add stop-loss rules"
            )
        if risk.max_drawdown_percent > HIGH_DRAWDOWN_PERCENT:
            recommendations.append(
                f"High drawdown ({risk.max_drawdown_percent:.1f}%): reduce position sizes"
            )
        if pnl.total_trades and risk.sharpe_ratio < MIN_SHARPE_RATIO:
            recommendations.append(
                f"Low risk-adjusted returns (Sharpe {risk.sharpe_ratio:.2f}): favor higher-probability setups"
            )

        losing = [m.strategy for m in breakdown.by_strategy.values() if m.total_pnl < 0]
        if losing:
            recommendations.append(f"Unprofitable strategies: {', '.join(losing)}. Consider pausing them")

        return recommendations
