"""
Tests for PerformanceAnalytics report generation.
"""

from datetime import date

import pytest

from options_analytics.analysis.models import RiskLevel
from options_analytics.analysis.positions import close_position
from options_analytics.analytics import AnalysisPeriod, PerformanceAnalytics, period_start
from options_analytics.config import AnalyticsMetricsConfig
from options_analytics.errors import DomainRangeError

REPORT_DATE = date(2026, 1, 31)


@pytest.fixture
def analytics():
    return PerformanceAnalytics()


@pytest.fixture
def report(analytics, open_condor_position, sample_trades):
    return analytics.generate_performance_report(
        [open_condor_position], sample_trades, 100_000.0, "1M", as_of=REPORT_DATE
    )


class TestPeriods:
    """Test look-back windows."""

    @pytest.mark.parametrize(
        "period,end,expected",
        [
            (AnalysisPeriod.ONE_WEEK, date(2026, 1, 21), date(2026, 1, 14)),
            (AnalysisPeriod.ONE_MONTH, date(2026, 3, 31), date(2026, 2, 28)),
            (AnalysisPeriod.THREE_MONTHS, date(2026, 5, 31), date(2026, 2, 28)),
            (AnalysisPeriod.SIX_MONTHS, date(2026, 1, 15), date(2025, 7, 15)),
            (AnalysisPeriod.ONE_YEAR, date(2024, 2, 29), date(2023, 2, 28)),
        ],
    )
    def test_period_start(self, period, end, expected):
        assert period_start(period, end) == expected

    def test_trades_filtered_by_open_date(self, analytics, sample_trades):
        report = analytics.generate_performance_report([], sample_trades, 100_000.0, "1W", as_of=date(2026, 1, 21))

        # t5 (opened 01-15) and t6 (opened 01-20, closed after the window)
        assert report.pnl_analysis.total_trades == 2
        assert report.pnl_analysis.realized_pnl == pytest.approx(750.0)
        assert report.start_date == date(2026, 1, 14)
        assert report.end_date == date(2026, 1, 21)

    def test_invalid_period(self, analytics, sample_trades):
        with pytest.raises(ValueError):
            analytics.generate_performance_report([], sample_trades, 100_000.0, "2W", as_of=REPORT_DATE)

    def test_negative_portfolio_value(self, analytics, sample_trades):
        with pytest.raises(DomainRangeError) as exc_info:
            analytics.generate_performance_report([], sample_trades, -1.0, as_of=REPORT_DATE)
        assert exc_info.value.field == "portfolio_value"


class TestPnLAnalysis:
    """Test the P&L section."""

    def test_realized_and_unrealized(self, report, open_condor_position):
        pnl = report.pnl_analysis

        assert pnl.realized_pnl == pytest.approx(200.0)
        assert pnl.unrealized_pnl == pytest.approx(open_condor_position.unrealized_pnl)
        assert pnl.total_pnl == pytest.approx(200.0 + open_condor_position.unrealized_pnl)
        assert pnl.total_invested == pytest.approx(3800.0 + 300.0)
        assert pnl.return_percent == pytest.approx(pnl.total_pnl / 4100.0 * 100)

    def test_trade_counts(self, report):
        pnl = report.pnl_analysis

        assert pnl.total_trades == 6
        assert pnl.winning_trades == 4
        assert pnl.losing_trades == 2
        assert pnl.daily_pnl == pytest.approx((300.0, -1100.0, 250.0, 150.0, 600.0))


class TestRiskSection:
    """Test the risk section."""

    def test_drawdown_on_dollar_pnl(self, report):
        assert report.risk_metrics.max_drawdown == pytest.approx(1100.0)
        assert report.risk_metrics.max_drawdown_percent == pytest.approx(1100.0 / 300.0 * 100)

    def test_returns_relative_to_portfolio_value(self, report):
        assert report.risk_metrics.value_at_risk_95 == pytest.approx(-1100.0 / 100_000.0)

    def test_leverage(self, report, sample_iron_condor):
        assert report.risk_metrics.leverage == pytest.approx(sample_iron_condor.margin / 100_000.0)

    def test_zero_portfolio_value_uses_dollars(self, analytics, sample_trades):
        report = analytics.generate_performance_report([], sample_trades, 0.0, as_of=REPORT_DATE)

        assert report.risk_metrics.value_at_risk_95 == pytest.approx(-1100.0)
        assert report.risk_metrics.leverage == 0.0

    def test_configured_shortfall_confidence(self, sample_trades):
        analytics = PerformanceAnalytics(AnalyticsMetricsConfig(expected_shortfall_confidence=0.5))

        report = analytics.generate_performance_report([], sample_trades, 100_000.0, as_of=REPORT_DATE)

        # Tail of the two worst days: -1100, 150
        assert report.risk_metrics.expected_shortfall == pytest.approx(-475.0 / 100_000.0)


class TestGreeksSection:
    """Test the Greeks section."""

    def test_open_position_greeks(self, report, open_condor_position):
        greeks = report.greeks_analysis

        assert greeks.portfolio_greeks == open_condor_position.greeks
        assert greeks.net_delta == pytest.approx(open_condor_position.greeks.delta)
        assert greeks.is_market_neutral
        assert greeks.time_decay_risk == RiskLevel.LOW

    def test_closed_positions_ignored(self, analytics, open_condor_position, sample_trades):
        closed = close_position(open_condor_position)

        report = analytics.generate_performance_report([closed], sample_trades, 100_000.0, as_of=REPORT_DATE)

        assert report.greeks_analysis.portfolio_greeks.delta == 0.0
        assert report.pnl_analysis.unrealized_pnl == 0.0


class TestBreakdownAndTime:
    """Test strategy breakdown and time analysis."""

    def test_strategy_breakdown(self, report):
        breakdown = report.strategy_breakdown

        assert set(breakdown.by_strategy) == {"iron_condor", "vertical_spread"}
        assert breakdown.most_profitable == "vertical_spread"
        assert breakdown.least_profitable == "iron_condor"
        assert breakdown.best_win_rate == "iron_condor"
        assert breakdown.worst_win_rate == "vertical_spread"

    def test_time_analysis(self, report):
        time_analysis = report.time_analysis

        assert time_analysis.weekly_pnl == {
            "2026-W02": pytest.approx(300.0),
            "2026-W03": pytest.approx(-1100.0),
            "2026-W04": pytest.approx(400.0),
            "2026-W05": pytest.approx(600.0),
        }
        assert time_analysis.monthly_pnl == {"2026-01": pytest.approx(200.0)}
        assert time_analysis.best_month.period == "2026-01"
        assert time_analysis.avg_monthly_return == pytest.approx(200.0)
        assert time_analysis.monthly_volatility == 0.0


class TestRecommendations:
    """Test report recommendations."""

    def test_drawdown_and_sharpe_flags(self, report):
        recommendations = report.recommendations

        assert any(rec.startswith("High drawdown") for rec in recommendations)
        assert any(rec.startswith("Low risk-adjusted returns") for rec in recommendations)
        assert not any(rec.startswith("Unprofitable strategies") for rec in recommendations)

    def test_losing_strategy_flagged(self, analytics, sample_trades):
        report = analytics.generate_performance_report(
            [], sample_trades[:3], 100_000.0, as_of=REPORT_DATE
        )

        assert "Unprofitable strategies: iron_condor, vertical_spread. Consider pausing them" in report.recommendations
        assert any(rec.startswith("Portfolio is losing money") for rec in report.recommendations)

    def test_empty_report(self, analytics, log_messages):
        report = analytics.generate_performance_report([], [], 100_000.0, as_of=REPORT_DATE)

        assert report.pnl_analysis.total_pnl == 0
        assert report.strategy_breakdown.most_profitable is None
        assert report.time_analysis.best_month is None
        assert report.recommendations == ()
        assert any("Report ready" in message for message in log_messages)


class TestDelegates:
    """Test the convenience entry points."""

    def test_equity_curve(self, analytics, sample_trades):
        curve = analytics.equity_curve(sample_trades)

        assert curve["equity"].to_list()[-1] == pytest.approx(200.0)

    def test_strategy_metrics(self, analytics, sample_trades):
        assert analytics.strategy_metrics("vertical_spread", sample_trades).total_pnl == pytest.approx(200.0)
