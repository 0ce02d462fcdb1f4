"""
Tests for per-strategy trade statistics and trade frames.
"""

from datetime import date

import polars as pl
import pytest

from options_analytics.analytics import (
    calculate_strategy_metrics,
    consecutive_streaks,
    daily_pnl,
    equity_curve,
    period_pnl,
    trades_to_frame,
)
from options_analytics.models.positions import HistoricalTrade


class TestConsecutiveStreaks:
    """Test the streak scan."""

    def test_streaks(self):
        assert consecutive_streaks([100, 50, -20, 0, -30, 10]) == (2, 3)

    def test_breakeven_counts_as_loss(self):
        assert consecutive_streaks([0, 0]) == (0, 2)

    def test_empty(self):
        assert consecutive_streaks([]) == (0, 0)


class TestStrategyMetrics:
    """Test calculate_strategy_metrics."""

    def test_iron_condor_metrics(self, sample_trades):
        """Test settlement order +300, -700, +250, +150."""
        metrics = calculate_strategy_metrics("iron_condor", sample_trades)

        assert metrics.total_trades == 4
        assert metrics.total_pnl == pytest.approx(0.0)
        assert metrics.win_rate == pytest.approx(0.75)
        assert metrics.avg_win == pytest.approx(700.0 / 3)
        assert metrics.avg_loss == pytest.approx(-700.0)
        assert metrics.profit_factor == pytest.approx(1.0)
        assert metrics.expectancy == pytest.approx(0.0)
        assert metrics.max_consecutive_wins == 2
        assert metrics.max_consecutive_losses == 1
        assert metrics.best_trade == 300.0
        assert metrics.worst_trade == -700.0
        assert metrics.avg_holding_period == pytest.approx(8.25)

    def test_drawdown_and_calmar(self, sample_trades):
        metrics = calculate_strategy_metrics("iron_condor", sample_trades)

        assert metrics.max_drawdown == pytest.approx(700.0)
        assert metrics.max_drawdown_percent == pytest.approx(700.0 / 300.0 * 100)
        assert metrics.calmar_ratio == pytest.approx(0.0)

    def test_vertical_spread_metrics(self, sample_trades):
        metrics = calculate_strategy_metrics("vertical_spread", sample_trades)

        assert metrics.total_trades == 2
        assert metrics.total_pnl == pytest.approx(200.0)
        assert metrics.win_rate == pytest.approx(0.5)
        assert metrics.profit_factor == pytest.approx(1.5)
        assert metrics.avg_holding_period == pytest.approx(8.0)

    def test_profit_factor_zero_without_losses(self):
        trades = [
            HistoricalTrade("w1", "covered_call", "AAPL", date(2026, 1, 2), 120.0, 15000.0, date(2026, 1, 16)),
            HistoricalTrade("w2", "covered_call", "AAPL", date(2026, 1, 20), 80.0, 15000.0, date(2026, 2, 6)),
        ]

        metrics = calculate_strategy_metrics("covered_call", trades)

        assert metrics.win_rate == 1.0
        assert metrics.profit_factor == 0.0
        assert metrics.avg_loss == 0.0
        assert metrics.max_drawdown == 0.0

    def test_unknown_strategy_is_empty(self, sample_trades):
        metrics = calculate_strategy_metrics("butterfly", sample_trades)

        assert metrics.total_trades == 0
        assert metrics.total_pnl == 0.0
        assert metrics.sharpe_ratio == 0.0

    def test_trade_without_close_date(self):
        trades = [HistoricalTrade("o1", "long_call", "SPY", date(2026, 1, 5), -150.0, 500.0)]

        metrics = calculate_strategy_metrics("long_call", trades)

        assert metrics.avg_holding_period == 0.0
        assert metrics.max_consecutive_losses == 1


class TestTradeFrames:
    """Test the polars trade views."""

    def test_trades_to_frame(self, sample_trades):
        frame = trades_to_frame(sample_trades)

        assert frame.height == 6
        assert frame["settlement_date"].to_list() == sorted(frame["settlement_date"].to_list())
        assert frame.filter(pl.col("trade_id") == "t2")["week"].item() == "2026-W03"
        assert frame.filter(pl.col("trade_id") == "t1")["month"].item() == "2026-01"

    def test_empty_frame_keeps_schema(self):
        frame = trades_to_frame([])

        assert frame.height == 0
        assert "realized_pnl" in frame.columns

    def test_period_pnl(self, sample_trades):
        frame = trades_to_frame(sample_trades)

        assert period_pnl(frame, "day") == {
            "2026-01-09": pytest.approx(300.0),
            "2026-01-14": pytest.approx(-1100.0),
            "2026-01-21": pytest.approx(250.0),
            "2026-01-23": pytest.approx(150.0),
            "2026-01-28": pytest.approx(600.0),
        }
        assert period_pnl(frame, "month") == {"2026-01": pytest.approx(200.0)}

    def test_unknown_period_column(self, sample_trades):
        with pytest.raises(ValueError):
            period_pnl(trades_to_frame(sample_trades), "quarter")

    def test_daily_pnl(self, sample_trades):
        assert daily_pnl(sample_trades) == pytest.approx([300.0, -1100.0, 250.0, 150.0, 600.0])

    def test_equity_curve(self, sample_trades):
        curve = equity_curve(sample_trades)

        assert curve.columns == ["date", "pnl", "equity", "drawdown"]
        assert curve["equity"].to_list() == pytest.approx([300.0, -800.0, -550.0, -400.0, 200.0])
        assert curve["drawdown"].to_list() == pytest.approx([0.0, 1100.0, 850.0, 700.0, 100.0])

    def test_empty_equity_curve(self):
        assert equity_curve([]).height == 0
