"""
Trade Frames

Polars views over HistoricalTrade records: the trade table, realized P&L
grouped by calendar period, and the equity curve.

Trades are bucketed by settlement date (close date, or open date when the
close date is unknown).
"""

from typing import Iterable

import numpy as np
import polars as pl

from options_analytics.models.positions import HistoricalTrade

TRADE_SCHEMA = pl.Schema({
    'trade_id': pl.String,
    'strategy': pl.String,
    'underlying': pl.String,
    'open_date': pl.Date,
    'close_date': pl.Date,
    'settlement_date': pl.Date,
    'day': pl.String,
    'week': pl.String,
    'month': pl.String,
    'realized_pnl': pl.Float64,
    'cost_basis': pl.Float64,
    'holding_days': pl.Int64,
})

PERIOD_COLUMNS = ('day', 'week', 'month')


def trades_to_frame(trades: Iterable[HistoricalTrade]) -> pl.DataFrame:
    """
    Build the trade table, sorted by settlement date.

    Period keys: day = YYYY-MM-DD, week = ISO YYYY-Www, month = YYYY-MM.
    """
    rows = []
    for trade in trades:
        settled = trade.settlement_date
        iso_year, iso_week, _ = settled.isocalendar()
        rows.append({
            'trade_id': trade.trade_id,
            'strategy': trade.strategy,
            'underlying': trade.underlying,
            'open_date': trade.open_date,
            'close_date': trade.close_date,
            'settlement_date': settled,
            'day': settled.isoformat(),
            'week': f"{iso_year}-W{iso_week:02d}",
            'month': settled.strftime("%Y-%m"),
            'realized_pnl': float(trade.realized_pnl),
            'cost_basis': float(trade.cost_basis),
            'holding_days': trade.holding_period_days,
        })

    if not rows:
        return pl.DataFrame(schema=TRADE_SCHEMA)
    return pl.DataFrame(rows, schema=TRADE_SCHEMA).sort('settlement_date')


def period_pnl(frame: pl.DataFrame, period: str = 'day') -> dict[str, float]:
    """
    Realized P&L summed per period key, in chronological order.

    Args:
        frame: Trade table from trades_to_frame
        period: 'day', 'week' or 'month'
    """
    if period not in PERIOD_COLUMNS:
        raise ValueError(f"period must be one of {PERIOD_COLUMNS}, got {period!r}")
    if frame.height == 0:
        return {}

    grouped = frame.group_by(period).agg(
        pl.col('realized_pnl').sum().alias('pnl')
    ).sort(period)

    return dict(zip(grouped[period].to_list(), grouped['pnl'].to_list()))


def daily_pnl(trades: Iterable[HistoricalTrade]) -> list[float]:
    """Realized P&L per settlement day, chronological."""
    return list(period_pnl(trades_to_frame(trades), 'day').values())


def equity_curve(trades: Iterable[HistoricalTrade]) -> pl.DataFrame:
    """
    Equity curve over settlement days.

    Returns:
        DataFrame with columns:
            - date: Settlement day
            - pnl: Realized P&L of the day
            - equity: Cumulative P&L
            - drawdown: Running peak of equity (starting at 0) minus equity
    """
    frame = trades_to_frame(trades)
    if frame.height == 0:
        return pl.DataFrame(schema={
            'date': pl.Date,
            'pnl': pl.Float64,
            'equity': pl.Float64,
            'drawdown': pl.Float64,
        })

    curve = frame.group_by('settlement_date').agg(
        pl.col('realized_pnl').sum().alias('pnl')
    ).sort('settlement_date').rename({'settlement_date': 'date'})

    curve = curve.with_columns(
        pl.col('pnl').cum_sum().alias('equity')
    )

    equity = curve['equity'].to_numpy()
    running_max = np.maximum.accumulate(np.maximum(equity, 0.0))

    return curve.with_columns(
        pl.Series('drawdown', running_max - equity)
    )
