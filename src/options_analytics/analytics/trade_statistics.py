"""
Trade Statistics

Per-strategy statistics over closed trades: win rate, average win/loss,
profit factor, expectancy, streaks, best/worst trade, holding period,
Sharpe over daily P&L, max drawdown and Calmar.

A trade with realized P&L <= 0 counts as a loss for streaks; win rate
counts strictly positive trades only.
"""

from typing import Iterable, Sequence

from loguru import logger

from options_analytics.analytics.frames import daily_pnl
from options_analytics.analytics.models import StrategyMetrics
from options_analytics.analytics.risk_metrics import calculate_max_drawdown, calculate_sharpe_ratio
from options_analytics.models.positions import HistoricalTrade

logger = logger.bind(component="TradeStatistics")


def consecutive_streaks(pnls: Sequence[float]) -> tuple[int, int]:
    """
    Longest winning and losing streaks in a single forward scan.

    Returns:
        (max_consecutive_wins, max_consecutive_losses)
    """
    max_wins = max_losses = 0
    wins = losses = 0
    for pnl in pnls:
        if pnl > 0:
            wins += 1
            losses = 0
            max_wins = max(max_wins, wins)
        else:
            losses += 1
            wins = 0
            max_losses = max(max_losses, losses)
    return max_wins, max_losses


def calculate_strategy_metrics(strategy: str, trades: Iterable[HistoricalTrade]) -> StrategyMetrics:
    """
    Statistics of the trades tagged with one strategy.

    Trades are scanned in settlement-date order (ties keep input order).

    Args:
        strategy: Strategy tag (e.g., "iron_condor")
        trades: Closed trades of any strategy; others are ignored

    Returns:
        StrategyMetrics (all zeros when the strategy has no trades)
    """
    selected = sorted(
        (t for t in trades if t.strategy == strategy),
        key=lambda t: t.settlement_date,
    )
    if not selected:
        return StrategyMetrics.empty(strategy)

    pnls = [t.realized_pnl for t in selected]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]

    total_trades = len(selected)
    total_pnl = sum(pnls)
    win_rate = len(wins) / total_trades
    avg_win = sum(wins) / len(wins) if wins else 0.0
    avg_loss = sum(losses) / len(losses) if losses else 0.0

    gross_loss = abs(avg_loss * len(losses))
    profit_factor = (avg_win * len(wins)) / gross_loss if gross_loss > 0 else 0.0
    expectancy = win_rate * avg_win + (1 - win_rate) * avg_loss

    max_wins, max_losses = consecutive_streaks(pnls)

    holding = [t.holding_period_days for t in selected if t.holding_period_days is not None]
    avg_holding_period = sum(holding) / len(holding) if holding else 0.0

    drawdown = calculate_max_drawdown(pnls)

    metrics = StrategyMetrics(
        strategy=strategy,
        total_trades=total_trades,
        total_pnl=total_pnl,
        win_rate=win_rate,
        avg_win=avg_win,
        avg_loss=avg_loss,
        profit_factor=profit_factor,
        expectancy=expectancy,
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
        best_trade=max(pnls),
        worst_trade=min(pnls),
        avg_holding_period=avg_holding_period,
        sharpe_ratio=calculate_sharpe_ratio(daily_pnl(selected)),
        max_drawdown=drawdown.max_drawdown,
        max_drawdown_percent=drawdown.max_drawdown_percent,
        calmar_ratio=total_pnl / max(drawdown.max_drawdown, 1.0),
    )

    logger.debug(
        f"{strategy}: {total_trades} trades, win rate {win_rate:.1%}, "
        f"P&L ${total_pnl:,.2f}, profit factor {profit_factor:.2f}"
    )
    return metrics
