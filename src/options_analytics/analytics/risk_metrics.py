"""
Risk Metrics

Pure functions over a return (or P&L) series:

- VaR at confidence c: sorted[floor((1 - c) * n)]
- Expected Shortfall: mean of the returns strictly before that index
- Annualized volatility: sample stdev x sqrt(252)
- Sharpe: (mean x 252 - rf) / annualized volatility, 0 when volatility is 0
- Sortino: (mean x 252 - rf) / (downside deviation x sqrt(252)), inf without losses
- Max drawdown: running peak of cumulative P&L (starting at 0) minus the P&L

Empty series produce 0 everywhere.
"""

import math
from typing import Sequence

import numpy as np

from options_analytics.analytics.models import DrawdownMetrics, RiskMetrics
from options_analytics.errors import DomainRangeError

TRADING_DAYS = 252


def _as_array(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(list(values), dtype=float)
    if arr.size and not np.all(np.isfinite(arr)):
        raise DomainRangeError("return series must be finite", field="returns", value=values)
    return arr


def _check_confidence(confidence: float) -> None:
    if not (0 < confidence < 1):
        raise DomainRangeError(
            f"confidence must be between 0 and 1, got {confidence}", field="confidence", value=confidence
        )


def calculate_var(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Historical Value at Risk.

    Args:
        returns: Return series
        confidence: Confidence level in (0, 1)

    Returns:
        The (1 - confidence) empirical percentile (a loss is negative); 0 for an empty series
    """
    _check_confidence(confidence)
    arr = np.sort(_as_array(returns))
    if arr.size == 0:
        return 0.0
    index = math.floor((1 - confidence) * arr.size)
    return float(arr[index])


def calculate_expected_shortfall(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Expected Shortfall (CVaR): mean of the returns below the VaR index.

    Returns the VaR itself when the tail is empty (short series) and 0 for
    an empty series.
    """
    _check_confidence(confidence)
    arr = np.sort(_as_array(returns))
    if arr.size == 0:
        return 0.0
    cutoff = math.floor((1 - confidence) * arr.size)
    tail = arr[:cutoff]
    if tail.size == 0:
        return float(arr[cutoff])
    return float(tail.mean())


def annualized_volatility(returns: Sequence[float], trading_days: int = TRADING_DAYS) -> float:
    """Sample standard deviation x sqrt(trading_days); 0 for fewer than 2 points or a constant series."""
    arr = _as_array(returns)
    if arr.size < 2 or np.all(arr == arr[0]):
        return 0.0
    return float(np.std(arr, ddof=1) * np.sqrt(trading_days))


def calculate_sharpe_ratio(
    returns: Sequence[float],
    risk_free_rate: float = 0.0,
    trading_days: int = TRADING_DAYS,
) -> float:
    """
    Annualized Sharpe ratio.

    Returns:
        (mean x trading_days - risk_free_rate) / annualized volatility; 0 when
        the series is empty or has zero variance
    """
    arr = _as_array(returns)
    if arr.size == 0:
        return 0.0
    volatility = annualized_volatility(arr, trading_days)
    if volatility == 0:
        return 0.0
    return float((arr.mean() * trading_days - risk_free_rate) / volatility)


def calculate_sortino_ratio(
    returns: Sequence[float],
    risk_free_rate: float = 0.0,
    trading_days: int = TRADING_DAYS,
) -> float:
    """
    Annualized Sortino ratio.

    Downside deviation is the root mean square of the negative returns.

    Returns:
        math.inf when there are no negative returns; 0 for an empty series
    """
    arr = _as_array(returns)
    if arr.size == 0:
        return 0.0
    negative = arr[arr < 0]
    if negative.size == 0:
        return math.inf
    downside = float(np.sqrt(np.mean(negative * negative)))
    if downside == 0:
        return 0.0
    return float((arr.mean() * trading_days - risk_free_rate) / (downside * np.sqrt(trading_days)))


def calculate_max_drawdown(pnls: Sequence[float]) -> DrawdownMetrics:
    """
    Maximum drawdown of cumulative P&L.

    The running peak starts at 0, so a series that only loses still has a
    drawdown (with 0 percent, since the peak is 0).

    Args:
        pnls: P&L per observation, in chronological order

    Returns:
        DrawdownMetrics
    """
    arr = _as_array(pnls)
    if arr.size == 0:
        return DrawdownMetrics(max_drawdown=0.0, max_drawdown_percent=0.0)

    cumulative = np.cumsum(arr)
    running_peak = np.maximum.accumulate(np.maximum(cumulative, 0.0))
    drawdown = running_peak - cumulative

    trough = int(np.argmax(drawdown))
    max_drawdown = float(drawdown[trough])
    if max_drawdown <= 0:
        return DrawdownMetrics(max_drawdown=0.0, max_drawdown_percent=0.0)

    peak_value = float(running_peak[trough])
    if peak_value > 0:
        percent = max_drawdown / peak_value * 100
        peak_index = int(np.nonzero(cumulative[: trough + 1] == peak_value)[0][-1])
    else:
        percent = 0.0
        peak_index = None

    return DrawdownMetrics(
        max_drawdown=max_drawdown,
        max_drawdown_percent=percent,
        peak_index=peak_index,
        trough_index=trough,
    )


def calculate_risk_metrics(
    returns: Sequence[float],
    pnls: Sequence[float] | None = None,
    risk_free_rate: float = 0.0,
    trading_days: int = TRADING_DAYS,
    leverage: float = 0.0,
    shortfall_confidence: float = 0.95,
) -> RiskMetrics:
    """
    Complete RiskMetrics for a return series.

    Args:
        returns: Return series used for VaR, ES, volatility, Sharpe and Sortino
        pnls: P&L series used for drawdown and Calmar (default: returns)
        risk_free_rate: Annual risk-free rate for Sharpe/Sortino
        trading_days: Annualization factor
        leverage: Pre-computed leverage to carry into the result
        shortfall_confidence: Confidence level of the Expected Shortfall

    Returns:
        RiskMetrics
    """
    returns = _as_array(returns)
    pnls = returns if pnls is None else _as_array(pnls)
    drawdown = calculate_max_drawdown(pnls)

    return RiskMetrics(
        value_at_risk_95=calculate_var(returns, 0.95),
        value_at_risk_99=calculate_var(returns, 0.99),
        expected_shortfall=calculate_expected_shortfall(returns, shortfall_confidence),
        max_drawdown=drawdown.max_drawdown,
        max_drawdown_percent=drawdown.max_drawdown_percent,
        sharpe_ratio=calculate_sharpe_ratio(returns, risk_free_rate, trading_days),
        sortino_ratio=calculate_sortino_ratio(returns, risk_free_rate, trading_days),
        calmar_ratio=float(pnls.sum()) / max(drawdown.max_drawdown, 1.0),
        volatility=annualized_volatility(returns, trading_days),
        leverage=leverage,
    )
