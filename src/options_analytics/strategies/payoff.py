"""
Expiration Payoff

At-expiration P&L of a strategy in dollars:

    pnl(S) = sum(sign * qty * multiplier * (intrinsic(S) - entry_price))
             + stock_quantity * (S - stock_cost_basis)

The payoff is piecewise linear in S with kinks at the leg strikes, which is
what lets custom strategies derive max profit / max loss / breakevens from a
handful of evaluations (see derive_payoff_profile).
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np

from options_analytics.models.contracts import OptionsLeg, OptionType

if TYPE_CHECKING:
    from options_analytics.strategies.models import OptionsStrategy

# Slopes smaller than this are treated as flat
_SLOPE_EPSILON = 1e-9


@dataclass(slots=True, frozen=True)
class PayoffProfile:
    """
    Extremes of a piecewise-linear expiration payoff.

    Attributes:
        max_profit: Largest payoff (math.inf when unbounded above)
        max_loss: Largest loss as a positive amount (math.inf when unbounded)
        breakevens: Sorted prices where the payoff crosses zero
    """

    max_profit: float
    max_loss: float
    breakevens: tuple[float, ...]


def _legs_payoff(
    legs: Sequence[OptionsLeg],
    prices: np.ndarray,
    stock_quantity: int = 0,
    stock_cost_basis: float = 0.0,
) -> np.ndarray:
    pnl = np.zeros_like(prices, dtype=float)
    for leg in legs:
        strike = leg.contract.strike
        if leg.contract.option_type == OptionType.CALL:
            intrinsic = np.maximum(prices - strike, 0.0)
        else:
            intrinsic = np.maximum(strike - prices, 0.0)
        pnl += leg.signed_quantity * leg.contract.multiplier * (intrinsic - leg.entry_price)
    if stock_quantity:
        pnl += stock_quantity * (prices - stock_cost_basis)
    return pnl


def expiration_pnl_grid(strategy: "OptionsStrategy", prices) -> np.ndarray:
    """
    Vectorised at-expiration P&L over an array of underlying prices.

    Args:
        strategy: Strategy to evaluate
        prices: Array-like of underlying prices

    Returns:
        numpy array of P&L values in dollars, same shape as prices
    """
    prices = np.asarray(prices, dtype=float)
    return _legs_payoff(strategy.legs, prices, strategy.stock_quantity, strategy.stock_cost_basis)


def expiration_pnl(strategy: "OptionsStrategy", underlying_price: float) -> float:
    """At-expiration P&L of a strategy in dollars at one underlying price."""
    return float(expiration_pnl_grid(strategy, [underlying_price])[0])


def derive_payoff_profile(
    legs: Sequence[OptionsLeg],
    stock_quantity: int = 0,
    stock_cost_basis: float = 0.0,
) -> PayoffProfile:
    """
    Derive max profit, max loss and breakevens of arbitrary legs.

    The payoff is evaluated at S = 0 and at every strike; beyond the highest
    strike it continues with the slope of the calls (plus stock), which
    decides whether profit or loss is unbounded. Breakevens come from linear
    interpolation of sign changes between evaluation points.

    Args:
        legs: Strategy legs
        stock_quantity: Shares of implied stock
        stock_cost_basis: Per-share cost of the stock

    Returns:
        PayoffProfile
    """
    strikes = sorted({leg.contract.strike for leg in legs})
    points = np.array([0.0] + strikes, dtype=float)
    values = _legs_payoff(legs, points, stock_quantity, stock_cost_basis)

    upper_slope = stock_quantity + sum(
        leg.signed_quantity * leg.contract.multiplier
        for leg in legs
        if leg.contract.option_type == OptionType.CALL
    )

    max_profit = float(values.max())
    worst = float(values.min())
    if upper_slope > _SLOPE_EPSILON:
        max_profit = math.inf
    elif upper_slope < -_SLOPE_EPSILON:
        worst = -math.inf
    max_loss = max(0.0, -worst)

    breakevens: list[float] = []
    for i in range(len(points)):
        if values[i] == 0.0 and points[i] > 0.0:
            breakevens.append(float(points[i]))
        if i + 1 < len(points):
            left, right = values[i], values[i + 1]
            if left * right < 0:
                x0, x1 = points[i], points[i + 1]
                breakevens.append(float(x0 + (x1 - x0) * (-left) / (right - left)))

    last_price, last_value = float(points[-1]), float(values[-1])
    if abs(upper_slope) > _SLOPE_EPSILON and last_value * upper_slope < 0:
        breakevens.append(last_price - last_value / upper_slope)

    return PayoffProfile(
        max_profit=max_profit,
        max_loss=max_loss,
        breakevens=tuple(sorted(set(round(b, 10) for b in breakevens))),
    )
