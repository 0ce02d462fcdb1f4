"""
Greeks Calculator

Aggregates per-contract Greeks and theoretical values to strategy and
portfolio level.

Aggregation is an explicit fold over the immutable leg tuple:
    strategy_greeks = sum(leg.sign * leg.quantity * greeks(leg.contract))

Units:
    - dollar=False (default): per-share Greeks x signed contracts
    - dollar=True: additionally x contract multiplier (P&L in dollars)
    - values (strategy_value) are always in dollars

Usage:
    >>> calc = GreeksCalculator()
    >>> greeks = calc.strategy_greeks(strategy, 450.0, 0.18, 0.05, as_of=date(2026, 1, 20))
    >>> print(f"Net delta: {greeks.delta:+.2f}")
"""

from dataclasses import dataclass
from datetime import date, timedelta
from functools import reduce
from typing import TYPE_CHECKING, Iterable

from loguru import logger

from options_analytics.models.contracts import GreeksCalculation, MarketSnapshot, OptionContract, OptionsLeg
from options_analytics.pricing.black_scholes import calculate_option_greeks, calculate_option_price

if TYPE_CHECKING:
    from options_analytics.strategies.models import OptionsStrategy


@dataclass(slots=True, frozen=True)
class GreeksSensitivity:
    """
    Second-order sensitivity of a contract's Greeks.

    Attributes:
        delta_change: Delta change for a +price_shift relative price move
        gamma_change: Gamma change for the same move
        vega_change: Vega change for a +vol_shift relative volatility move
        theta_decay: Theta change one calendar day closer to expiry
    """

    delta_change: float
    gamma_change: float
    vega_change: float
    theta_decay: float


class GreeksCalculator:
    """
    Strategy and portfolio Greeks calculator.

    Stateless: every method is a pure function of its arguments, so a single
    instance can be shared or mapped over positions in parallel.
    """

    def __init__(self):
        self.logger = logger.bind(component="GreeksCalculator")

    def option_greeks(self, contract: OptionContract, market: MarketSnapshot) -> GreeksCalculation:
        """Return per-share Greeks for a contract under a market snapshot."""
        return calculate_option_greeks(
            contract,
            market.underlying_price,
            market.volatility,
            market.risk_free_rate,
            market.dividend_yield,
            as_of=market.as_of,
        )

    def leg_greeks(
        self,
        leg: OptionsLeg,
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
        dollar: bool = False,
    ) -> GreeksCalculation:
        """Return sign-adjusted Greeks of one leg (x quantity, x multiplier if dollar)."""
        per_share = calculate_option_greeks(
            leg.contract, underlying_price, volatility, risk_free_rate, dividend_yield, as_of=as_of
        )
        factor = leg.signed_quantity * (leg.contract.multiplier if dollar else 1)
        return per_share.scaled(factor)

    def strategy_greeks(
        self,
        strategy: "OptionsStrategy",
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
        dollar: bool = False,
    ) -> GreeksCalculation:
        """
        Aggregate Greeks across all legs of a strategy.

        Args:
            strategy: Strategy (or any object exposing a legs tuple)
            underlying_price: Current underlying price
            volatility: Annualized volatility
            risk_free_rate: Annualized risk-free rate
            dividend_yield: Annualized dividend yield
            as_of: Valuation date (default: today)
            dollar: Multiply by the contract multiplier

        Returns:
            Aggregated GreeksCalculation
        """
        as_of = as_of or date.today()
        return reduce(
            lambda total, leg: total
            + self.leg_greeks(leg, underlying_price, volatility, risk_free_rate, dividend_yield, as_of, dollar),
            strategy.legs,
            GreeksCalculation.zero(),
        )

    def strategy_value(
        self,
        strategy: "OptionsStrategy",
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
    ) -> float:
        """
        Return the signed theoretical value of all legs in dollars.

        Long legs add value, short legs subtract it.
        """
        as_of = as_of or date.today()
        return sum(
            leg.signed_quantity
            * leg.contract.multiplier
            * calculate_option_price(
                leg.contract, underlying_price, volatility, risk_free_rate, dividend_yield, as_of=as_of
            )
            for leg in strategy.legs
        )

    def portfolio_greeks(
        self,
        positions: Iterable[tuple["OptionsStrategy", MarketSnapshot]],
        dollar: bool = False,
    ) -> GreeksCalculation:
        """
        Aggregate Greeks across strategies, each valued under its own snapshot.

        Args:
            positions: Iterable of (strategy, market snapshot) pairs
            dollar: Multiply by the contract multiplier

        Returns:
            Portfolio-level GreeksCalculation
        """
        total = reduce(
            lambda acc, item: acc
            + self.strategy_greeks(
                item[0],
                item[1].underlying_price,
                item[1].volatility,
                item[1].risk_free_rate,
                item[1].dividend_yield,
                as_of=item[1].as_of,
                dollar=dollar,
            ),
            positions,
            GreeksCalculation.zero(),
        )
        self.logger.debug(f"Portfolio Greeks: {total}")
        return total

    def greeks_sensitivity(
        self,
        contract: OptionContract,
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
        price_shift: float = 0.01,
        vol_shift: float = 0.01,
    ) -> GreeksSensitivity:
        """
        Measure how the Greeks themselves move under small shocks.

        Args:
            price_shift: Relative underlying move (default: 1%)
            vol_shift: Relative volatility move (default: 1%)

        Returns:
            GreeksSensitivity
        """
        as_of = as_of or date.today()
        base = calculate_option_greeks(contract, underlying_price, volatility, risk_free_rate, dividend_yield, as_of)
        price_up = calculate_option_greeks(
            contract, underlying_price * (1 + price_shift), volatility, risk_free_rate, dividend_yield, as_of
        )
        vol_up = calculate_option_greeks(
            contract, underlying_price, volatility * (1 + vol_shift), risk_free_rate, dividend_yield, as_of
        )
        tomorrow = calculate_option_greeks(
            contract, underlying_price, volatility, risk_free_rate, dividend_yield, as_of + timedelta(days=1)
        )
        return GreeksSensitivity(
            delta_change=price_up.delta - base.delta,
            gamma_change=price_up.gamma - base.gamma,
            vega_change=vol_up.vega - base.vega,
            theta_decay=tomorrow.theta - base.theta,
        )
