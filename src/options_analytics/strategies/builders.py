"""
Strategy Builders for Options Analytics

This module provides builder classes that construct common strategies from
market conditions. Strikes are chosen from the underlying price and every
leg is priced with Black-Scholes, so the resulting strategy carries
theoretical entry premiums and a complete risk profile.

Key patterns:
- Protocol-based interfaces
- dataclass(slots=True) for performance
- Validation in build() (raises) and validate() (returns bool and logs)

Supported strategies:
- Iron Condor: Sell OTM put spread + sell OTM call spread
- Vertical Spread: Buy ATM, sell OTM (same expiration)
- Custom: User-defined multi-leg strategies
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from loguru import logger

from options_analytics.errors import DomainRangeError, StrategyDefinitionError
from options_analytics.models.contracts import OptionContract, OptionsLeg, OptionType, PositionSide
from options_analytics.pricing.black_scholes import black_scholes_price, time_to_expiration
from options_analytics.strategies.factory import create_custom, create_iron_condor, create_vertical_spread
from options_analytics.strategies.models import OptionsStrategy, StrategyType

logger = logger.bind(component="StrategyBuilder")


class StrategyBuilder(Protocol):
    """
    Strategy builder protocol.

    Implemented by every market-driven builder.
    """

    priority: int
    name: str

    def build(self, symbol: str, underlying_price: float, params: dict) -> OptionsStrategy:
        """
        Build a priced strategy for symbol at underlying_price.

        Args:
            symbol: Underlying symbol
            underlying_price: Current underlying price
            params: Strategy-specific parameters

        Returns:
            OptionsStrategy with priced legs
        """
        ...

    def validate(self, strategy: OptionsStrategy) -> bool:
        """
        Validate a strategy.

        Args:
            strategy: Strategy to validate

        Returns:
            True if valid, False otherwise
        """
        ...


def _round_strike(price: float, increment: float) -> float:
    return float(round(price / increment) * increment)


def _market_params(params: dict) -> tuple[float, float, float, date, int, int]:
    """Extract shared pricing parameters (volatility, rate, dividend, as_of, dte, quantity)."""
    volatility = params.get("volatility", 0.20)
    risk_free_rate = params.get("risk_free_rate", 0.05)
    dividend_yield = params.get("dividend_yield", 0.0)
    as_of = params.get("as_of") or date.today()
    dte = params.get("dte", 45)
    quantity = params.get("quantity", 1)

    if volatility < 0:
        raise DomainRangeError(f"volatility must be non-negative, got {volatility}", field="volatility", value=volatility)
    if dte <= 0:
        raise DomainRangeError(f"dte must be positive, got {dte}", field="dte", value=dte)

    return volatility, risk_free_rate, dividend_yield, as_of, dte, quantity


def _theoretical_premium(
    option_type: OptionType,
    underlying_price: float,
    strike: float,
    expiration: date,
    volatility: float,
    risk_free_rate: float,
    dividend_yield: float,
    as_of: date,
) -> float:
    T = time_to_expiration(expiration, as_of)
    price = black_scholes_price(option_type, underlying_price, strike, T, volatility, risk_free_rate, dividend_yield)
    return round(price, 2)


@dataclass(slots=True)
class IronCondorBuilder:
    """
    Market-driven iron condor.

    Short strikes sit short_distance away from the underlying on the strike
    grid, wings sit put_width / call_width beyond them, and every leg is
    priced at the given volatility.

    Parameters:
        - put_width, call_width: Wing widths in points (default: 10 each)
        - short_distance: Relative OTM distance of the short strikes (default: 0.07)
        - strike_increment: Strike grid (default: 5)
        - dte, volatility, risk_free_rate, dividend_yield, as_of, quantity
    """

    priority: int = 10
    name: str = "IronCondorBuilder"

    def build(self, symbol: str, underlying_price: float, params: dict) -> OptionsStrategy:
        """
        Build an iron condor strategy.

        Args:
            symbol: Underlying symbol
            underlying_price: Current underlying price
            params: Strategy parameters

        Returns:
            OptionsStrategy with 4 priced legs

        Raises:
            DomainRangeError: If parameters are invalid
        """
        put_width = params.get("put_width", 10)
        call_width = params.get("call_width", 10)
        short_distance = params.get("short_distance", 0.07)
        increment = params.get("strike_increment", 5)
        volatility, rate, dividend, as_of, dte, quantity = _market_params(params)

        if put_width <= 0:
            raise DomainRangeError(f"put_width must be positive, got {put_width}", field="put_width", value=put_width)
        if call_width <= 0:
            raise DomainRangeError(
                f"call_width must be positive, got {call_width}", field="call_width", value=call_width
            )
        if not (0 < short_distance < 1):
            raise DomainRangeError(
                f"short_distance must be between 0 and 1, got {short_distance}",
                field="short_distance",
                value=short_distance,
            )

        expiration = as_of + timedelta(days=dte)

        short_call_strike = _round_strike(underlying_price * (1 + short_distance), increment)
        short_put_strike = _round_strike(underlying_price * (1 - short_distance), increment)

        # Rounding can collapse the short strikes on small underlyings
        if short_put_strike >= short_call_strike:
            midpoint = _round_strike(underlying_price, increment)
            short_put_strike = midpoint - increment
            short_call_strike = midpoint + increment

        long_put_strike = short_put_strike - put_width
        long_call_strike = short_call_strike + call_width

        def premium(option_type: OptionType, strike: float) -> float:
            return _theoretical_premium(
                option_type, underlying_price, strike, expiration, volatility, rate, dividend, as_of
            )

        strategy = create_iron_condor(
            symbol,
            long_put_strike,
            short_put_strike,
            short_call_strike,
            long_call_strike,
            expiration,
            put_buy_premium=premium(OptionType.PUT, long_put_strike),
            put_sell_premium=premium(OptionType.PUT, short_put_strike),
            call_sell_premium=premium(OptionType.CALL, short_call_strike),
            call_buy_premium=premium(OptionType.CALL, long_call_strike),
            quantity=quantity,
        )

        logger.info(
            f"Built iron condor on {symbol} "
            f"{long_put_strike:g}/{short_put_strike:g}/{short_call_strike:g}/{long_call_strike:g} "
            f"exp {expiration}, credit {-strategy.net_premium:.2f}"
        )

        return strategy

    def validate(self, strategy: OptionsStrategy) -> bool:
        """
        Check the four legs form a credit iron condor.

        Checks:
        - Has exactly 4 legs
        - Strikes increase long put, short put, short call, long call
        - One expiration for all legs
        - Net credit is positive

        Args:
            strategy: Strategy to validate

        Returns:
            True if valid, False otherwise
        """
        if len(strategy.legs) != 4:
            logger.error(f"Iron condor needs 4 legs, got {len(strategy.legs)}")
            return False

        legs_by_type = {}
        for leg in strategy.legs:
            key = f"{leg.side.value}_{leg.contract.option_type.value}"
            legs_by_type[key] = leg

        required = ["long_put", "short_put", "short_call", "long_call"]
        for req in required:
            if req not in legs_by_type:
                logger.error(f"Iron condor has no {req.replace('_', ' ')} leg")
                return False

        lp_strike = legs_by_type["long_put"].contract.strike
        sp_strike = legs_by_type["short_put"].contract.strike
        sc_strike = legs_by_type["short_call"].contract.strike
        lc_strike = legs_by_type["long_call"].contract.strike

        if not (lp_strike < sp_strike < sc_strike < lc_strike):
            logger.error(
                f"Iron condor strikes must increase put wing -> call wing, "
                f"got {lp_strike:g}/{sp_strike:g}/{sc_strike:g}/{lc_strike:g}"
            )
            return False

        expirations = {leg.contract.expiration for leg in strategy.legs}
        if len(expirations) != 1:
            logger.error(f"Iron condor legs span several expirations: {sorted(expirations)}")
            return False

        if strategy.net_premium >= 0:
            logger.error(f"Iron condor must open for a credit, net premium {strategy.net_premium:.2f}")
            return False

        logger.info(f"✓ Iron Condor validation passed for {strategy.underlying}")
        return True


@dataclass(slots=True)
class VerticalSpreadBuilder:
    """
    Market-driven debit vertical.

    Builds a 2-leg debit vertical spread (same expiration):
        - Bullish: Buy ATM call, sell higher strike call (bull call spread)
        - Bearish: Buy ATM put, sell lower strike put (bear put spread)

    Parameters:
        - direction: "BULL" or "BEAR"
        - width: Points between the strikes (default: 10)
        - strike_increment: Strike grid (default: 5)
        - dte, volatility, risk_free_rate, dividend_yield, as_of, quantity
    """

    priority: int = 11
    name: str = "VerticalSpreadBuilder"

    def build(self, symbol: str, underlying_price: float, params: dict) -> OptionsStrategy:
        """
        Buy the at-the-money strike and sell width points further out.

        Args:
            symbol: Underlying symbol
            underlying_price: Current underlying price
            params: Strategy parameters (direction, width, dte, ...)

        Returns:
            OptionsStrategy with 2 priced legs

        Raises:
            DomainRangeError: If parameters are invalid
        """
        direction = params.get("direction", "BULL").upper()
        width = params.get("width", 10)
        increment = params.get("strike_increment", 5)
        volatility, rate, dividend, as_of, dte, quantity = _market_params(params)

        if direction not in ("BULL", "BEAR"):
            raise DomainRangeError(f"direction must be BULL or BEAR, got {direction}", field="direction", value=direction)
        if width <= 0:
            raise DomainRangeError(f"width must be positive, got {width}", field="width", value=width)

        expiration = as_of + timedelta(days=dte)
        long_strike = _round_strike(underlying_price, increment)  # ATM

        if direction == "BULL":
            option_type = OptionType.CALL
            short_strike = long_strike + width
        else:
            option_type = OptionType.PUT
            short_strike = long_strike - width

        def premium(strike: float) -> float:
            return _theoretical_premium(
                option_type, underlying_price, strike, expiration, volatility, rate, dividend, as_of
            )

        strategy = create_vertical_spread(
            symbol,
            option_type,
            long_strike,
            short_strike,
            expiration,
            premium(long_strike),
            premium(short_strike),
            quantity=quantity,
        )

        logger.info(
            f"Built {direction.lower()} vertical on {symbol} "
            f"long=${long_strike}, short=${short_strike}"
        )

        return strategy

    def validate(self, strategy: OptionsStrategy) -> bool:
        """
        Check the two legs form a vertical.

        Checks:
        - Has exactly 2 legs
        - Both legs have same option type
        - One expiration
        - One leg is long, one is short
        - Strikes are different

        Args:
            strategy: Strategy to validate

        Returns:
            True if valid, False otherwise
        """
        if len(strategy.legs) != 2:
            logger.error(f"Vertical spread needs 2 legs, got {len(strategy.legs)}")
            return False

        leg1, leg2 = strategy.legs

        if leg1.contract.option_type != leg2.contract.option_type:
            logger.error(
                f"Vertical Spread legs must have same option type, "
                f"got {leg1.contract.option_type.value} and {leg2.contract.option_type.value}"
            )
            return False

        if leg1.contract.expiration != leg2.contract.expiration:
            logger.error("Vertical spread legs expire on different dates")
            return False

        sides = {leg1.side, leg2.side}
        if sides != {PositionSide.LONG, PositionSide.SHORT}:
            logger.error(f"Vertical spread needs one long and one short leg, got {sides}")
            return False

        if leg1.contract.strike == leg2.contract.strike:
            logger.error("Vertical spread legs share a strike")
            return False

        logger.info(f"✓ Vertical Spread validation passed for {strategy.underlying}")
        return True


@dataclass(slots=True)
class CustomStrategyBuilder:
    """
    Custom strategy builder.

    Any leg combination the factory accepts, described as plain dicts.

    Parameters:
        - legs: List of leg dictionaries with keys: option_type, side, strike,
          quantity, expiration (date or ISO string) and optionally entry_price
          (priced with Black-Scholes when omitted)
        - name: Optional strategy name
        - volatility, risk_free_rate, dividend_yield, as_of
    """

    priority: int = 12
    name: str = "CustomStrategyBuilder"

    def build(self, symbol: str, underlying_price: float, params: dict) -> OptionsStrategy:
        """
        Build a custom strategy from leg dicts.

        Args:
            symbol: Underlying symbol
            underlying_price: Current underlying price (used to price legs without entry_price)
            params: {"legs": [leg dict, ...], "name": ..., pricing inputs}

        Returns:
            OptionsStrategy with custom legs

        Raises:
            StrategyDefinitionError: If no legs are given or a leg spec is malformed
        """
        legs_data = params.get("legs", [])
        if not legs_data:
            raise StrategyDefinitionError(
                "Custom strategy must have at least one leg", strategy_type=StrategyType.CUSTOM.value
            )

        volatility = params.get("volatility", 0.20)
        rate = params.get("risk_free_rate", 0.05)
        dividend = params.get("dividend_yield", 0.0)
        as_of = params.get("as_of") or date.today()

        legs = []
        for i, leg_data in enumerate(legs_data):
            try:
                option_type = OptionType(str(leg_data["option_type"]).lower())
                side = PositionSide(str(leg_data["side"]).lower())
                strike = float(leg_data["strike"])
                expiration = leg_data["expiration"]
                if isinstance(expiration, str):
                    expiration = date.fromisoformat(expiration)
            except (KeyError, ValueError) as e:
                raise StrategyDefinitionError(
                    f"Invalid leg spec at index {i}: {e}", strategy_type=StrategyType.CUSTOM.value
                ) from e

            entry_price = leg_data.get("entry_price")
            if entry_price is None:
                entry_price = _theoretical_premium(
                    option_type, underlying_price, strike, expiration, volatility, rate, dividend, as_of
                )

            contract = OptionContract(
                underlying=symbol,
                option_type=option_type,
                strike=strike,
                expiration=expiration,
                multiplier=leg_data.get("multiplier", 100),
            )
            legs.append(
                OptionsLeg(
                    contract=contract,
                    side=side,
                    quantity=int(leg_data.get("quantity", 1)),
                    entry_price=float(entry_price),
                )
            )

        strategy = create_custom(legs, name=params.get("name"))

        logger.info(f"Built custom strategy on {symbol} with {len(legs)} legs")

        return strategy

    def validate(self, strategy: OptionsStrategy) -> bool:
        """
        Validate a custom strategy.

        Checks:
        - Has at least 1 leg
        - All legs share one underlying

        Args:
            strategy: Strategy to validate

        Returns:
            True if valid, False otherwise
        """
        if not strategy.legs:
            logger.error("Custom strategy must have at least one leg")
            return False

        underlyings = {leg.contract.underlying for leg in strategy.legs}
        if len(underlyings) != 1:
            logger.error(f"Custom strategy legs must share one underlying, got {underlyings}")
            return False

        logger.info(f"✓ Custom strategy validation passed for {strategy.underlying}")
        return True
