"""
Strategy Data Models

This module provides the closed set of strategy variants and the immutable
OptionsStrategy produced by the builders.

Key patterns:
- One frozen spec dataclass per variant (tagged union: StrategySpec)
- dataclass(slots=True, frozen=True) for OptionsStrategy
- Derived fields (max profit/loss, breakevens, collateral, margin) are
  computed once at construction; re-analysis produces new values
- math.inf marks an unlimited max profit or max loss

Decision tree:
    Is this data internal to my process?
    ├─ Yes → Use dataclass (performance matters) ← WE ARE HERE
    └─ No → Use Pydantic (validation critical)
"""

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import ClassVar, Union

from options_analytics.errors import StrategyDefinitionError
from options_analytics.models.contracts import OptionsLeg, OptionType


class StrategyType(str, Enum):
    """
    Strategy type enum.

    Closed set of strategy variants supported by the builder.
    """

    LONG_CALL = "long_call"
    LONG_PUT = "long_put"
    COVERED_CALL = "covered_call"
    CASH_SECURED_PUT = "cash_secured_put"
    PROTECTIVE_PUT = "protective_put"
    STRADDLE = "straddle"
    STRANGLE = "strangle"
    VERTICAL_SPREAD = "vertical_spread"
    IRON_CONDOR = "iron_condor"
    BUTTERFLY = "butterfly"
    CUSTOM = "custom"


# Fixed leg count per variant (None = any positive number of legs)
VARIANT_ARITY: dict[StrategyType, int | None] = {
    StrategyType.LONG_CALL: 1,
    StrategyType.LONG_PUT: 1,
    StrategyType.COVERED_CALL: 1,
    StrategyType.CASH_SECURED_PUT: 1,
    StrategyType.PROTECTIVE_PUT: 1,
    StrategyType.STRADDLE: 2,
    StrategyType.STRANGLE: 2,
    StrategyType.VERTICAL_SPREAD: 2,
    StrategyType.IRON_CONDOR: 4,
    StrategyType.BUTTERFLY: 3,
    StrategyType.CUSTOM: None,
}


@dataclass(slots=True, frozen=True)
class LongCallSpec:
    """Buy calls: unlimited upside, premium at risk."""

    strategy_type: ClassVar[StrategyType] = StrategyType.LONG_CALL

    underlying: str
    strike: float
    expiration: date
    premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class LongPutSpec:
    """Buy puts: profit bounded by the strike, premium at risk."""

    strategy_type: ClassVar[StrategyType] = StrategyType.LONG_PUT

    underlying: str
    strike: float
    expiration: date
    premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class CashSecuredPutSpec:
    """Sell puts with cash reserved to buy the stock on assignment."""

    strategy_type: ClassVar[StrategyType] = StrategyType.CASH_SECURED_PUT

    underlying: str
    strike: float
    expiration: date
    premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class CoveredCallSpec:
    """
    Sell calls against owned stock.

    The stock is not a leg; it is carried as stock_quantity / stock_cost_basis
    context on the strategy.
    """

    strategy_type: ClassVar[StrategyType] = StrategyType.COVERED_CALL

    underlying: str
    stock_quantity: int
    stock_cost_basis: float
    call_strike: float
    expiration: date
    call_premium: float
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class ProtectivePutSpec:
    """Buy puts to protect owned stock."""

    strategy_type: ClassVar[StrategyType] = StrategyType.PROTECTIVE_PUT

    underlying: str
    stock_quantity: int
    stock_cost_basis: float
    put_strike: float
    expiration: date
    put_premium: float
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class StraddleSpec:
    """Buy a call and a put at the same strike."""

    strategy_type: ClassVar[StrategyType] = StrategyType.STRADDLE

    underlying: str
    strike: float
    expiration: date
    call_premium: float
    put_premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class StrangleSpec:
    """Buy an OTM put and an OTM call (put_strike < call_strike)."""

    strategy_type: ClassVar[StrategyType] = StrategyType.STRANGLE

    underlying: str
    put_strike: float
    call_strike: float
    expiration: date
    call_premium: float
    put_premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class VerticalSpreadSpec:
    """
    Buy one strike, sell another of the same type and expiration.

    Debit or credit follows from which leg is long:
    long lower call = bull call (debit), long higher put = bear put (debit),
    short lower call = bear call (credit), short higher put = bull put (credit).
    """

    strategy_type: ClassVar[StrategyType] = StrategyType.VERTICAL_SPREAD

    underlying: str
    option_type: OptionType
    long_strike: float
    short_strike: float
    expiration: date
    long_premium: float
    short_premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class IronCondorSpec:
    """
    Short put spread + short call spread.

    Strikes must satisfy put_buy < put_sell < call_sell < call_buy.
    """

    strategy_type: ClassVar[StrategyType] = StrategyType.IRON_CONDOR

    underlying: str
    put_buy_strike: float
    put_sell_strike: float
    call_sell_strike: float
    call_buy_strike: float
    expiration: date
    put_buy_premium: float
    put_sell_premium: float
    call_sell_premium: float
    call_buy_premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class ButterflySpec:
    """
    Long lower, 2x short middle, long upper (equal wings).

    Strikes must satisfy lower < middle < upper.
    """

    strategy_type: ClassVar[StrategyType] = StrategyType.BUTTERFLY

    underlying: str
    option_type: OptionType
    lower_strike: float
    middle_strike: float
    upper_strike: float
    expiration: date
    lower_premium: float
    middle_premium: float
    upper_premium: float
    quantity: int = 1
    multiplier: int = 100


@dataclass(slots=True, frozen=True)
class CustomSpec:
    """Arbitrary legs; derived fields come from the expiration payoff."""

    strategy_type: ClassVar[StrategyType] = StrategyType.CUSTOM

    legs: tuple[OptionsLeg, ...]
    name: str | None = None
    stock_quantity: int = 0
    stock_cost_basis: float = 0.0


StrategySpec = Union[
    LongCallSpec,
    LongPutSpec,
    CashSecuredPutSpec,
    CoveredCallSpec,
    ProtectivePutSpec,
    StraddleSpec,
    StrangleSpec,
    VerticalSpreadSpec,
    IronCondorSpec,
    ButterflySpec,
    CustomSpec,
]


@dataclass(slots=True, frozen=True)
class OptionsStrategy:
    """
    Strategy data model.

    Represents a complete options strategy with all legs and its derived
    risk profile.

    Attributes:
        name: Human-readable name (e.g., "SPY Iron Condor 430/440/460/470 2026-03-20")
        strategy_type: Variant of the strategy
        legs: Ordered tuple of legs (1..N)
        spec: Variant spec the strategy was built from
        max_profit: Maximum profit in dollars (math.inf = unlimited)
        max_loss: Maximum loss in dollars as a positive amount (math.inf = unlimited)
        breakevens: Underlying prices where expiration P&L is zero
        collateral: Capital that must be held against the position
        margin: Buying power required to open
        description: Short description of the variant
        stock_quantity: Shares of implied stock (covered call / protective put)
        stock_cost_basis: Per-share cost of the implied stock
    """

    name: str
    strategy_type: StrategyType
    legs: tuple[OptionsLeg, ...]
    spec: StrategySpec
    max_profit: float
    max_loss: float
    breakevens: tuple[float, ...]
    collateral: float
    margin: float
    description: str = ""
    stock_quantity: int = 0
    stock_cost_basis: float = 0.0

    def __post_init__(self):
        if not isinstance(self.legs, tuple):
            object.__setattr__(self, "legs", tuple(self.legs))
        if not isinstance(self.breakevens, tuple):
            object.__setattr__(self, "breakevens", tuple(self.breakevens))

        if not self.legs:
            raise StrategyDefinitionError(
                "Strategy must have at least one leg", strategy_type=self.strategy_type.value
            )

        arity = VARIANT_ARITY[self.strategy_type]
        if arity is not None and len(self.legs) != arity:
            raise StrategyDefinitionError(
                f"{self.strategy_type.value} requires {arity} legs, got {len(self.legs)}",
                strategy_type=self.strategy_type.value,
            )

        underlyings = {leg.contract.underlying for leg in self.legs}
        if len(underlyings) != 1:
            raise StrategyDefinitionError(
                f"All legs must share one underlying, got {sorted(underlyings)}",
                strategy_type=self.strategy_type.value,
            )

    @property
    def underlying(self) -> str:
        return self.legs[0].contract.underlying

    @property
    def expiration(self) -> date:
        """Nearest expiration across legs."""
        return min(leg.contract.expiration for leg in self.legs)

    @property
    def net_premium(self) -> float:
        """Signed net premium in dollars (> 0 debit paid, < 0 credit received)."""
        return sum(leg.premium for leg in self.legs)

    @property
    def is_credit(self) -> bool:
        return self.net_premium < 0

    @property
    def is_max_profit_unlimited(self) -> bool:
        return math.isinf(self.max_profit)

    @property
    def is_max_loss_unlimited(self) -> bool:
        return math.isinf(self.max_loss)

    @property
    def has_stock(self) -> bool:
        return self.stock_quantity != 0

    def days_to_expiration(self, as_of: date) -> int:
        return (self.expiration - as_of).days

    def __repr__(self) -> str:
        return (
            f"OptionsStrategy(name={self.name!r}, type={self.strategy_type.value}, "
            f"legs={len(self.legs)}, max_profit={self.max_profit}, max_loss={self.max_loss})"
        )
