"""
Option Contract Data Models

This module provides the immutable building blocks shared by every layer:
option contracts, strategy legs, Greeks and market snapshots.

Key patterns:
- dataclass(slots=True, frozen=True): values are derived, never hand-edited
- __post_init__ validation for data integrity (DomainRangeError on bad input)
- str enums so values serialize cleanly to JSON

Decision tree:
    Is this data internal to my process?
    ├─ Yes → Use dataclass (performance matters) ← WE ARE HERE
    └─ No → Use Pydantic (validation critical)
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from options_analytics.errors import (
    DomainRangeError,
    StrategyDefinitionError,
    require_finite,
    require_non_negative,
    require_positive,
)


class OptionType(str, Enum):
    """Option contract kind (call or put)."""

    CALL = "call"
    PUT = "put"


class PositionSide(str, Enum):
    """Leg side (long or short)."""

    LONG = "long"
    SHORT = "short"


class OpenAction(str, Enum):
    """Opening action of a leg."""

    BUY_TO_OPEN = "buy_to_open"
    SELL_TO_OPEN = "sell_to_open"


_ACTION_FOR_SIDE = {
    PositionSide.LONG: OpenAction.BUY_TO_OPEN,
    PositionSide.SHORT: OpenAction.SELL_TO_OPEN,
}


@dataclass(slots=True, frozen=True)
class OptionContract:
    """
    Option contract data model.

    Identity is underlying + strike + expiration + option type; multiplier
    and exchange do not take part in equality or hashing.

    Attributes:
        underlying: Underlying symbol (e.g., "SPY")
        option_type: CALL or PUT
        strike: Strike price (> 0)
        expiration: Expiration date
        multiplier: Shares per contract (default: 100)
        exchange: Exchange identifier (default: "OPRA")
    """

    underlying: str
    option_type: OptionType
    strike: float
    expiration: date
    multiplier: int = field(default=100, compare=False)
    exchange: str = field(default="OPRA", compare=False)

    def __post_init__(self):
        if not self.underlying or not self.underlying.strip():
            raise DomainRangeError("Underlying cannot be empty", field="underlying", value=self.underlying)
        if not isinstance(self.option_type, OptionType):
            # Accept raw strings ("call"/"put") from config files and JSON payloads
            try:
                object.__setattr__(self, "option_type", OptionType(str(self.option_type).lower()))
            except ValueError:
                raise DomainRangeError(
                    f"Invalid option type: {self.option_type}",
                    field="option_type",
                    value=self.option_type,
                ) from None
        require_positive(self.strike, "strike")
        require_positive(self.multiplier, "multiplier")
        if not isinstance(self.expiration, date):
            raise DomainRangeError(
                f"Expiration must be a date, got {self.expiration!r}",
                field="expiration",
                value=self.expiration,
            )

    @property
    def key(self) -> tuple[str, float, date, str]:
        """Identity tuple of the contract."""
        return (self.underlying, self.strike, self.expiration, self.option_type.value)

    @property
    def is_call(self) -> bool:
        return self.option_type == OptionType.CALL

    @property
    def option_symbol(self) -> str:
        """OCC-style option symbol, e.g. SPY260320C00450000."""
        type_char = "C" if self.is_call else "P"
        strike_part = f"{int(round(self.strike * 1000)):08d}"
        return f"{self.underlying}{self.expiration.strftime('%y%m%d')}{type_char}{strike_part}"

    def days_to_expiration(self, as_of: date) -> int:
        """Calendar days from as_of to expiration (negative once expired)."""
        return (self.expiration - as_of).days

    def __repr__(self) -> str:
        return (
            f"OptionContract({self.underlying} {self.option_type.value.upper()} "
            f"${self.strike} {self.expiration})"
        )


@dataclass(slots=True, frozen=True)
class OptionsLeg:
    """
    One component of a strategy.

    Attributes:
        contract: Option contract (a leg never exists without one)
        side: LONG or SHORT
        quantity: Number of contracts (> 0, side carries the direction)
        entry_price: Premium per share paid or received
        action: Opening action, derived from side when omitted
    """

    contract: OptionContract
    side: PositionSide
    quantity: int
    entry_price: float
    action: OpenAction | None = None

    def __post_init__(self):
        if not isinstance(self.contract, OptionContract):
            raise StrategyDefinitionError(f"Leg requires an OptionContract, got {self.contract!r}")
        if not isinstance(self.side, PositionSide):
            try:
                object.__setattr__(self, "side", PositionSide(str(self.side).lower()))
            except ValueError:
                raise DomainRangeError(f"Invalid leg side: {self.side}", field="side", value=self.side) from None
        require_positive(self.quantity, "quantity")
        require_non_negative(self.entry_price, "entry_price")

        expected = _ACTION_FOR_SIDE[self.side]
        if self.action is None:
            object.__setattr__(self, "action", expected)
        else:
            action = OpenAction(self.action)
            if action != expected:
                raise StrategyDefinitionError(
                    f"Leg action {action.value} does not match side {self.side.value}"
                )
            object.__setattr__(self, "action", action)

    @property
    def sign(self) -> int:
        """+1 for long legs, -1 for short legs."""
        return 1 if self.side == PositionSide.LONG else -1

    @property
    def signed_quantity(self) -> int:
        return self.sign * self.quantity

    @property
    def premium(self) -> float:
        """Signed premium in dollars: positive when paid, negative when received."""
        return self.sign * self.entry_price * self.quantity * self.contract.multiplier

    def __repr__(self) -> str:
        return (
            f"OptionsLeg({self.side.value} {self.quantity}x {self.contract.option_type.value.upper()} "
            f"${self.contract.strike} {self.contract.expiration} @ {self.entry_price})"
        )


@dataclass(slots=True, frozen=True)
class GreeksCalculation:
    """
    Greeks 5-tuple for a single contract or an aggregated portfolio.

    Units: theta per calendar day, vega per 1 vol point, rho per 1 rate point.

    Attributes:
        delta: Price sensitivity to the underlying
        gamma: Rate of change of delta
        theta: Value lost per calendar day
        vega: Value change per 1 percentage-point volatility move
        rho: Value change per 1 percentage-point rate move
    """

    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0
    rho: float = 0.0

    @classmethod
    def zero(cls) -> "GreeksCalculation":
        return cls()

    def scaled(self, factor: float) -> "GreeksCalculation":
        """Return every Greek multiplied by factor."""
        return GreeksCalculation(
            delta=self.delta * factor,
            gamma=self.gamma * factor,
            theta=self.theta * factor,
            vega=self.vega * factor,
            rho=self.rho * factor,
        )

    def __add__(self, other: "GreeksCalculation") -> "GreeksCalculation":
        if not isinstance(other, GreeksCalculation):
            return NotImplemented
        return GreeksCalculation(
            delta=self.delta + other.delta,
            gamma=self.gamma + other.gamma,
            theta=self.theta + other.theta,
            vega=self.vega + other.vega,
            rho=self.rho + other.rho,
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "delta": self.delta,
            "gamma": self.gamma,
            "theta": self.theta,
            "vega": self.vega,
            "rho": self.rho,
        }

    def __repr__(self) -> str:
        return (
            f"GreeksCalculation(delta={self.delta:.4f}, gamma={self.gamma:.4f}, "
            f"theta={self.theta:.4f}, vega={self.vega:.4f}, rho={self.rho:.4f})"
        )


@dataclass(slots=True, frozen=True)
class MarketSnapshot:
    """
    Market inputs for one underlying at one date.

    Supplied by an external market-data collaborator as plain numbers.

    Attributes:
        underlying_price: Current underlying price (> 0)
        volatility: Annualized volatility as a decimal (>= 0)
        risk_free_rate: Annualized continuously-compounded rate
        dividend_yield: Annualized continuous dividend yield
        as_of: Valuation date
    """

    underlying_price: float
    volatility: float
    risk_free_rate: float
    as_of: date
    dividend_yield: float = 0.0

    def __post_init__(self):
        require_positive(self.underlying_price, "underlying_price")
        require_non_negative(self.volatility, "volatility")
        require_finite(self.risk_free_rate, "risk_free_rate")
        require_finite(self.dividend_yield, "dividend_yield")
