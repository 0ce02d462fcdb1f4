"""
Position and Trade Data Models

OptionsPosition is an opened strategy revalued against fresh market inputs;
HistoricalTrade is a closed trade record consumed by performance analytics.

Key patterns:
- dataclass(slots=True, frozen=True): revaluation produces a new position
- __post_init__ validation for data integrity
- Lifecycle transitions live in options_analytics.analysis.positions
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from options_analytics.errors import DomainRangeError, require_finite
from options_analytics.models.contracts import GreeksCalculation, MarketSnapshot

if TYPE_CHECKING:
    from options_analytics.strategies.models import OptionsStrategy


class PositionStatus(str, Enum):
    """
    Position status enum.

    CLOSED and EXPIRED are terminal.
    """

    OPEN = "open"
    CLOSED = "closed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (PositionStatus.CLOSED, PositionStatus.EXPIRED)


@dataclass(slots=True, frozen=True)
class OptionsPosition:
    """
    Opened strategy with its latest valuation.

    Attributes:
        position_id: Unique identifier for this position
        strategy: Strategy that was executed
        open_date: Date the strategy was opened
        cost_basis: Signed net premium paid at entry in dollars (negative for credits)
        current_value: Signed theoretical value of all legs in dollars
        unrealized_pnl: current_value - cost_basis
        day_change: Change of current_value since the previous revaluation
        greeks: Dollar Greeks of the whole position
        days_to_expiration: Calendar days to the nearest leg expiration
        status: OPEN, CLOSED or EXPIRED
        market: Market inputs of the latest revaluation
        close_date: Date the position was closed or expired
        realized_pnl: P&L locked in on close/expiry
    """

    position_id: str
    strategy: "OptionsStrategy"
    open_date: date
    cost_basis: float
    current_value: float
    unrealized_pnl: float
    day_change: float
    greeks: GreeksCalculation
    days_to_expiration: int
    status: PositionStatus = PositionStatus.OPEN
    market: MarketSnapshot | None = None
    close_date: date | None = None
    realized_pnl: float | None = None

    def __post_init__(self):
        if not self.position_id or not self.position_id.strip():
            raise DomainRangeError("Position ID cannot be empty", field="position_id", value=self.position_id)
        require_finite(self.cost_basis, "cost_basis")
        require_finite(self.current_value, "current_value")

        if self.status.is_terminal and self.close_date is None:
            raise DomainRangeError(
                f"{self.status.value} position must have close_date",
                field="close_date",
                value=None,
            )

    @property
    def underlying(self) -> str:
        return self.strategy.underlying

    @property
    def strategy_tag(self) -> str:
        return self.strategy.strategy_type.value

    @property
    def is_open(self) -> bool:
        return self.status == PositionStatus.OPEN

    def __repr__(self) -> str:
        return (
            f"OptionsPosition(id={self.position_id}, type={self.strategy_tag}, "
            f"underlying={self.underlying}, status={self.status.value}, "
            f"pnl={self.unrealized_pnl:.2f})"
        )


@dataclass(slots=True, frozen=True)
class HistoricalTrade:
    """
    Closed trade record.

    Attributes:
        trade_id: Unique identifier
        strategy: Strategy tag (e.g., "iron_condor")
        underlying: Underlying symbol
        open_date: Date the trade was opened
        close_date: Date the trade was closed (None if unknown)
        realized_pnl: Realized profit/loss in dollars
        cost_basis: Capital committed to the trade in dollars
    """

    trade_id: str
    strategy: str
    underlying: str
    open_date: date
    realized_pnl: float
    cost_basis: float
    close_date: date | None = None

    def __post_init__(self):
        require_finite(self.realized_pnl, "realized_pnl")
        require_finite(self.cost_basis, "cost_basis")
        if self.close_date is not None and self.close_date < self.open_date:
            raise DomainRangeError(
                f"close_date {self.close_date} precedes open_date {self.open_date}",
                field="close_date",
                value=self.close_date,
            )

    @property
    def is_winning(self) -> bool:
        return self.realized_pnl > 0

    @property
    def settlement_date(self) -> date:
        """Close date when known, otherwise the open date."""
        return self.close_date or self.open_date

    @property
    def holding_period_days(self) -> int | None:
        if self.close_date is None:
            return None
        return (self.close_date - self.open_date).days
