"""
Position Lifecycle

Opens, revalues, closes and expires OptionsPosition values. Positions are
immutable: every transition returns a new position.

State machine:
    OPEN --revalue--> OPEN
    OPEN --close----> CLOSED   (terminal)
    OPEN --expire---> EXPIRED  (terminal)

Any transition out of CLOSED or EXPIRED raises PositionStateError.

Valuation (dollars):
    cost_basis    = net premium paid (+ implied stock cost)
    current_value = signed theoretical value of the legs (+ stock at market)
    greeks        = dollar Greeks (stock adds one delta per share)
"""

from dataclasses import replace
from datetime import date

from loguru import logger

from options_analytics.errors import PositionStateError
from options_analytics.models.contracts import GreeksCalculation, MarketSnapshot
from options_analytics.models.positions import HistoricalTrade, OptionsPosition, PositionStatus
from options_analytics.pricing.greeks_calculator import GreeksCalculator
from options_analytics.strategies.models import OptionsStrategy
from options_analytics.strategies.payoff import expiration_pnl

logger = logger.bind(component="PositionLifecycle")

_calculator = GreeksCalculator()


def _valuation(strategy: OptionsStrategy, market: MarketSnapshot) -> tuple[float, GreeksCalculation]:
    value = _calculator.strategy_value(
        strategy,
        market.underlying_price,
        market.volatility,
        market.risk_free_rate,
        market.dividend_yield,
        as_of=market.as_of,
    )
    greeks = _calculator.strategy_greeks(
        strategy,
        market.underlying_price,
        market.volatility,
        market.risk_free_rate,
        market.dividend_yield,
        as_of=market.as_of,
        dollar=True,
    )
    if strategy.stock_quantity:
        value += strategy.stock_quantity * market.underlying_price
        greeks = greeks + GreeksCalculation(delta=float(strategy.stock_quantity))
    return value, greeks


def _require_open(position: OptionsPosition, action: str) -> None:
    if position.status.is_terminal:
        raise PositionStateError(
            f"Cannot {action} position {position.position_id}: status is {position.status.value}",
            position_id=position.position_id,
            status=position.status.value,
        )


def open_position(
    position_id: str,
    strategy: OptionsStrategy,
    market: MarketSnapshot,
    open_date: date | None = None,
) -> OptionsPosition:
    """
    Open a position on a strategy at its entry premiums.

    Args:
        position_id: Unique identifier
        strategy: Strategy being opened
        market: Market snapshot used for the initial valuation
        open_date: Date opened (default: market.as_of)

    Returns:
        OPEN OptionsPosition
    """
    cost_basis = strategy.net_premium + strategy.stock_quantity * strategy.stock_cost_basis
    value, greeks = _valuation(strategy, market)

    position = OptionsPosition(
        position_id=position_id,
        strategy=strategy,
        open_date=open_date or market.as_of,
        cost_basis=cost_basis,
        current_value=value,
        unrealized_pnl=value - cost_basis,
        day_change=0.0,
        greeks=greeks,
        days_to_expiration=strategy.days_to_expiration(market.as_of),
        market=market,
    )

    logger.info(f"Opened position {position_id}: {strategy.name}, cost basis ${cost_basis:,.2f}")
    return position


def revalue_position(position: OptionsPosition, market: MarketSnapshot) -> OptionsPosition:
    """
    Revalue an open position against fresh market inputs.

    Returns:
        New OPEN position; day_change is the value change since the previous valuation

    Raises:
        PositionStateError: If the position is CLOSED or EXPIRED
    """
    _require_open(position, "revalue")
    value, greeks = _valuation(position.strategy, market)

    return replace(
        position,
        current_value=value,
        unrealized_pnl=value - position.cost_basis,
        day_change=value - position.current_value,
        greeks=greeks,
        days_to_expiration=position.strategy.days_to_expiration(market.as_of),
        market=market,
    )


def close_position(
    position: OptionsPosition,
    close_date: date | None = None,
    exit_value: float | None = None,
) -> OptionsPosition:
    """
    Close an open position.

    Args:
        position: OPEN position
        close_date: Date closed (default: valuation date of the position, else today)
        exit_value: Signed value received on exit in dollars (default: current_value)

    Returns:
        CLOSED position with realized_pnl = exit_value - cost_basis

    Raises:
        PositionStateError: If the position is already CLOSED or EXPIRED
    """
    _require_open(position, "close")
    exit_value = position.current_value if exit_value is None else exit_value
    close_date = close_date or (position.market.as_of if position.market else date.today())
    realized = exit_value - position.cost_basis

    closed = replace(
        position,
        status=PositionStatus.CLOSED,
        close_date=close_date,
        current_value=exit_value,
        unrealized_pnl=0.0,
        realized_pnl=realized,
        greeks=GreeksCalculation.zero(),
    )

    logger.info(f"Closed position {position.position_id}: realized P&L ${realized:,.2f}")
    return closed


def expire_position(
    position: OptionsPosition,
    settlement_price: float,
    expiration_date: date | None = None,
) -> OptionsPosition:
    """
    Settle an open position at expiration.

    Args:
        position: OPEN position
        settlement_price: Underlying price at expiration
        expiration_date: Settlement date (default: strategy expiration)

    Returns:
        EXPIRED position with realized_pnl = expiration payoff

    Raises:
        PositionStateError: If the position is already CLOSED or EXPIRED
    """
    _require_open(position, "expire")
    realized = expiration_pnl(position.strategy, settlement_price)

    expired = replace(
        position,
        status=PositionStatus.EXPIRED,
        close_date=expiration_date or position.strategy.expiration,
        current_value=position.cost_basis + realized,
        unrealized_pnl=0.0,
        realized_pnl=realized,
        greeks=GreeksCalculation.zero(),
        days_to_expiration=0,
    )

    logger.info(f"Expired position {position.position_id} at ${settlement_price}: P&L ${realized:,.2f}")
    return expired


def to_historical_trade(position: OptionsPosition) -> HistoricalTrade:
    """
    Convert a CLOSED or EXPIRED position into a trade record.

    Raises:
        PositionStateError: If the position is still OPEN
    """
    if not position.status.is_terminal:
        raise PositionStateError(
            f"Position {position.position_id} is still open",
            position_id=position.position_id,
            status=position.status.value,
        )
    return HistoricalTrade(
        trade_id=position.position_id,
        strategy=position.strategy_tag,
        underlying=position.underlying,
        open_date=position.open_date,
        close_date=position.close_date,
        realized_pnl=position.realized_pnl,
        cost_basis=abs(position.cost_basis),
    )
