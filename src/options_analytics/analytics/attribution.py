"""
P&L Attribution

Decomposes the P&L of open positions between two market snapshots into
Greek contributions, using the dollar Greeks of the previous snapshot:

    delta    = delta x dS
    gamma    = 1/2 x gamma x dS^2
    theta    = theta x elapsed calendar days
    vega     = vega x d(vol) in points
    rho      = rho x d(rate) in points
    residual = total - (sum of the above)

total is the repriced value change of the position, so the components
always sum to it exactly.
"""

from collections import defaultdict
from typing import Iterable, Mapping

from loguru import logger

from options_analytics.analysis.positions import revalue_position
from options_analytics.analytics.models import PnLAttribution, PositionAttribution
from options_analytics.errors import DomainRangeError
from options_analytics.models.contracts import MarketSnapshot
from options_analytics.models.positions import OptionsPosition

logger = logger.bind(component="PnLAttribution")


def calculate_position_attribution(
    position: OptionsPosition,
    current: MarketSnapshot,
    previous: MarketSnapshot | None = None,
) -> PositionAttribution:
    """
    Attribute one open position's P&L between two snapshots.

    Args:
        position: OPEN position
        current: Market snapshot at the end of the period
        previous: Market snapshot at the start (default: the position's last valuation)

    Returns:
        PositionAttribution

    Raises:
        DomainRangeError: If no previous snapshot is available
        PositionStateError: If the position is CLOSED or EXPIRED
    """
    if previous is None:
        previous = position.market
    if previous is None:
        raise DomainRangeError(
            f"Position {position.position_id} has no previous market snapshot",
            field="previous",
            value=None,
        )

    start = position if position.market == previous else revalue_position(position, previous)
    end = revalue_position(start, current)

    greeks = start.greeks
    price_move = current.underlying_price - previous.underlying_price
    days = (current.as_of - previous.as_of).days
    vol_points = (current.volatility - previous.volatility) * 100
    rate_points = (current.risk_free_rate - previous.risk_free_rate) * 100

    total = end.current_value - start.current_value
    delta_contribution = greeks.delta * price_move
    gamma_contribution = 0.5 * greeks.gamma * price_move ** 2
    theta_contribution = greeks.theta * days
    vega_contribution = greeks.vega * vol_points
    rho_contribution = greeks.rho * rate_points

    explained = (
        delta_contribution
        + gamma_contribution
        + theta_contribution
        + vega_contribution
        + rho_contribution
    )

    return PositionAttribution(
        position_id=position.position_id,
        strategy=position.strategy_tag,
        underlying=position.underlying,
        total_pnl=total,
        delta_contribution=delta_contribution,
        gamma_contribution=gamma_contribution,
        theta_contribution=theta_contribution,
        vega_contribution=vega_contribution,
        rho_contribution=rho_contribution,
        residual_contribution=total - explained,
    )


def calculate_pnl_attribution(
    positions: Iterable[OptionsPosition],
    markets: Mapping[str, MarketSnapshot],
    previous_markets: Mapping[str, MarketSnapshot] | None = None,
) -> PnLAttribution:
    """
    Attribute the P&L of all open positions.

    Closed and expired positions are skipped.

    Args:
        positions: Positions to attribute
        markets: Current snapshot per underlying symbol
        previous_markets: Previous snapshot per underlying (default: each
            position's last valuation)

    Returns:
        PnLAttribution with totals by position, strategy and underlying

    Raises:
        DomainRangeError: If an underlying has no current snapshot
    """
    attributions = []
    for position in positions:
        if not position.is_open:
            continue
        current = markets.get(position.underlying)
        if current is None:
            raise DomainRangeError(
                f"No market snapshot for {position.underlying}",
                field="markets",
                value=position.underlying,
            )
        previous = previous_markets.get(position.underlying) if previous_markets else None
        attributions.append(calculate_position_attribution(position, current, previous))

    by_strategy: dict[str, float] = defaultdict(float)
    by_underlying: dict[str, float] = defaultdict(float)
    for item in attributions:
        by_strategy[item.strategy] += item.total_pnl
        by_underlying[item.underlying] += item.total_pnl

    result = PnLAttribution(
        total_pnl=sum(a.total_pnl for a in attributions),
        delta_contribution=sum(a.delta_contribution for a in attributions),
        gamma_contribution=sum(a.gamma_contribution for a in attributions),
        theta_contribution=sum(a.theta_contribution for a in attributions),
        vega_contribution=sum(a.vega_contribution for a in attributions),
        rho_contribution=sum(a.rho_contribution for a in attributions),
        residual_contribution=sum(a.residual_contribution for a in attributions),
        by_position=tuple(attributions),
        by_strategy=dict(by_strategy),
        by_underlying=dict(by_underlying),
    )

    logger.info(
        f"✓ Attributed ${result.total_pnl:,.2f} across {len(attributions)} positions "
        f"(residual ${result.residual_contribution:,.2f})"
    )
    return result
