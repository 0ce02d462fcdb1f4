"""
Strategy Factory

Turns a variant spec into an immutable OptionsStrategy with its derived risk
profile. build_strategy dispatches exhaustively over the closed set of spec
types; each create_* constructor is a keyword-argument shortcut for one
variant.

All dollar amounts are per-share amounts x quantity x multiplier.

Usage:
    >>> condor = create_iron_condor(
    ...     "SPY", 430, 440, 460, 470, date(2026, 3, 20),
    ...     put_buy_premium=1.0, put_sell_premium=2.5,
    ...     call_sell_premium=2.4, call_buy_premium=0.9,
    ... )
    >>> condor.max_profit, condor.max_loss
    (300.0, 700.0)
"""

import math
from datetime import date
from typing import Callable, Sequence

from loguru import logger

from options_analytics.errors import (
    DomainRangeError,
    StrategyDefinitionError,
    require_non_negative,
    require_positive,
)
from options_analytics.models.contracts import OptionContract, OptionsLeg, OptionType, PositionSide
from options_analytics.strategies.models import (
    ButterflySpec,
    CashSecuredPutSpec,
    CoveredCallSpec,
    CustomSpec,
    IronCondorSpec,
    LongCallSpec,
    LongPutSpec,
    OptionsStrategy,
    ProtectivePutSpec,
    StraddleSpec,
    StrangleSpec,
    StrategySpec,
    StrategyType,
    VerticalSpreadSpec,
)
from options_analytics.strategies.payoff import derive_payoff_profile

logger = logger.bind(component="StrategyFactory")


def _fmt(strike: float) -> str:
    return f"{strike:g}"


def _check_sizing(quantity: int, multiplier: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise DomainRangeError(f"quantity must be an integer, got {quantity!r}", field="quantity", value=quantity)
    require_positive(quantity, "quantity")
    require_positive(multiplier, "multiplier")


def _leg(
    underlying: str,
    option_type: OptionType,
    strike: float,
    expiration: date,
    side: PositionSide,
    quantity: int,
    price: float,
    multiplier: int,
) -> OptionsLeg:
    require_non_negative(price, "premium")
    contract = OptionContract(
        underlying=underlying,
        option_type=option_type,
        strike=strike,
        expiration=expiration,
        multiplier=multiplier,
    )
    return OptionsLeg(contract=contract, side=side, quantity=quantity, entry_price=price)


def _option_type(value) -> OptionType:
    try:
        return OptionType(str(getattr(value, "value", value)).lower())
    except ValueError:
        raise DomainRangeError(f"Invalid option type: {value}", field="option_type", value=value) from None


def _shares_to_contracts(stock_quantity: int, multiplier: int, strategy_type: StrategyType) -> int:
    require_positive(stock_quantity, "stock_quantity")
    if stock_quantity % multiplier != 0:
        raise StrategyDefinitionError(
            f"stock_quantity {stock_quantity} is not a multiple of the contract multiplier {multiplier}",
            strategy_type=strategy_type.value,
        )
    return stock_quantity // multiplier


# =============================================================================
# Variant builders
# =============================================================================


def _build_long_call(spec: LongCallSpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    shares = spec.quantity * spec.multiplier
    leg = _leg(
        spec.underlying, OptionType.CALL, spec.strike, spec.expiration,
        PositionSide.LONG, spec.quantity, spec.premium, spec.multiplier,
    )
    cost = spec.premium * shares
    return OptionsStrategy(
        name=f"{spec.underlying} Long Call {_fmt(spec.strike)} {spec.expiration}",
        strategy_type=StrategyType.LONG_CALL,
        legs=(leg,),
        spec=spec,
        max_profit=math.inf,
        max_loss=cost,
        breakevens=(spec.strike + spec.premium,),
        collateral=0.0,
        margin=cost,
        description="Bullish: unlimited upside, premium at risk",
    )


def _build_long_put(spec: LongPutSpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    shares = spec.quantity * spec.multiplier
    leg = _leg(
        spec.underlying, OptionType.PUT, spec.strike, spec.expiration,
        PositionSide.LONG, spec.quantity, spec.premium, spec.multiplier,
    )
    cost = spec.premium * shares
    return OptionsStrategy(
        name=f"{spec.underlying} Long Put {_fmt(spec.strike)} {spec.expiration}",
        strategy_type=StrategyType.LONG_PUT,
        legs=(leg,),
        spec=spec,
        max_profit=(spec.strike - spec.premium) * shares,
        max_loss=cost,
        breakevens=(spec.strike - spec.premium,),
        collateral=0.0,
        margin=cost,
        description="Bearish: profit bounded by the strike, premium at risk",
    )


def _build_cash_secured_put(spec: CashSecuredPutSpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    shares = spec.quantity * spec.multiplier
    leg = _leg(
        spec.underlying, OptionType.PUT, spec.strike, spec.expiration,
        PositionSide.SHORT, spec.quantity, spec.premium, spec.multiplier,
    )
    secured = spec.strike * shares
    return OptionsStrategy(
        name=f"{spec.underlying} Cash-Secured Put {_fmt(spec.strike)} {spec.expiration}",
        strategy_type=StrategyType.CASH_SECURED_PUT,
        legs=(leg,),
        spec=spec,
        max_profit=spec.premium * shares,
        max_loss=(spec.strike - spec.premium) * shares,
        breakevens=(spec.strike - spec.premium,),
        collateral=secured,
        margin=secured,
        description="Neutral to bullish: collect premium, cash reserved for assignment",
    )


def _build_covered_call(spec: CoveredCallSpec) -> OptionsStrategy:
    require_positive(spec.multiplier, "multiplier")
    require_positive(spec.stock_cost_basis, "stock_cost_basis")
    contracts = _shares_to_contracts(spec.stock_quantity, spec.multiplier, StrategyType.COVERED_CALL)
    shares = spec.stock_quantity
    leg = _leg(
        spec.underlying, OptionType.CALL, spec.call_strike, spec.expiration,
        PositionSide.SHORT, contracts, spec.call_premium, spec.multiplier,
    )
    return OptionsStrategy(
        name=f"{spec.underlying} Covered Call {_fmt(spec.call_strike)} {spec.expiration}",
        strategy_type=StrategyType.COVERED_CALL,
        legs=(leg,),
        spec=spec,
        max_profit=(spec.call_strike - spec.stock_cost_basis + spec.call_premium) * shares,
        max_loss=(spec.stock_cost_basis - spec.call_premium) * shares,
        breakevens=(spec.stock_cost_basis - spec.call_premium,),
        collateral=spec.stock_cost_basis * shares,
        margin=0.0,
        description="Neutral to bullish: income on owned stock, upside capped at the strike",
        stock_quantity=shares,
        stock_cost_basis=spec.stock_cost_basis,
    )


def _build_protective_put(spec: ProtectivePutSpec) -> OptionsStrategy:
    require_positive(spec.multiplier, "multiplier")
    require_positive(spec.stock_cost_basis, "stock_cost_basis")
    contracts = _shares_to_contracts(spec.stock_quantity, spec.multiplier, StrategyType.PROTECTIVE_PUT)
    shares = spec.stock_quantity
    leg = _leg(
        spec.underlying, OptionType.PUT, spec.put_strike, spec.expiration,
        PositionSide.LONG, contracts, spec.put_premium, spec.multiplier,
    )
    return OptionsStrategy(
        name=f"{spec.underlying} Protective Put {_fmt(spec.put_strike)} {spec.expiration}",
        strategy_type=StrategyType.PROTECTIVE_PUT,
        legs=(leg,),
        spec=spec,
        max_profit=math.inf,
        max_loss=(spec.stock_cost_basis - spec.put_strike + spec.put_premium) * shares,
        breakevens=(spec.stock_cost_basis + spec.put_premium,),
        collateral=0.0,
        margin=spec.put_premium * shares,
        description="Bullish with insurance: downside floored at the put strike",
        stock_quantity=shares,
        stock_cost_basis=spec.stock_cost_basis,
    )


def _build_straddle(spec: StraddleSpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    shares = spec.quantity * spec.multiplier
    legs = (
        _leg(spec.underlying, OptionType.CALL, spec.strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.call_premium, spec.multiplier),
        _leg(spec.underlying, OptionType.PUT, spec.strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.put_premium, spec.multiplier),
    )
    total = spec.call_premium + spec.put_premium
    return OptionsStrategy(
        name=f"{spec.underlying} Long Straddle {_fmt(spec.strike)} {spec.expiration}",
        strategy_type=StrategyType.STRADDLE,
        legs=legs,
        spec=spec,
        max_profit=math.inf,
        max_loss=total * shares,
        breakevens=(spec.strike - total, spec.strike + total),
        collateral=0.0,
        margin=total * shares,
        description="Long volatility: profits from a large move either way",
    )


def _build_strangle(spec: StrangleSpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    require_positive(spec.put_strike, "put_strike")
    require_positive(spec.call_strike, "call_strike")
    if spec.put_strike >= spec.call_strike:
        raise StrategyDefinitionError(
            f"Strangle requires put strike < call strike, got {spec.put_strike} >= {spec.call_strike}",
            strategy_type=StrategyType.STRANGLE.value,
        )
    shares = spec.quantity * spec.multiplier
    legs = (
        _leg(spec.underlying, OptionType.CALL, spec.call_strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.call_premium, spec.multiplier),
        _leg(spec.underlying, OptionType.PUT, spec.put_strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.put_premium, spec.multiplier),
    )
    total = spec.call_premium + spec.put_premium
    return OptionsStrategy(
        name=(
            f"{spec.underlying} Long Strangle {_fmt(spec.put_strike)}/{_fmt(spec.call_strike)} "
            f"{spec.expiration}"
        ),
        strategy_type=StrategyType.STRANGLE,
        legs=legs,
        spec=spec,
        max_profit=math.inf,
        max_loss=total * shares,
        breakevens=(spec.put_strike - total, spec.call_strike + total),
        collateral=0.0,
        margin=total * shares,
        description="Long volatility: cheaper than a straddle, needs a larger move",
    )


def _build_vertical_spread(spec: VerticalSpreadSpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    option_type = _option_type(spec.option_type)
    require_positive(spec.long_strike, "long_strike")
    require_positive(spec.short_strike, "short_strike")
    if spec.long_strike == spec.short_strike:
        raise StrategyDefinitionError(
            f"Vertical spread strikes must differ, got {spec.long_strike} for both legs",
            strategy_type=StrategyType.VERTICAL_SPREAD.value,
        )

    shares = spec.quantity * spec.multiplier
    legs = (
        _leg(spec.underlying, option_type, spec.long_strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.long_premium, spec.multiplier),
        _leg(spec.underlying, option_type, spec.short_strike, spec.expiration,
             PositionSide.SHORT, spec.quantity, spec.short_premium, spec.multiplier),
    )

    width = abs(spec.short_strike - spec.long_strike)
    net = spec.long_premium - spec.short_premium  # > 0 debit, <= 0 credit
    if abs(net) >= width:
        raise StrategyDefinitionError(
            f"Net premium {abs(net):.2f} must be smaller than the strike width {width:g}",
            strategy_type=StrategyType.VERTICAL_SPREAD.value,
        )

    if net > 0:
        max_loss = net * shares
        max_profit = (width - net) * shares
        collateral = 0.0
    else:
        max_profit = -net * shares
        max_loss = (width + net) * shares
        collateral = width * shares

    # Long the lower strike is bullish for both calls (debit) and puts (credit)
    bullish = spec.long_strike < spec.short_strike
    if option_type == OptionType.CALL:
        breakeven = min(spec.long_strike, spec.short_strike) + abs(net)
    else:
        breakeven = max(spec.long_strike, spec.short_strike) - abs(net)

    label = f"{'Bull' if bullish else 'Bear'} {option_type.value.capitalize()}"
    return OptionsStrategy(
        name=(
            f"{spec.underlying} {label} Spread {_fmt(spec.long_strike)}/{_fmt(spec.short_strike)} "
            f"{spec.expiration}"
        ),
        strategy_type=StrategyType.VERTICAL_SPREAD,
        legs=legs,
        spec=spec,
        max_profit=max_profit,
        max_loss=max_loss,
        breakevens=(breakeven,),
        collateral=collateral,
        margin=max_loss,
        description=f"{'Bullish' if bullish else 'Bearish'} {'debit' if net > 0 else 'credit'} spread",
    )


def _build_iron_condor(spec: IronCondorSpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    strikes = (spec.put_buy_strike, spec.put_sell_strike, spec.call_sell_strike, spec.call_buy_strike)
    for value, name in zip(strikes, ("put_buy_strike", "put_sell_strike", "call_sell_strike", "call_buy_strike")):
        require_positive(value, name)
    if not (spec.put_buy_strike < spec.put_sell_strike < spec.call_sell_strike < spec.call_buy_strike):
        raise StrategyDefinitionError(
            "Iron condor strikes must satisfy put buy < put sell < call sell < call buy, "
            f"got {'/'.join(_fmt(k) for k in strikes)}",
            strategy_type=StrategyType.IRON_CONDOR.value,
        )

    shares = spec.quantity * spec.multiplier
    legs = (
        _leg(spec.underlying, OptionType.PUT, spec.put_buy_strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.put_buy_premium, spec.multiplier),
        _leg(spec.underlying, OptionType.PUT, spec.put_sell_strike, spec.expiration,
             PositionSide.SHORT, spec.quantity, spec.put_sell_premium, spec.multiplier),
        _leg(spec.underlying, OptionType.CALL, spec.call_sell_strike, spec.expiration,
             PositionSide.SHORT, spec.quantity, spec.call_sell_premium, spec.multiplier),
        _leg(spec.underlying, OptionType.CALL, spec.call_buy_strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.call_buy_premium, spec.multiplier),
    )

    credit = (
        spec.put_sell_premium - spec.put_buy_premium
        + spec.call_sell_premium - spec.call_buy_premium
    )
    wing = max(spec.put_sell_strike - spec.put_buy_strike, spec.call_buy_strike - spec.call_sell_strike)
    if not 0 < credit < wing:
        raise StrategyDefinitionError(
            f"Iron condor net credit {credit:.2f} must be positive and smaller than the wing width {wing:g}",
            strategy_type=StrategyType.IRON_CONDOR.value,
        )

    return OptionsStrategy(
        name=f"{spec.underlying} Iron Condor {'/'.join(_fmt(k) for k in strikes)} {spec.expiration}",
        strategy_type=StrategyType.IRON_CONDOR,
        legs=legs,
        spec=spec,
        max_profit=credit * shares,
        max_loss=(wing - credit) * shares,
        breakevens=(spec.put_sell_strike - credit, spec.call_sell_strike + credit),
        collateral=wing * shares,
        margin=(wing - credit) * shares,
        description="Neutral: collect premium while price stays between the short strikes",
    )


def _build_butterfly(spec: ButterflySpec) -> OptionsStrategy:
    _check_sizing(spec.quantity, spec.multiplier)
    option_type = _option_type(spec.option_type)
    strikes = (spec.lower_strike, spec.middle_strike, spec.upper_strike)
    for value, name in zip(strikes, ("lower_strike", "middle_strike", "upper_strike")):
        require_positive(value, name)
    if not (spec.lower_strike < spec.middle_strike < spec.upper_strike):
        raise StrategyDefinitionError(
            f"Butterfly strikes must satisfy lower < middle < upper, got {'/'.join(_fmt(k) for k in strikes)}",
            strategy_type=StrategyType.BUTTERFLY.value,
        )
    wing = spec.middle_strike - spec.lower_strike
    if not math.isclose(wing, spec.upper_strike - spec.middle_strike, rel_tol=1e-9, abs_tol=1e-9):
        raise StrategyDefinitionError(
            f"Butterfly wings must be equal, got {wing:g} and {spec.upper_strike - spec.middle_strike:g}",
            strategy_type=StrategyType.BUTTERFLY.value,
        )

    shares = spec.quantity * spec.multiplier
    legs = (
        _leg(spec.underlying, option_type, spec.lower_strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.lower_premium, spec.multiplier),
        _leg(spec.underlying, option_type, spec.middle_strike, spec.expiration,
             PositionSide.SHORT, 2 * spec.quantity, spec.middle_premium, spec.multiplier),
        _leg(spec.underlying, option_type, spec.upper_strike, spec.expiration,
             PositionSide.LONG, spec.quantity, spec.upper_premium, spec.multiplier),
    )
    debit = spec.lower_premium - 2 * spec.middle_premium + spec.upper_premium
    if not 0 < debit < wing:
        raise StrategyDefinitionError(
            f"Butterfly net debit {debit:.2f} must be positive and smaller than the wing width {wing:g}",
            strategy_type=StrategyType.BUTTERFLY.value,
        )

    return OptionsStrategy(
        name=(
            f"{spec.underlying} {option_type.value.capitalize()} Butterfly "
            f"{'/'.join(_fmt(k) for k in strikes)} {spec.expiration}"
        ),
        strategy_type=StrategyType.BUTTERFLY,
        legs=legs,
        spec=spec,
        max_profit=(wing - debit) * shares,
        max_loss=debit * shares,
        breakevens=(spec.lower_strike + debit, spec.upper_strike - debit),
        collateral=0.0,
        margin=debit * shares,
        description="Neutral: maximum profit when price pins the middle strike",
    )


def _build_custom(spec: CustomSpec) -> OptionsStrategy:
    legs = tuple(spec.legs)
    if not legs:
        raise StrategyDefinitionError(
            "Custom strategy must have at least one leg", strategy_type=StrategyType.CUSTOM.value
        )
    for i, leg in enumerate(legs):
        if not isinstance(leg, OptionsLeg):
            raise StrategyDefinitionError(
                f"Custom leg {i} is not an OptionsLeg: {leg!r}", strategy_type=StrategyType.CUSTOM.value
            )

    profile = derive_payoff_profile(legs, spec.stock_quantity, spec.stock_cost_basis)

    short_legs = [leg for leg in legs if leg.side == PositionSide.SHORT]
    short_notional = sum(leg.contract.strike * leg.quantity * leg.contract.multiplier for leg in short_legs)
    margin = profile.max_loss if math.isfinite(profile.max_loss) else short_notional
    collateral = margin if short_legs else 0.0

    underlying = legs[0].contract.underlying
    name = spec.name or f"{underlying} Custom {len(legs)}-Leg {min(leg.contract.expiration for leg in legs)}"
    return OptionsStrategy(
        name=name,
        strategy_type=StrategyType.CUSTOM,
        legs=legs,
        spec=spec,
        max_profit=profile.max_profit,
        max_loss=profile.max_loss,
        breakevens=profile.breakevens,
        collateral=collateral,
        margin=margin,
        description="Custom multi-leg strategy",
        stock_quantity=spec.stock_quantity,
        stock_cost_basis=spec.stock_cost_basis,
    )


_BUILDERS: dict[type, Callable[..., OptionsStrategy]] = {
    LongCallSpec: _build_long_call,
    LongPutSpec: _build_long_put,
    CashSecuredPutSpec: _build_cash_secured_put,
    CoveredCallSpec: _build_covered_call,
    ProtectivePutSpec: _build_protective_put,
    StraddleSpec: _build_straddle,
    StrangleSpec: _build_strangle,
    VerticalSpreadSpec: _build_vertical_spread,
    IronCondorSpec: _build_iron_condor,
    ButterflySpec: _build_butterfly,
    CustomSpec: _build_custom,
}


def build_strategy(spec: StrategySpec) -> OptionsStrategy:
    """
    Build a strategy from a variant spec.

    Args:
        spec: One of the variant spec dataclasses

    Returns:
        OptionsStrategy with derived max profit/loss, breakevens, collateral, margin

    Raises:
        StrategyDefinitionError: Unknown spec type, wrong arity or bad strike order
        DomainRangeError: Non-positive strikes/quantities or negative premiums
    """
    builder = _BUILDERS.get(type(spec))
    if builder is None:
        raise StrategyDefinitionError(f"Unknown strategy spec: {type(spec).__name__}")

    strategy = builder(spec)
    logger.debug(
        f"Built {strategy.name}: max_profit={strategy.max_profit}, "
        f"max_loss={strategy.max_loss}, breakevens={strategy.breakevens}"
    )
    return strategy


# =============================================================================
# Named constructors
# =============================================================================


def create_long_call(
    underlying: str, strike: float, expiration: date, premium: float, quantity: int = 1, multiplier: int = 100
) -> OptionsStrategy:
    return build_strategy(LongCallSpec(underlying, strike, expiration, premium, quantity, multiplier))


def create_long_put(
    underlying: str, strike: float, expiration: date, premium: float, quantity: int = 1, multiplier: int = 100
) -> OptionsStrategy:
    return build_strategy(LongPutSpec(underlying, strike, expiration, premium, quantity, multiplier))


def create_cash_secured_put(
    underlying: str, strike: float, expiration: date, premium: float, quantity: int = 1, multiplier: int = 100
) -> OptionsStrategy:
    return build_strategy(CashSecuredPutSpec(underlying, strike, expiration, premium, quantity, multiplier))


def create_covered_call(
    underlying: str,
    stock_quantity: int,
    stock_cost_basis: float,
    call_strike: float,
    expiration: date,
    call_premium: float,
    multiplier: int = 100,
) -> OptionsStrategy:
    return build_strategy(
        CoveredCallSpec(underlying, stock_quantity, stock_cost_basis, call_strike, expiration, call_premium, multiplier)
    )


def create_protective_put(
    underlying: str,
    stock_quantity: int,
    stock_cost_basis: float,
    put_strike: float,
    expiration: date,
    put_premium: float,
    multiplier: int = 100,
) -> OptionsStrategy:
    return build_strategy(
        ProtectivePutSpec(underlying, stock_quantity, stock_cost_basis, put_strike, expiration, put_premium, multiplier)
    )


def create_straddle(
    underlying: str,
    strike: float,
    expiration: date,
    call_premium: float,
    put_premium: float,
    quantity: int = 1,
    multiplier: int = 100,
) -> OptionsStrategy:
    return build_strategy(
        StraddleSpec(underlying, strike, expiration, call_premium, put_premium, quantity, multiplier)
    )


def create_strangle(
    underlying: str,
    put_strike: float,
    call_strike: float,
    expiration: date,
    call_premium: float,
    put_premium: float,
    quantity: int = 1,
    multiplier: int = 100,
) -> OptionsStrategy:
    return build_strategy(
        StrangleSpec(underlying, put_strike, call_strike, expiration, call_premium, put_premium, quantity, multiplier)
    )


def create_vertical_spread(
    underlying: str,
    option_type: OptionType | str,
    long_strike: float,
    short_strike: float,
    expiration: date,
    long_premium: float,
    short_premium: float,
    quantity: int = 1,
    multiplier: int = 100,
) -> OptionsStrategy:
    return build_strategy(
        VerticalSpreadSpec(
            underlying,
            _option_type(option_type),
            long_strike,
            short_strike,
            expiration,
            long_premium,
            short_premium,
            quantity,
            multiplier,
        )
    )


def create_iron_condor(
    underlying: str,
    put_buy_strike: float,
    put_sell_strike: float,
    call_sell_strike: float,
    call_buy_strike: float,
    expiration: date,
    *,
    put_buy_premium: float,
    put_sell_premium: float,
    call_sell_premium: float,
    call_buy_premium: float,
    quantity: int = 1,
    multiplier: int = 100,
) -> OptionsStrategy:
    return build_strategy(
        IronCondorSpec(
            underlying,
            put_buy_strike,
            put_sell_strike,
            call_sell_strike,
            call_buy_strike,
            expiration,
            put_buy_premium,
            put_sell_premium,
            call_sell_premium,
            call_buy_premium,
            quantity,
            multiplier,
        )
    )


def create_butterfly(
    underlying: str,
    option_type: OptionType | str,
    lower_strike: float,
    middle_strike: float,
    upper_strike: float,
    expiration: date,
    *,
    lower_premium: float,
    middle_premium: float,
    upper_premium: float,
    quantity: int = 1,
    multiplier: int = 100,
) -> OptionsStrategy:
    return build_strategy(
        ButterflySpec(
            underlying,
            _option_type(option_type),
            lower_strike,
            middle_strike,
            upper_strike,
            expiration,
            lower_premium,
            middle_premium,
            upper_premium,
            quantity,
            multiplier,
        )
    )


def create_custom(
    legs: Sequence[OptionsLeg],
    name: str | None = None,
    stock_quantity: int = 0,
    stock_cost_basis: float = 0.0,
) -> OptionsStrategy:
    return build_strategy(CustomSpec(tuple(legs), name, stock_quantity, stock_cost_basis))
