"""
Strategy Greeks Validator

Checks that a strategy's dollar delta under a market snapshot matches the
shape its type promises.

Key patterns:
- One delta bound per strategy family (StrategyGreeksLimits)
- Returns (is_valid, violations) and logs rejections; never raises
- Types without a bound (single legs, butterflies, custom) always pass

Usage:
    >>> validator = StrategyGreeksValidator(limits=StrategyGreeksLimits(iron_condor_max_abs_delta=5.0))
    >>> is_valid, violations = validator.validate_strategy(condor, snapshot)
"""

from dataclasses import dataclass

from loguru import logger

from options_analytics.models.contracts import MarketSnapshot
from options_analytics.pricing.greeks_calculator import GreeksCalculator
from options_analytics.strategies.models import OptionsStrategy, StrategyType

logger = logger.bind(component="StrategyGreeksValidator")


@dataclass(slots=True)
class StrategyGreeksLimits:
    """
    Dollar-delta bounds (share equivalents) per strategy family.

    Attributes:
        iron_condor_max_abs_delta: Iron condors are meant to be market neutral
        vertical_spread_max_abs_delta: Verticals are directional, but sized
        long_volatility_max_abs_delta: Straddles/strangles should open near neutral
    """

    iron_condor_max_abs_delta: float = 5.0
    vertical_spread_max_abs_delta: float = 60.0
    long_volatility_max_abs_delta: float = 10.0


def _condor_message(delta: float, bound: float) -> str:
    bias = "bearish" if delta < 0 else "bullish"
    return (
        f"Iron condor delta {delta:+.2f} is outside ±{bound:.1f}: "
        f"the position has a {bias} bias and is no longer market neutral."
    )


def _vertical_message(delta: float, bound: float) -> str:
    return (
        f"Vertical spread delta {delta:+.2f} is outside ±{bound:.1f}. "
        f"Trade fewer contracts or a narrower spread."
    )


def _long_volatility_message(delta: float, bound: float) -> str:
    return (
        f"Long volatility delta {delta:+.2f} is outside ±{bound:.1f}. "
        f"Re-center the strikes around the underlying."
    )


# strategy type -> (limit attribute, message)
_CHECKS = {
    StrategyType.IRON_CONDOR: ("iron_condor_max_abs_delta", _condor_message),
    StrategyType.VERTICAL_SPREAD: ("vertical_spread_max_abs_delta", _vertical_message),
    StrategyType.STRADDLE: ("long_volatility_max_abs_delta", _long_volatility_message),
    StrategyType.STRANGLE: ("long_volatility_max_abs_delta", _long_volatility_message),
}


class StrategyGreeksValidator:
    """
    Delta-shape check per strategy family.

    Complements validate_multi_leg_strategy, which covers account and
    market constraints rather than the structure of the position.
    """

    def __init__(self, greeks_calc: GreeksCalculator | None = None, limits: StrategyGreeksLimits | None = None):
        self.greeks_calc = greeks_calc or GreeksCalculator()
        self.limits = limits or StrategyGreeksLimits()

    def validate_strategy(self, strategy: OptionsStrategy, market: MarketSnapshot) -> tuple[bool, list[str]]:
        """
        Check the strategy's dollar delta against its family bound.

        Returns:
            (is_valid, violations)
        """
        check = _CHECKS.get(strategy.strategy_type)
        if check is None:
            logger.debug(f"No delta bound for {strategy.strategy_type.value}")
            return True, []

        delta = self.greeks_calc.strategy_greeks(
            strategy,
            market.underlying_price,
            market.volatility,
            market.risk_free_rate,
            market.dividend_yield,
            as_of=market.as_of,
            dollar=True,
        ).delta

        attribute, message = check
        bound = getattr(self.limits, attribute)
        if abs(delta) <= bound:
            return True, []

        violations = [message(delta, bound)]
        logger.warning(f"Strategy {strategy.name} rejected: {violations[0]}")
        return False, violations
