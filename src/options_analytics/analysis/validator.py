"""
Multi-Leg Strategy Validation

Pre-execution checks of a strategy against account constraints and market
conditions. Every check is independent; findings are collected as errors
(blocking) and warnings (advisory), never raised.

Checks:
- Leg count (more than max_legs is a warning)
- Expired legs (error) and legs expiring within expiry_warning_days (warning)
- Early assignment: short ITM call inside the assignment window (warning)
- Liquidity: option volume below min_option_volume (warning)
- Regime: long volatility in high IV rank, iron condor in low IV rank (warning)
- Unlimited risk (warning)
- Constraints: max risk, capital, buying power, cash, delta range, PoP (error)
"""

from datetime import date

from loguru import logger

from options_analytics.analysis.analyzer import MultiLegAnalyzer
from options_analytics.analysis.models import (
    MarketConditions,
    MarketTrend,
    RiskLevel,
    StrategyConstraints,
    StrategyValidation,
)
from options_analytics.config.analytics_config import ValidationConfig
from options_analytics.models.contracts import OptionType, PositionSide
from options_analytics.strategies.models import OptionsStrategy, StrategyType

logger = logger.bind(component="StrategyValidator")


def assess_risk_level(strategy: OptionsStrategy) -> RiskLevel:
    """
    Classify a strategy by its loss/profit ratio.

    Unbounded max loss is HIGH; otherwise |max_loss / max_profit| > 3 is
    HIGH, > 1 MEDIUM, else LOW. Zero max profit with a finite loss is HIGH;
    unlimited profit with a bounded loss is LOW.
    """
    if strategy.is_max_loss_unlimited:
        return RiskLevel.HIGH
    if strategy.is_max_profit_unlimited:
        return RiskLevel.LOW
    if strategy.max_profit == 0:
        return RiskLevel.HIGH if strategy.max_loss > 0 else RiskLevel.LOW

    risk_ratio = abs(strategy.max_loss / strategy.max_profit)
    if risk_ratio > 3:
        return RiskLevel.HIGH
    if risk_ratio > 1:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _check_expirations(strategy: OptionsStrategy, as_of: date, config: ValidationConfig, errors, warnings) -> None:
    for leg in strategy.legs:
        symbol = leg.contract.option_symbol
        days = leg.contract.days_to_expiration(as_of)
        if days <= 0:
            errors.append(f"Option {symbol} has expired")
        elif days <= config.expiry_warning_days:
            warnings.append(f"Option {symbol} expires in {days} days")


def _check_assignment(
    strategy: OptionsStrategy, market: MarketConditions, as_of: date, config: ValidationConfig, warnings
) -> None:
    for leg in strategy.legs:
        if leg.side != PositionSide.SHORT or leg.contract.option_type != OptionType.CALL:
            continue
        days = leg.contract.days_to_expiration(as_of)
        if days < config.assignment_window_days and market.underlying_price > leg.contract.strike:
            warnings.append(
                f"Short call {leg.contract.option_symbol} is ITM with < {config.assignment_window_days} "
                "days to expiration. Early assignment risk."
            )


def _check_liquidity(strategy: OptionsStrategy, market: MarketConditions, config: ValidationConfig, warnings) -> None:
    for leg in strategy.legs:
        volume = market.option_volumes.get(leg.contract.option_symbol)
        if volume is not None and volume < config.min_option_volume:
            warnings.append(
                f"Low liquidity for {leg.contract.option_symbol}. May have difficulty closing position."
            )


def _check_regime(strategy: OptionsStrategy, market: MarketConditions, config: ValidationConfig, warnings) -> None:
    long_volatility = (StrategyType.STRADDLE, StrategyType.STRANGLE)
    if market.volatility_rank > config.iv_rank_high and strategy.strategy_type in long_volatility:
        label = "straddle" if strategy.strategy_type == StrategyType.STRADDLE else "strangle"
        warnings.append(f"High volatility environment. Long {label} may be expensive.")

    if market.volatility_rank < config.iv_rank_low and strategy.strategy_type == StrategyType.IRON_CONDOR:
        warnings.append("Low volatility environment. Iron condor may have limited profit potential.")


def _check_constraints(
    strategy: OptionsStrategy,
    constraints: StrategyConstraints,
    market: MarketConditions | None,
    as_of: date,
    analyzer: MultiLegAnalyzer,
    errors,
    warnings,
) -> None:
    if constraints.buying_power is not None and strategy.margin > constraints.buying_power:
        errors.append(
            f"Insufficient buying power. Required: ${strategy.margin:,.2f}, "
            f"Available: ${constraints.buying_power:,.2f}"
        )

    if constraints.cash is not None and strategy.collateral > constraints.cash:
        errors.append(
            f"Insufficient collateral. Required: ${strategy.collateral:,.2f}, "
            f"Available: ${constraints.cash:,.2f}"
        )

    if constraints.max_risk is not None and strategy.max_loss > constraints.max_risk:
        errors.append(f"Max loss {strategy.max_loss:,.2f} exceeds risk limit {constraints.max_risk:,.2f}")

    if constraints.max_capital_required is not None and strategy.margin > constraints.max_capital_required:
        errors.append(
            f"Capital required {strategy.margin:,.2f} exceeds limit {constraints.max_capital_required:,.2f}"
        )

    needs_greeks = constraints.delta_range is not None or constraints.min_probability_of_profit is not None
    if not needs_greeks:
        return
    if market is None or market.implied_volatility is None:
        warnings.append("Implied volatility not provided; delta and probability constraints were not checked.")
        return

    risk = analyzer.strategy_risk_metrics(
        strategy, market.underlying_price, market.implied_volatility, market.risk_free_rate, as_of=as_of
    )

    if constraints.delta_range is not None:
        low, high = constraints.delta_range
        if not (low <= risk.greeks.delta <= high):
            errors.append(f"Strategy delta {risk.greeks.delta:+.2f} outside allowed range [{low}, {high}]")

    if (
        constraints.min_probability_of_profit is not None
        and risk.probability_of_profit < constraints.min_probability_of_profit
    ):
        errors.append(
            f"Probability of profit {risk.probability_of_profit:.1%} below minimum "
            f"{constraints.min_probability_of_profit:.1%}"
        )


def _market_recommendations(strategy: OptionsStrategy, market: MarketConditions) -> list[str]:
    recommendations = []
    if market.trend == MarketTrend.BULLISH and strategy.strategy_type == StrategyType.CASH_SECURED_PUT:
        recommendations.append("Bullish market conditions favor cash-secured puts.")
    if market.trend == MarketTrend.BEARISH and strategy.strategy_type == StrategyType.COVERED_CALL:
        recommendations.append("Bearish conditions may result in stock assignment for covered calls.")
    return recommendations


def validate_multi_leg_strategy(
    strategy: OptionsStrategy,
    constraints: StrategyConstraints | None = None,
    market_conditions: MarketConditions | None = None,
    as_of: date | None = None,
    config: ValidationConfig | None = None,
    analyzer: MultiLegAnalyzer | None = None,
) -> StrategyValidation:
    """
    Validate a strategy before execution.

    Args:
        strategy: Strategy to validate
        constraints: Account/risk constraints (default: none)
        market_conditions: Market regime (default: none, market checks skipped)
        as_of: Validation date (default: today)
        config: ValidationConfig thresholds
        analyzer: Analyzer used for Greeks-based constraint checks

    Returns:
        StrategyValidation (is_valid is True when there are no errors)
    """
    as_of = as_of or date.today()
    config = config or ValidationConfig()
    constraints = constraints or StrategyConstraints()
    analyzer = analyzer or MultiLegAnalyzer()

    errors: list[str] = []
    warnings: list[str] = []

    if not strategy.legs:
        errors.append("Strategy has no legs")
    elif len(strategy.legs) > config.max_legs:
        warnings.append(
            f"Complex strategy with more than {config.max_legs} legs. Ensure proper risk management."
        )

    _check_expirations(strategy, as_of, config, errors, warnings)

    if strategy.is_max_loss_unlimited:
        warnings.append("Strategy has unlimited risk. Consider risk management measures.")

    recommendations: list[str] = []
    if market_conditions is not None:
        _check_assignment(strategy, market_conditions, as_of, config, warnings)
        _check_liquidity(strategy, market_conditions, config, warnings)
        _check_regime(strategy, market_conditions, config, warnings)
        recommendations = _market_recommendations(strategy, market_conditions)
    _check_constraints(strategy, constraints, market_conditions, as_of, analyzer, errors, warnings)

    validation = StrategyValidation(
        is_valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
        risk_level=assess_risk_level(strategy),
        recommendations=tuple(recommendations),
    )

    if errors:
        logger.warning(f"Strategy {strategy.name} rejected: {errors}")
    else:
        logger.debug(f"✓ Strategy {strategy.name} validated with {len(warnings)} warnings")

    return validation
