#!/usr/bin/env python3
"""
Analyze Strategy - Options Analytics CLI

Builds one strategy from a YAML description, runs the multi-leg analysis
and the pre-execution validation, and prints the result as JSON.

Strategy file formats:

    # Market builder (iron_condor, vertical_spread, custom)
    builder: iron_condor
    symbol: SPY
    underlying_price: 450
    params:
      dte: 45
      volatility: 0.18

    # Explicit variant spec (any type except custom)
    type: vertical_spread
    underlying: SPY
    option_type: call
    long_strike: 450
    short_strike: 460
    expiration: 2026-12-18
    long_premium: 5.0
    short_premium: 2.0

Usage:
    python scripts/analyze_strategy.py strategy.yaml --price 450 --volatility 0.2
    python scripts/analyze_strategy.py strategy.yaml --config config/analytics.yaml --validate
    python scripts/analyze_strategy.py strategy.yaml --price 450 --implied-from-leg 0
"""

import argparse
import sys
from datetime import date
from pathlib import Path

import yaml
from loguru import logger

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from options_analytics.analysis import (
    MarketConditions,
    MultiLegAnalyzer,
    StrategyGreeksValidator,
    validate_multi_leg_strategy,
)
from options_analytics.config import PricingDefaults, configure_logging, load_config
from options_analytics.errors import OptionsAnalyticsError
from options_analytics.models import MarketSnapshot
from options_analytics.pricing import calculate_implied_volatility
from options_analytics.serialization import to_json
from options_analytics.strategies import (
    ButterflySpec,
    CashSecuredPutSpec,
    CoveredCallSpec,
    CustomStrategyBuilder,
    IronCondorBuilder,
    IronCondorSpec,
    LongCallSpec,
    LongPutSpec,
    OptionsStrategy,
    ProtectivePutSpec,
    StraddleSpec,
    StrangleSpec,
    VerticalSpreadBuilder,
    VerticalSpreadSpec,
    build_strategy,
)

BUILDERS = {
    "iron_condor": IronCondorBuilder,
    "vertical_spread": VerticalSpreadBuilder,
    "custom": CustomStrategyBuilder,
}

SPECS = {
    spec.strategy_type.value: spec
    for spec in (
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
    )
}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Analyze an options strategy",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("strategy_file", type=str, help="YAML file describing the strategy")
    parser.add_argument("--config", type=str, default=None, help="Path to analytics config file")
    parser.add_argument("--price", type=float, default=None, help="Underlying price (default: builder price)")
    parser.add_argument("--volatility", type=float, default=0.20, help="Annualized volatility")
    parser.add_argument("--rate", type=float, default=None, help="Risk-free rate (default: from config)")
    parser.add_argument(
        "--implied-from-leg",
        type=int,
        default=None,
        metavar="INDEX",
        help="Solve volatility from the entry premium of this leg instead of --volatility",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Valuation date YYYY-MM-DD (default: today)",
    )
    parser.add_argument("--validate", action="store_true", help="Also run pre-execution validation")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def load_strategy(path: Path, as_of: date) -> tuple[OptionsStrategy, float | None]:
    """
    Build the strategy described by a YAML file.

    Returns:
        (strategy, underlying price given in the file or None)
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if "builder" in data:
        builder_cls = BUILDERS.get(data["builder"])
        if builder_cls is None:
            raise ValueError(f"Unknown builder '{data['builder']}', expected one of {sorted(BUILDERS)}")

        params = dict(data.get("params") or {})
        params.setdefault("as_of", as_of)
        price = float(data["underlying_price"])
        builder = builder_cls()
        strategy = builder.build(data["symbol"], price, params)
        if not builder.validate(strategy):
            raise ValueError(f"{builder.name} produced an invalid strategy")
        return strategy, price

    strategy_type = data.pop("type", None)
    spec_cls = SPECS.get(strategy_type)
    if spec_cls is None:
        raise ValueError(f"Unknown strategy type '{strategy_type}', expected one of {sorted(SPECS)}")
    price = data.pop("underlying_price", None)
    return build_strategy(spec_cls(**data)), price


def implied_volatility_from_leg(
    strategy: OptionsStrategy,
    index: int,
    underlying_price: float,
    rate: float,
    pricing: PricingDefaults,
    as_of: date,
) -> float:
    """Solve the volatility implied by one leg's entry premium using the configured solver settings."""
    if not 0 <= index < len(strategy.legs):
        raise ValueError(f"Leg index {index} out of range for {len(strategy.legs)} legs")

    leg = strategy.legs[index]
    volatility = calculate_implied_volatility(
        leg.contract,
        underlying_price,
        leg.entry_price,
        rate,
        pricing.dividend_yield,
        as_of,
        initial_guess=pricing.iv_initial_guess,
        max_iterations=pricing.iv_max_iterations,
        tolerance=pricing.iv_tolerance,
        lower_bound=pricing.iv_lower_bound,
        upper_bound=pricing.iv_upper_bound,
    )
    logger.info(f"Implied volatility from {leg.contract.option_symbol} @ {leg.entry_price:.2f}: {volatility:.4f}")
    return volatility


def main(argv=None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)
    if args.verbose:
        config.logging.level = "DEBUG"
    configure_logging(config.logging)

    as_of = args.as_of or date.today()

    try:
        strategy, file_price = load_strategy(Path(args.strategy_file), as_of)
        price = args.price if args.price is not None else file_price
        if price is None:
            raise ValueError("Underlying price is required (--price or underlying_price in the file)")
        rate = args.rate if args.rate is not None else config.pricing.risk_free_rate
        volatility = args.volatility
        if args.implied_from_leg is not None:
            volatility = implied_volatility_from_leg(
                strategy, args.implied_from_leg, price, rate, config.pricing, as_of
            )

        analyzer = MultiLegAnalyzer(config.analyzer)
        analysis = analyzer.analyze_strategy(
            strategy,
            price,
            volatility,
            rate,
            config.pricing.dividend_yield,
            as_of=as_of,
        )
        result = {"strategy": strategy, "analysis": analysis}

        if args.validate:
            market = MarketConditions(
                underlying_price=price,
                implied_volatility=volatility,
                risk_free_rate=rate,
            )
            result["validation"] = validate_multi_leg_strategy(
                strategy,
                market_conditions=market,
                as_of=as_of,
                config=config.validation,
                analyzer=analyzer,
            )
            snapshot = MarketSnapshot(price, volatility, rate, as_of, config.pricing.dividend_yield)
            is_valid, violations = StrategyGreeksValidator().validate_strategy(strategy, snapshot)
            result["greeks_validation"] = {"is_valid": is_valid, "violations": violations}

    except (OptionsAnalyticsError, ValueError, OSError) as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    print(to_json(result))
    logger.info(f"✓ Analyzed {strategy.name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
