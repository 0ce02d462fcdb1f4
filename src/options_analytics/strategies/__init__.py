"""
Strategy Builder

Variant specs, the immutable OptionsStrategy, named constructors, market
builders and expiration payoff.
"""

from options_analytics.strategies.builders import (
    CustomStrategyBuilder,
    IronCondorBuilder,
    StrategyBuilder,
    VerticalSpreadBuilder,
)
from options_analytics.strategies.factory import (
    build_strategy,
    create_butterfly,
    create_cash_secured_put,
    create_covered_call,
    create_custom,
    create_iron_condor,
    create_long_call,
    create_long_put,
    create_protective_put,
    create_straddle,
    create_strangle,
    create_vertical_spread,
)
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
from options_analytics.strategies.payoff import (
    PayoffProfile,
    derive_payoff_profile,
    expiration_pnl,
    expiration_pnl_grid,
)

__all__ = [
    "CustomStrategyBuilder",
    "IronCondorBuilder",
    "StrategyBuilder",
    "VerticalSpreadBuilder",
    "build_strategy",
    "create_butterfly",
    "create_cash_secured_put",
    "create_covered_call",
    "create_custom",
    "create_iron_condor",
    "create_long_call",
    "create_long_put",
    "create_protective_put",
    "create_straddle",
    "create_strangle",
    "create_vertical_spread",
    "ButterflySpec",
    "CashSecuredPutSpec",
    "CoveredCallSpec",
    "CustomSpec",
    "IronCondorSpec",
    "LongCallSpec",
    "LongPutSpec",
    "OptionsStrategy",
    "ProtectivePutSpec",
    "StraddleSpec",
    "StrangleSpec",
    "StrategySpec",
    "StrategyType",
    "VerticalSpreadSpec",
    "PayoffProfile",
    "derive_payoff_profile",
    "expiration_pnl",
    "expiration_pnl_grid",
]
