"""
Multi-Leg Strategy Analyzer

Analyzes a built strategy under a market snapshot: aggregated Greeks,
risk metrics, expiration P&L profile, time-decay and volatility sweeps,
and advisory recommendations.

Key patterns:
- Stateless service: every method is a pure function of its arguments
- Sweeps use the vectorised Black-Scholes grid (numpy)
- Thresholds come from AnalyzerConfig

Usage:
    >>> analyzer = MultiLegAnalyzer()
    >>> analysis = analyzer.analyze_strategy(condor, 450.0, 0.18, 0.05, as_of=date(2026, 1, 20))
    >>> for rec in analysis.recommendations:
    ...     print(rec)
"""

import math
from datetime import date, timedelta

import numpy as np
from loguru import logger
from scipy.stats import norm

from options_analytics.analysis.models import (
    PnLPoint,
    StrategyAnalysis,
    StrategyRiskMetrics,
    TimeDecayPoint,
    VolatilityPoint,
)
from options_analytics.config.analytics_config import AnalyzerConfig
from options_analytics.models.contracts import GreeksCalculation
from options_analytics.pricing.black_scholes import DAYS_PER_YEAR, black_scholes_price_grid, time_to_expiration
from options_analytics.pricing.greeks_calculator import GreeksCalculator
from options_analytics.strategies.models import OptionsStrategy, StrategyType
from options_analytics.strategies.payoff import expiration_pnl, expiration_pnl_grid

MIN_PNL_STEPS = 50
MIN_VOL_STEPS = 20
# Grid used to integrate the expected expiration P&L
_EXPECTATION_POINTS = 401
_EXPECTATION_WIDTH = 5.0


class MultiLegAnalyzer:
    """
    Multi-leg strategy analyzer.

    Attributes:
        config: AnalyzerConfig with sweep ranges and thresholds
        calculator: GreeksCalculator used for Greeks and values
    """

    def __init__(self, config: AnalyzerConfig | None = None, calculator: GreeksCalculator | None = None):
        self.config = config or AnalyzerConfig()
        self.calculator = calculator or GreeksCalculator()
        self.logger = logger.bind(component="MultiLegAnalyzer")

    def analyze_strategy(
        self,
        strategy: OptionsStrategy,
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
    ) -> StrategyAnalysis:
        """
        Run the complete analysis of a strategy.

        Args:
            strategy: Strategy to analyze
            underlying_price: Current underlying price
            volatility: Annualized volatility
            risk_free_rate: Annualized risk-free rate
            dividend_yield: Annualized dividend yield
            as_of: Valuation date (default: today)

        Returns:
            StrategyAnalysis

        Raises:
            DomainRangeError: If market inputs are outside their domain
        """
        as_of = as_of or date.today()
        market = (underlying_price, volatility, risk_free_rate, dividend_yield)

        greeks = self.calculator.strategy_greeks(strategy, *market, as_of=as_of)
        risk_metrics = self.strategy_risk_metrics(strategy, *market, as_of=as_of)
        pnl_profile = self.calculate_pnl_profile(strategy, underlying_price)
        time_decay = self.calculate_time_decay_profile(strategy, *market, as_of=as_of)
        vol_profile = self.calculate_volatility_sensitivity(strategy, *market, as_of=as_of)
        current_value = self.current_strategy_value(strategy, *market, as_of=as_of)
        recommendations = self.generate_recommendations(strategy, greeks, risk_metrics)

        self.logger.debug(
            f"Analyzed {strategy.name}: value={current_value:.2f}, "
            f"PoP={risk_metrics.probability_of_profit:.1%}, {len(recommendations)} recommendations"
        )

        return StrategyAnalysis(
            strategy_name=strategy.name,
            as_of=as_of,
            greeks=greeks,
            risk_metrics=risk_metrics,
            pnl_profile=pnl_profile,
            time_decay_profile=time_decay,
            volatility_profile=vol_profile,
            recommendations=recommendations,
            current_value=current_value,
        )

    def current_strategy_value(
        self,
        strategy: OptionsStrategy,
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
    ) -> float:
        """Signed theoretical value of all legs in dollars (long adds, short subtracts)."""
        return self.calculator.strategy_value(
            strategy, underlying_price, volatility, risk_free_rate, dividend_yield, as_of=as_of or date.today()
        )

    def calculate_pnl_profile(
        self,
        strategy: OptionsStrategy,
        underlying_price: float,
        steps: int | None = None,
    ) -> tuple[PnLPoint, ...]:
        """
        At-expiration P&L over [low x S, high x S].

        Args:
            strategy: Strategy to evaluate
            underlying_price: Center of the price range
            steps: Number of intervals (at least 50)

        Returns:
            steps + 1 PnLPoint values, prices ascending
        """
        steps = max(steps or self.config.pnl_steps, MIN_PNL_STEPS)
        prices = np.linspace(
            underlying_price * self.config.pnl_range_low,
            underlying_price * self.config.pnl_range_high,
            steps + 1,
        )
        pnls = expiration_pnl_grid(strategy, prices)
        return tuple(PnLPoint(price=float(p), pnl=float(v)) for p, v in zip(prices, pnls))

    def calculate_time_decay_profile(
        self,
        strategy: OptionsStrategy,
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
    ) -> tuple[TimeDecayPoint, ...]:
        """
        Strategy value and theta as the nearest expiration approaches.

        Days remaining step down from the current DTE by time_step_days;
        0 is always included. The underlying price and volatility are held
        constant.
        """
        as_of = as_of or date.today()
        total_days = max(strategy.days_to_expiration(as_of), 0)
        days = list(range(total_days, -1, -self.config.time_step_days))
        if days[-1] != 0:
            days.append(0)

        points = []
        for days_remaining in days:
            valuation_date = strategy.expiration - timedelta(days=days_remaining)
            value = self.calculator.strategy_value(
                strategy, underlying_price, volatility, risk_free_rate, dividend_yield, as_of=valuation_date
            )
            greeks = self.calculator.strategy_greeks(
                strategy, underlying_price, volatility, risk_free_rate, dividend_yield, as_of=valuation_date
            )
            points.append(TimeDecayPoint(days_remaining=days_remaining, portfolio_value=value, theta=greeks.theta))
        return tuple(points)

    def calculate_volatility_sensitivity(
        self,
        strategy: OptionsStrategy,
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
        steps: int | None = None,
    ) -> tuple[VolatilityPoint, ...]:
        """
        Strategy value and vega over [low x sigma, high x sigma].

        Returns:
            steps + 1 VolatilityPoint values (steps >= 20), volatility ascending
        """
        as_of = as_of or date.today()
        steps = max(steps or self.config.vol_steps, MIN_VOL_STEPS)
        vols = np.linspace(volatility * self.config.vol_range_low, volatility * self.config.vol_range_high, steps + 1)

        values = np.zeros_like(vols)
        for leg in strategy.legs:
            T = time_to_expiration(leg.contract.expiration, as_of)
            prices = black_scholes_price_grid(
                leg.contract.option_type,
                underlying_price,
                leg.contract.strike,
                T,
                vols,
                risk_free_rate,
                dividend_yield,
            )
            values += leg.signed_quantity * leg.contract.multiplier * prices

        points = []
        for vol, value in zip(vols, values):
            greeks = self.calculator.strategy_greeks(
                strategy, underlying_price, float(vol), risk_free_rate, dividend_yield, as_of=as_of
            )
            points.append(VolatilityPoint(volatility=float(vol), portfolio_value=float(value), vega=greeks.vega))
        return tuple(points)

    def strategy_risk_metrics(
        self,
        strategy: OptionsStrategy,
        underlying_price: float,
        volatility: float,
        risk_free_rate: float,
        dividend_yield: float = 0.0,
        as_of: date | None = None,
    ) -> StrategyRiskMetrics:
        """
        Strategy risk metrics under a normal expiration distribution.

        The underlying at expiration is modelled as N(S, S x sigma x sqrt(T))
        (the expected move). Probability of profit sums that distribution
        over the intervals between breakevens where the payoff is positive;
        expected value integrates the payoff over the same distribution.

        Returns:
            StrategyRiskMetrics
        """
        as_of = as_of or date.today()
        greeks = self.calculator.strategy_greeks(
            strategy, underlying_price, volatility, risk_free_rate, dividend_yield, as_of=as_of
        )
        dollar_delta = self.calculator.strategy_greeks(
            strategy, underlying_price, volatility, risk_free_rate, dividend_yield, as_of=as_of, dollar=True
        ).delta + strategy.stock_quantity

        one_day_move = underlying_price * volatility * math.sqrt(1 / DAYS_PER_YEAR)
        value_at_risk = abs(dollar_delta * one_day_move)

        T = max(time_to_expiration(strategy.expiration, as_of), 0.0)
        expected_move = underlying_price * volatility * math.sqrt(T)

        probability = self._probability_of_profit(strategy, underlying_price, expected_move)
        expected_value = self._expected_value(strategy, underlying_price, expected_move)

        return StrategyRiskMetrics(
            greeks=greeks,
            value_at_risk=value_at_risk,
            max_drawdown=strategy.max_loss,
            probability_of_profit=min(1.0, max(0.0, probability)),
            expected_value=expected_value,
        )

    def _probability_of_profit(self, strategy: OptionsStrategy, underlying_price: float, expected_move: float) -> float:
        if expected_move <= 0:
            return 1.0 if expiration_pnl(strategy, underlying_price) > 0 else 0.0

        bounds = [-math.inf] + sorted(strategy.breakevens) + [math.inf]
        probability = 0.0
        for lower, upper in zip(bounds[:-1], bounds[1:]):
            if math.isinf(lower) and math.isinf(upper):
                probe = underlying_price
            elif math.isinf(lower):
                probe = upper - expected_move
            elif math.isinf(upper):
                probe = lower + expected_move
            else:
                probe = (lower + upper) / 2
            if probe <= 0:
                probe = upper / 2
            if expiration_pnl(strategy, probe) > 0:
                probability += norm.cdf((upper - underlying_price) / expected_move) - norm.cdf(
                    (lower - underlying_price) / expected_move
                )
        return probability

    def _expected_value(self, strategy: OptionsStrategy, underlying_price: float, expected_move: float) -> float:
        if expected_move <= 0:
            return expiration_pnl(strategy, underlying_price)

        low = max(underlying_price - _EXPECTATION_WIDTH * expected_move, 1e-9)
        high = underlying_price + _EXPECTATION_WIDTH * expected_move
        prices = np.linspace(low, high, _EXPECTATION_POINTS)
        weights = norm.pdf((prices - underlying_price) / expected_move)
        pnls = expiration_pnl_grid(strategy, prices)
        return float(np.sum(weights * pnls) / np.sum(weights))

    def generate_recommendations(
        self,
        strategy: OptionsStrategy,
        greeks: GreeksCalculation,
        risk_metrics: StrategyRiskMetrics,
    ) -> tuple[str, ...]:
        """
        Advisory recommendations from Greeks and risk metrics.

        Returns:
            Tuple of recommendation strings (possibly empty)
        """
        cfg = self.config
        recommendations = []

        if abs(greeks.delta) > cfg.high_delta:
            recommendations.append(
                f"High delta exposure ({greeks.delta:.2f}). Consider hedging with underlying stock."
            )

        if abs(greeks.gamma) > cfg.high_gamma:
            recommendations.append(
                f"High gamma exposure ({greeks.gamma:.3f}). Delta will change rapidly with price moves."
            )

        if greeks.theta < cfg.high_theta:
            recommendations.append(
                f"High time decay ({greeks.theta:.2f}/day). Monitor position closely as expiration approaches."
            )

        if abs(greeks.vega) > cfg.high_vega:
            recommendations.append(
                f"High volatility sensitivity ({greeks.vega:.0f}). "
                "Position value will change significantly with IV changes."
            )

        if risk_metrics.probability_of_profit < cfg.low_probability_of_profit:
            recommendations.append(
                f"Low probability of profit ({risk_metrics.probability_of_profit * 100:.1f}%). "
                "Consider adjusting strategy."
            )

        if (
            strategy.strategy_type == StrategyType.IRON_CONDOR
            and strategy.max_profit < strategy.margin * cfg.iron_condor_min_return
        ):
            recommendations.append(
                "Low return on capital for iron condor. Consider wider spreads or different expiration."
            )

        if strategy.strategy_type == StrategyType.STRADDLE and abs(greeks.delta) > cfg.straddle_max_delta:
            recommendations.append(
                "Straddle is not delta-neutral. Consider adjusting strikes or hedge with stock."
            )

        return tuple(recommendations)
