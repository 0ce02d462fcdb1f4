"""
Black-Scholes-Merton Pricing Engine

Closed-form valuation of European options with a continuous dividend yield,
analytic Greeks, and an implied-volatility solver.

    d1 = (ln(S/K) + (r - q + sigma^2 / 2) * T) / (sigma * sqrt(T))
    d2 = d1 - sigma * sqrt(T)
    Call = S * e^(-qT) * N(d1) - K * e^(-rT) * N(d2)
    Put  = Call - S * e^(-qT) + K * e^(-rT)            (put-call parity)

Unit convention (applied everywhere in the package):
    - T is calendar days / 365
    - theta: value lost per calendar day (annual theta / 365)
    - vega: value change per 1 percentage-point volatility move (/ 100)
    - rho: value change per 1 percentage-point rate move (/ 100)
    - all contract-level values are per share; multiply by the contract
      multiplier for dollars

Edge cases:
    - T <= 0: price is intrinsic value, all Greeks are zero
    - sigma == 0: price is discounted intrinsic value (no time value)
    - sigma < 0, S <= 0, K <= 0, NaN/inf: DomainRangeError

N and phi come from scipy.stats.norm.

Usage:
    >>> contract = OptionContract("SPY", OptionType.CALL, 450.0, date(2026, 3, 20))
    >>> price = calculate_option_price(contract, 455.0, 0.18, 0.05, as_of=date(2026, 1, 20))
    >>> greeks = calculate_option_greeks(contract, 455.0, 0.18, 0.05, as_of=date(2026, 1, 20))
"""

import math
from datetime import date

import numpy as np
from loguru import logger
from scipy.stats import norm

from options_analytics.errors import (
    ConvergenceError,
    DomainRangeError,
    require_finite,
    require_non_negative,
    require_positive,
)
from options_analytics.models.contracts import GreeksCalculation, OptionContract, OptionType

logger = logger.bind(component="BlackScholes")

DAYS_PER_YEAR = 365.0

IV_INITIAL_GUESS = 0.3
IV_LOWER_BOUND = 0.001
IV_UPPER_BOUND = 5.0
IV_MAX_ITERATIONS = 100
IV_TOLERANCE = 1e-4
# Raw vega (per 1.00 of sigma) below which Newton steps are not trusted
VEGA_FLOOR = 1e-8


def time_to_expiration(expiration: date, as_of: date) -> float:
    """Return time to expiration in years (calendar days / 365, may be <= 0)."""
    return (expiration - as_of).days / DAYS_PER_YEAR


def intrinsic_value(option_type: OptionType, underlying_price: float, strike: float) -> float:
    """Return max(0, S - K) for calls and max(0, K - S) for puts."""
    if option_type == OptionType.CALL:
        return max(0.0, underlying_price - strike)
    return max(0.0, strike - underlying_price)


def d1_d2(
    underlying_price: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
    dividend_yield: float = 0.0,
) -> tuple[float, float]:
    """
    Return the Black-Scholes d1 and d2 terms.

    Requires time_to_expiry > 0 and volatility > 0.
    """
    vol_sqrt_t = volatility * math.sqrt(time_to_expiry)
    d1 = (
        math.log(underlying_price / strike)
        + (risk_free_rate - dividend_yield + 0.5 * volatility * volatility) * time_to_expiry
    ) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def _validate_inputs(
    underlying_price: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
    dividend_yield: float,
) -> None:
    require_positive(underlying_price, "underlying_price")
    require_positive(strike, "strike")
    require_finite(time_to_expiry, "time_to_expiry")
    require_non_negative(volatility, "volatility")
    require_finite(risk_free_rate, "risk_free_rate")
    require_finite(dividend_yield, "dividend_yield")


def black_scholes_price_grid(
    option_type: OptionType,
    underlying_prices,
    strike: float,
    time_to_expiry: float,
    volatilities,
    risk_free_rate: float,
    dividend_yield: float = 0.0,
) -> np.ndarray:
    """
    Vectorised Black-Scholes-Merton price.

    underlying_prices and volatilities may be scalars or arrays; they are
    broadcast against each other. Used by the scenario sweeps.

    Returns:
        numpy array of per-share prices with the broadcast shape
    """
    spot, sigma = np.broadcast_arrays(
        np.asarray(underlying_prices, dtype=float),
        np.asarray(volatilities, dtype=float),
    )
    if not np.all(np.isfinite(spot)) or np.any(spot <= 0):
        raise DomainRangeError("underlying prices must be positive", field="underlying_price", value=underlying_prices)
    if not np.all(np.isfinite(sigma)) or np.any(sigma < 0):
        raise DomainRangeError("volatility must be non-negative", field="volatility", value=volatilities)
    require_positive(strike, "strike")
    require_finite(time_to_expiry, "time_to_expiry")

    is_call = OptionType(option_type) == OptionType.CALL

    if time_to_expiry <= 0:
        if is_call:
            return np.maximum(spot - strike, 0.0)
        return np.maximum(strike - spot, 0.0)

    discounted_spot = spot * math.exp(-dividend_yield * time_to_expiry)
    discounted_strike = strike * math.exp(-risk_free_rate * time_to_expiry)

    with np.errstate(divide="ignore", invalid="ignore"):
        vol_sqrt_t = sigma * math.sqrt(time_to_expiry)
        d1 = (
            np.log(spot / strike)
            + (risk_free_rate - dividend_yield + 0.5 * sigma * sigma) * time_to_expiry
        ) / vol_sqrt_t
        d2 = d1 - vol_sqrt_t
        call = discounted_spot * norm.cdf(d1) - discounted_strike * norm.cdf(d2)

    # sigma == 0 collapses to discounted intrinsic value
    call = np.where(sigma > 0, call, np.maximum(discounted_spot - discounted_strike, 0.0))

    if is_call:
        return call
    return call - discounted_spot + discounted_strike


def black_scholes_price(
    option_type: OptionType,
    underlying_price: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
    dividend_yield: float = 0.0,
) -> float:
    """Return the per-share Black-Scholes-Merton price from raw inputs."""
    _validate_inputs(underlying_price, strike, time_to_expiry, volatility, risk_free_rate, dividend_yield)
    if time_to_expiry <= 0:
        return intrinsic_value(OptionType(option_type), underlying_price, strike)
    return float(
        black_scholes_price_grid(
            option_type,
            underlying_price,
            strike,
            time_to_expiry,
            volatility,
            risk_free_rate,
            dividend_yield,
        )
    )


def black_scholes_greeks(
    option_type: OptionType,
    underlying_price: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float,
    dividend_yield: float = 0.0,
) -> GreeksCalculation:
    """
    Return analytic per-share Greeks from raw inputs.

    Expired options (T <= 0) have all-zero Greeks. With zero volatility the
    Greeks are those of the discounted intrinsic value.
    """
    _validate_inputs(underlying_price, strike, time_to_expiry, volatility, risk_free_rate, dividend_yield)
    if time_to_expiry <= 0:
        return GreeksCalculation.zero()

    is_call = OptionType(option_type) == OptionType.CALL
    T = time_to_expiry
    S, K, r, q = underlying_price, strike, risk_free_rate, dividend_yield
    disc_q = math.exp(-q * T)
    disc_r = math.exp(-r * T)

    if volatility == 0:
        return _zero_volatility_greeks(is_call, S, K, T, r, q, disc_q, disc_r)

    sqrt_t = math.sqrt(T)
    d1, d2 = d1_d2(S, K, T, volatility, r, q)
    pdf_d1 = float(norm.pdf(d1))

    gamma = disc_q * pdf_d1 / (S * volatility * sqrt_t)
    vega = S * disc_q * pdf_d1 * sqrt_t / 100.0
    decay = -(S * pdf_d1 * volatility * disc_q) / (2.0 * sqrt_t)

    if is_call:
        n_d1 = float(norm.cdf(d1))
        n_d2 = float(norm.cdf(d2))
        delta = disc_q * n_d1
        theta = (decay - r * K * disc_r * n_d2 + q * S * disc_q * n_d1) / DAYS_PER_YEAR
        rho = K * T * disc_r * n_d2 / 100.0
    else:
        n_minus_d1 = float(norm.cdf(-d1))
        n_minus_d2 = float(norm.cdf(-d2))
        delta = -disc_q * n_minus_d1
        theta = (decay + r * K * disc_r * n_minus_d2 - q * S * disc_q * n_minus_d1) / DAYS_PER_YEAR
        rho = -K * T * disc_r * n_minus_d2 / 100.0

    return GreeksCalculation(delta=delta, gamma=gamma, theta=theta, vega=vega, rho=rho)


def _zero_volatility_greeks(
    is_call: bool,
    S: float,
    K: float,
    T: float,
    r: float,
    q: float,
    disc_q: float,
    disc_r: float,
) -> GreeksCalculation:
    forward_moneyness = S * disc_q - K * disc_r
    in_the_money = forward_moneyness > 0 if is_call else forward_moneyness < 0
    if not in_the_money:
        return GreeksCalculation.zero()

    sign = 1.0 if is_call else -1.0
    return GreeksCalculation(
        delta=sign * disc_q,
        gamma=0.0,
        theta=sign * (q * S * disc_q - r * K * disc_r) / DAYS_PER_YEAR,
        vega=0.0,
        rho=sign * K * T * disc_r / 100.0,
    )


def _resolve_as_of(as_of: date | None) -> date:
    return as_of if as_of is not None else date.today()


def calculate_option_price(
    contract: OptionContract,
    underlying_price: float,
    volatility: float,
    risk_free_rate: float,
    dividend_yield: float = 0.0,
    as_of: date | None = None,
) -> float:
    """
    Calculate the theoretical per-share price of a contract.

    Args:
        contract: Option contract
        underlying_price: Current underlying price (S)
        volatility: Annualized volatility as a decimal (sigma)
        risk_free_rate: Annualized risk-free rate (r)
        dividend_yield: Annualized continuous dividend yield (q)
        as_of: Valuation date (default: today)

    Returns:
        Per-share option price

    Raises:
        DomainRangeError: If any input is outside its domain
    """
    T = time_to_expiration(contract.expiration, _resolve_as_of(as_of))
    return black_scholes_price(
        contract.option_type,
        underlying_price,
        contract.strike,
        T,
        volatility,
        risk_free_rate,
        dividend_yield,
    )


def calculate_option_greeks(
    contract: OptionContract,
    underlying_price: float,
    volatility: float,
    risk_free_rate: float,
    dividend_yield: float = 0.0,
    as_of: date | None = None,
) -> GreeksCalculation:
    """
    Calculate per-share Greeks of a contract.

    Returns:
        GreeksCalculation (theta per day, vega/rho per 1 point)

    Raises:
        DomainRangeError: If any input is outside its domain
    """
    T = time_to_expiration(contract.expiration, _resolve_as_of(as_of))
    return black_scholes_greeks(
        contract.option_type,
        underlying_price,
        contract.strike,
        T,
        volatility,
        risk_free_rate,
        dividend_yield,
    )


def calculate_implied_volatility(
    contract: OptionContract,
    underlying_price: float,
    market_price: float,
    risk_free_rate: float,
    dividend_yield: float = 0.0,
    as_of: date | None = None,
    *,
    initial_guess: float = IV_INITIAL_GUESS,
    max_iterations: int = IV_MAX_ITERATIONS,
    tolerance: float = IV_TOLERANCE,
    lower_bound: float = IV_LOWER_BOUND,
    upper_bound: float = IV_UPPER_BOUND,
) -> float:
    """
    Solve for the volatility that reprices the contract at market_price.

    Newton-Raphson seeded at initial_guess with vega as the derivative.
    When vega is ~0 (deep ITM/OTM) or a Newton step diverges out of
    [lower_bound, upper_bound], the solver falls back to bisection over that
    bracket. Newton and bisection share the max_iterations budget.

    Args:
        contract: Option contract
        underlying_price: Current underlying price
        market_price: Observed per-share option price
        risk_free_rate: Annualized risk-free rate
        dividend_yield: Annualized continuous dividend yield
        as_of: Valuation date (default: today)
        initial_guess: Newton seed (default: 0.3)
        max_iterations: Iteration cap (default: 100)
        tolerance: Absolute price error for convergence (default: 1e-4)

    Returns:
        Implied volatility as a decimal

    Raises:
        DomainRangeError: Expired contract or price outside no-arbitrage bounds
        ConvergenceError: Iteration cap reached or no root inside the bracket
    """
    require_positive(underlying_price, "underlying_price")
    require_positive(market_price, "market_price")
    require_finite(risk_free_rate, "risk_free_rate")
    require_finite(dividend_yield, "dividend_yield")
    if not lower_bound < initial_guess < upper_bound:
        raise DomainRangeError(
            f"initial_guess {initial_guess} outside [{lower_bound}, {upper_bound}]",
            field="initial_guess",
            value=initial_guess,
        )

    T = time_to_expiration(contract.expiration, _resolve_as_of(as_of))
    if T <= 0:
        raise DomainRangeError(
            f"Implied volatility undefined for expired contract {contract.option_symbol}",
            field="expiration",
            value=contract.expiration,
        )

    S, K = underlying_price, contract.strike
    option_type = contract.option_type

    def price_error(sigma: float) -> float:
        return black_scholes_price(option_type, S, K, T, sigma, risk_free_rate, dividend_yield) - market_price

    # No-arbitrage band: discounted intrinsic < price < discounted spot (call) / strike (put)
    floor_price = black_scholes_price(option_type, S, K, T, 0.0, risk_free_rate, dividend_yield)
    if option_type == OptionType.CALL:
        cap_price = S * math.exp(-dividend_yield * T)
    else:
        cap_price = K * math.exp(-risk_free_rate * T)
    if not floor_price < market_price < cap_price:
        raise DomainRangeError(
            f"Market price {market_price} outside no-arbitrage bounds "
            f"({floor_price:.6f}, {cap_price:.6f}) for {contract.option_symbol}",
            field="market_price",
            value=market_price,
        )

    sigma = initial_guess
    iterations = 0

    # Newton-Raphson
    while iterations < max_iterations:
        iterations += 1
        error = price_error(sigma)
        if abs(error) < tolerance:
            logger.debug(f"IV converged (newton) for {contract.option_symbol}: {sigma:.6f} in {iterations} iterations")
            return sigma

        raw_vega = black_scholes_greeks(option_type, S, K, T, sigma, risk_free_rate, dividend_yield).vega * 100.0
        if raw_vega < VEGA_FLOOR:
            logger.debug(f"Vega ~0 at sigma={sigma:.4f}, falling back to bisection")
            break

        next_sigma = sigma - error / raw_vega
        if not math.isfinite(next_sigma) or not lower_bound < next_sigma < upper_bound:
            logger.debug(f"Newton step diverged to {next_sigma}, falling back to bisection")
            break
        sigma = next_sigma
    else:
        raise ConvergenceError(
            f"Implied volatility did not converge for {contract.option_symbol} "
            f"after {iterations} iterations",
            iterations=iterations,
            last_estimate=sigma,
            price_error=abs(price_error(sigma)),
        )

    # Bisection fallback
    low, high = lower_bound, upper_bound
    error_low, error_high = price_error(low), price_error(high)
    if error_low > 0 or error_high < 0:
        raise ConvergenceError(
            f"Implied volatility for {contract.option_symbol} lies outside "
            f"[{lower_bound}, {upper_bound}]",
            iterations=iterations,
            last_estimate=sigma,
            price_error=min(abs(error_low), abs(error_high)),
        )

    mid = sigma
    while iterations < max_iterations:
        iterations += 1
        mid = 0.5 * (low + high)
        error = price_error(mid)
        if abs(error) < tolerance:
            logger.debug(f"IV converged (bisection) for {contract.option_symbol}: {mid:.6f} in {iterations} iterations")
            return mid
        if error > 0:
            high = mid
        else:
            low = mid

    raise ConvergenceError(
        f"Implied volatility did not converge for {contract.option_symbol} "
        f"after {iterations} iterations",
        iterations=iterations,
        last_estimate=mid,
        price_error=abs(price_error(mid)),
    )
