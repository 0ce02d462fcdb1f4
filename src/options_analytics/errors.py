"""
Options Analytics Exceptions

Error taxonomy for the analytics core. All failures are deterministic given
the same inputs, so none of these are retried inside the package.

- StrategyDefinitionError: invalid strike ordering / leg arity at construction
- ConvergenceError: implied-volatility solver did not converge
- DomainRangeError: non-positive or non-finite input where a positive value is required
- PositionStateError: illegal position lifecycle transition

Validation findings (liquidity, assignment risk, regime mismatch) are never
raised; they are returned as warnings on StrategyValidation.
"""

import math
from numbers import Real


class OptionsAnalyticsError(Exception):
    """Base class for all options analytics errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return user-friendly string representation."""
        return self.message


class StrategyDefinitionError(OptionsAnalyticsError):
    """
    Exception raised when a strategy cannot be constructed.

    Raised for non-monotonic strikes, wrong leg arity, or inconsistent legs
    (mixed expirations where the variant requires one, side/action mismatch).

    Attributes:
        message: Human-readable error message
        strategy_type: Strategy variant being built (if known)

    Example:
        >>> try:
        ...     create_iron_condor(spec)
        ... except StrategyDefinitionError as e:
        ...     print(f"Rejected {e.strategy_type}: {e}")
    """

    def __init__(self, message: str, *, strategy_type: str | None = None):
        self.strategy_type = strategy_type
        OptionsAnalyticsError.__init__(self, message)

    def __repr__(self) -> str:
        return f"StrategyDefinitionError({self.strategy_type}: {self.message})"


class ConvergenceError(OptionsAnalyticsError):
    """
    Exception raised when the implied-volatility solver does not converge.

    The caller should retry with a different seed or accept a stale value.
    The last estimate is carried for diagnostics only and must never be used
    as a result.

    Attributes:
        message: Human-readable error message
        iterations: Number of iterations performed
        last_estimate: Last volatility estimate before giving up
        price_error: Absolute pricing error at last_estimate
    """

    def __init__(
        self,
        message: str,
        *,
        iterations: int,
        last_estimate: float | None = None,
        price_error: float | None = None,
    ):
        self.iterations = iterations
        self.last_estimate = last_estimate
        self.price_error = price_error
        OptionsAnalyticsError.__init__(self, message)

    def __repr__(self) -> str:
        return (
            f"ConvergenceError(iterations={self.iterations}, "
            f"last_estimate={self.last_estimate}, price_error={self.price_error})"
        )


class DomainRangeError(OptionsAnalyticsError, ValueError):
    """
    Exception raised when an input is outside its valid domain.

    Examples: strike <= 0, volatility < 0, underlying price <= 0, NaN inputs.
    Malformed market inputs are rejected with this error, never replaced with
    synthetic data.

    Attributes:
        message: Human-readable error message
        field: Name of the offending input
        value: Offending value
    """

    def __init__(self, message: str, *, field: str, value: object = None):
        self.field = field
        self.value = value
        OptionsAnalyticsError.__init__(self, message)

    def __repr__(self) -> str:
        return f"DomainRangeError({self.field}={self.value!r}: {self.message})"


class PositionStateError(OptionsAnalyticsError):
    """Exception raised for a transition out of a terminal position status."""

    def __init__(self, message: str, *, position_id: str, status: str):
        self.position_id = position_id
        self.status = status
        OptionsAnalyticsError.__init__(self, message)


def require_positive(value: float, field: str) -> float:
    """Return value if it is a finite number > 0, else raise DomainRangeError."""
    if not _is_finite_number(value) or value <= 0:
        raise DomainRangeError(f"{field} must be positive, got {value}", field=field, value=value)
    return value


def require_non_negative(value: float, field: str) -> float:
    """Return value if it is a finite number >= 0, else raise DomainRangeError."""
    if not _is_finite_number(value) or value < 0:
        raise DomainRangeError(f"{field} must be non-negative, got {value}", field=field, value=value)
    return value


def require_finite(value: float, field: str) -> float:
    """Return value if it is a finite number, else raise DomainRangeError."""
    if not _is_finite_number(value):
        raise DomainRangeError(f"{field} must be a finite number, got {value}", field=field, value=value)
    return value


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)
