"""
Analytics Configuration Loader

Loads and validates analytics configuration from YAML file.

Config location: config/analytics.yaml

Schema:
- pricing: Pricing defaults and implied-volatility solver settings
- analyzer: Sweep ranges and recommendation thresholds
- validation: Strategy validation thresholds
- metrics: Performance/risk metric settings
- logging: Log level, format and optional file sink
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml
from loguru import logger


@dataclass
class PricingDefaults:
    """Pricing defaults and implied-volatility solver settings."""
    risk_free_rate: float = 0.05
    dividend_yield: float = 0.0
    iv_initial_guess: float = 0.3
    iv_tolerance: float = 1e-4
    iv_max_iterations: int = 100
    iv_lower_bound: float = 0.001
    iv_upper_bound: float = 5.0


@dataclass
class AnalyzerConfig:
    """Multi-leg analyzer sweeps and recommendation thresholds."""
    pnl_range_low: float = 0.7        # x underlying price
    pnl_range_high: float = 1.3
    pnl_steps: int = 50               # minimum 50
    time_step_days: int = 5
    vol_range_low: float = 0.5        # x base volatility
    vol_range_high: float = 1.5
    vol_steps: int = 20               # minimum 20

    # Recommendation thresholds
    high_delta: float = 0.5
    high_gamma: float = 0.1
    high_theta: float = -50.0         # per day
    high_vega: float = 100.0
    low_probability_of_profit: float = 0.4
    iron_condor_min_return: float = 0.1   # max profit / margin
    straddle_max_delta: float = 0.1


@dataclass
class ValidationConfig:
    """Strategy validation thresholds."""
    max_legs: int = 4
    assignment_window_days: int = 30
    expiry_warning_days: int = 7
    min_option_volume: int = 10
    iv_rank_high: float = 80.0
    iv_rank_low: float = 20.0


@dataclass
class AnalyticsMetricsConfig:
    """Performance and risk metric settings."""
    trading_days: int = 252
    expected_shortfall_confidence: float = 0.95
    sharpe_risk_free_rate: float = 0.02


@dataclass
class LoggingConfig:
    """Logging configuration for loguru."""
    level: str = "INFO"
    format: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "7 days"


_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AnalyticsConfig:
    """Complete analytics configuration."""

    pricing: PricingDefaults = None
    analyzer: AnalyzerConfig = None
    validation: ValidationConfig = None
    metrics: AnalyticsMetricsConfig = None
    logging: LoggingConfig = None

    def __post_init__(self):
        """Set defaults after initialization."""
        if self.pricing is None:
            self.pricing = PricingDefaults()
        if self.analyzer is None:
            self.analyzer = AnalyzerConfig()
        if self.validation is None:
            self.validation = ValidationConfig()
        if self.metrics is None:
            self.metrics = AnalyticsMetricsConfig()
        if self.logging is None:
            self.logging = LoggingConfig()

    @classmethod
    def from_dict(cls, data: dict) -> "AnalyticsConfig":
        """Create config from dictionary with nested dataclass instantiation."""
        pricing = data.get("pricing") or {}
        analyzer = data.get("analyzer") or {}
        validation = data.get("validation") or {}
        metrics = data.get("metrics") or {}
        log = data.get("logging") or {}

        return cls(
            pricing=PricingDefaults(**pricing),
            analyzer=AnalyzerConfig(**analyzer),
            validation=ValidationConfig(**validation),
            metrics=AnalyticsMetricsConfig(**metrics),
            logging=LoggingConfig(**log),
        )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Validate pricing
        if self.pricing.iv_tolerance <= 0:
            errors.append(f"iv_tolerance must be positive: {self.pricing.iv_tolerance}")
        if self.pricing.iv_max_iterations < 1:
            errors.append(f"iv_max_iterations must be >= 1: {self.pricing.iv_max_iterations}")
        if not (0 < self.pricing.iv_lower_bound < self.pricing.iv_upper_bound):
            errors.append(
                f"IV bracket must satisfy 0 < lower < upper: "
                f"[{self.pricing.iv_lower_bound}, {self.pricing.iv_upper_bound}]"
            )
        elif not (self.pricing.iv_lower_bound <= self.pricing.iv_initial_guess <= self.pricing.iv_upper_bound):
            errors.append(f"iv_initial_guess must lie inside the IV bracket: {self.pricing.iv_initial_guess}")

        # Validate analyzer
        if not (0 < self.analyzer.pnl_range_low < 1 < self.analyzer.pnl_range_high):
            errors.append(
                f"P&L range must satisfy 0 < low < 1 < high: "
                f"[{self.analyzer.pnl_range_low}, {self.analyzer.pnl_range_high}]"
            )
        if self.analyzer.pnl_steps < 50:
            errors.append(f"pnl_steps must be >= 50: {self.analyzer.pnl_steps}")
        if self.analyzer.time_step_days < 1:
            errors.append(f"time_step_days must be >= 1: {self.analyzer.time_step_days}")
        if not (0 < self.analyzer.vol_range_low < 1 < self.analyzer.vol_range_high):
            errors.append(
                f"Volatility range must satisfy 0 < low < 1 < high: "
                f"[{self.analyzer.vol_range_low}, {self.analyzer.vol_range_high}]"
            )
        if self.analyzer.vol_steps < 20:
            errors.append(f"vol_steps must be >= 20: {self.analyzer.vol_steps}")
        if not (0 <= self.analyzer.low_probability_of_profit <= 1):
            errors.append(
                f"low_probability_of_profit must be between 0 and 1: {self.analyzer.low_probability_of_profit}"
            )

        # Validate validation thresholds
        if self.validation.max_legs < 1:
            errors.append(f"max_legs must be >= 1: {self.validation.max_legs}")
        if self.validation.assignment_window_days < 0:
            errors.append(f"assignment_window_days must be >= 0: {self.validation.assignment_window_days}")
        if self.validation.expiry_warning_days < 0:
            errors.append(f"expiry_warning_days must be >= 0: {self.validation.expiry_warning_days}")
        if self.validation.min_option_volume < 0:
            errors.append(f"min_option_volume must be >= 0: {self.validation.min_option_volume}")
        if not (0 <= self.validation.iv_rank_low < self.validation.iv_rank_high <= 100):
            errors.append(
                f"IV rank thresholds must satisfy 0 <= low < high <= 100: "
                f"[{self.validation.iv_rank_low}, {self.validation.iv_rank_high}]"
            )

        # Validate metrics
        if self.metrics.trading_days < 1:
            errors.append(f"trading_days must be >= 1: {self.metrics.trading_days}")
        if not (0 < self.metrics.expected_shortfall_confidence < 1):
            errors.append(
                f"expected_shortfall_confidence must be between 0 and 1: "
                f"{self.metrics.expected_shortfall_confidence}"
            )

        # Validate logging
        if str(self.logging.level).upper() not in _LOG_LEVELS:
            errors.append(f"Invalid log level: {self.logging.level}")

        return errors


def load_analytics_config(config_path: Optional[str] = None) -> AnalyticsConfig:
    """
    Load analytics configuration from YAML file.

    Args:
        config_path: Path to config file (default: config/analytics.yaml)

    Returns:
        AnalyticsConfig object

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        # Determine project root and config path
        project_root = Path(__file__).parent.parent.parent.parent
        config_path = project_root / "config" / "analytics.yaml"

    config_file = Path(config_path)

    if not config_file.exists():
        logger.warning(f"Analytics config file not found: {config_file}, using defaults")
        return AnalyticsConfig()

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML config: {e}") from e

    if not data:
        logger.warning(f"Empty config file: {config_file}, using defaults")
        return AnalyticsConfig()

    try:
        config = AnalyticsConfig.from_dict(data)
    except TypeError as e:
        # Unknown keys in a section
        raise ValueError(f"Invalid analytics config: {e}") from e

    errors = config.validate()
    if errors:
        error_msg = "Configuration validation errors:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)

    logger.info(f"✓ Loaded analytics config from {config_file}")
    logger.debug(f"  Risk-free rate: {config.pricing.risk_free_rate}")
    logger.debug(f"  IV solver: tol={config.pricing.iv_tolerance}, max_iter={config.pricing.iv_max_iterations}")
    logger.debug(f"  P&L steps: {config.analyzer.pnl_steps}, vol steps: {config.analyzer.vol_steps}")

    return config
