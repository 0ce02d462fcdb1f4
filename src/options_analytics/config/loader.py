"""
Configuration Loader Module

Provides utilities for loading analytics configuration from files and
environment variables.
"""

import os
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from options_analytics.config.analytics_config import AnalyticsConfig, load_analytics_config

# env var -> (section, key, type)
ENV_MAPPING = {
    "OPTIONS_ANALYTICS_RISK_FREE_RATE": ("pricing", "risk_free_rate", float),
    "OPTIONS_ANALYTICS_DIVIDEND_YIELD": ("pricing", "dividend_yield", float),
    "OPTIONS_ANALYTICS_IV_TOLERANCE": ("pricing", "iv_tolerance", float),
    "OPTIONS_ANALYTICS_IV_MAX_ITERATIONS": ("pricing", "iv_max_iterations", int),
    "OPTIONS_ANALYTICS_PNL_STEPS": ("analyzer", "pnl_steps", int),
    "OPTIONS_ANALYTICS_VOL_STEPS": ("analyzer", "vol_steps", int),
    "OPTIONS_ANALYTICS_MIN_OPTION_VOLUME": ("validation", "min_option_volume", int),
    "OPTIONS_ANALYTICS_TRADING_DAYS": ("metrics", "trading_days", int),
    "OPTIONS_ANALYTICS_SHARPE_RISK_FREE_RATE": ("metrics", "sharpe_risk_free_rate", float),
    "OPTIONS_ANALYTICS_ES_CONFIDENCE": ("metrics", "expected_shortfall_confidence", float),
    "OPTIONS_ANALYTICS_LOG_LEVEL": ("logging", "level", str),
    "OPTIONS_ANALYTICS_LOG_FILE": ("logging", "file", str),
}


def merge_config_with_env(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration with environment variables.

    Environment variables override config file settings.
    Prefix with OPTIONS_ANALYTICS_ for analytics settings.

    Examples:
        OPTIONS_ANALYTICS_RISK_FREE_RATE=0.045
        OPTIONS_ANALYTICS_PNL_STEPS=100
        OPTIONS_ANALYTICS_LOG_LEVEL=DEBUG

    Args:
        config_data: Configuration data from file

    Returns:
        Merged configuration with env vars applied

    Raises:
        ValueError: If an env value cannot be converted to its type
    """
    merged = {section: dict(values or {}) for section, values in config_data.items()}

    for env_var, (section, key, cast) in ENV_MAPPING.items():
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue
        try:
            merged.setdefault(section, {})[key] = cast(env_value)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {env_value!r}") from e

        logger.debug(f"Overriding {section}.{key} from env: {env_var}")

    return merged


def load_config(config_path: Optional[str] = None) -> AnalyticsConfig:
    """
    Load analytics configuration with environment overrides.

    Args:
        config_path: Path to YAML config file (default: config/analytics.yaml)

    Returns:
        AnalyticsConfig instance (defaults when the file is missing or empty)

    Raises:
        ValueError: If configuration is invalid
    """
    base = load_analytics_config(config_path)
    data = {
        "pricing": vars(base.pricing),
        "analyzer": vars(base.analyzer),
        "validation": vars(base.validation),
        "metrics": vars(base.metrics),
        "logging": vars(base.logging),
    }

    config = AnalyticsConfig.from_dict(merge_config_with_env(data))

    errors = config.validate()
    if errors:
        error_msg = "Configuration validation errors:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)

    return config


def dump_config(config: AnalyticsConfig) -> str:
    """Render a configuration back to YAML."""
    data = {
        "pricing": vars(config.pricing),
        "analyzer": vars(config.analyzer),
        "validation": vars(config.validation),
        "metrics": vars(config.metrics),
        "logging": vars(config.logging),
    }
    return yaml.safe_dump(data, sort_keys=False)
