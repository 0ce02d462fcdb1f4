"""
Configuration

Dataclass configuration loaded from YAML with OPTIONS_ANALYTICS_* environment
overrides, plus loguru setup.
"""

from options_analytics.config.analytics_config import (
    AnalyticsConfig,
    AnalyticsMetricsConfig,
    AnalyzerConfig,
    LoggingConfig,
    PricingDefaults,
    ValidationConfig,
    load_analytics_config,
)
from options_analytics.config.loader import dump_config, load_config, merge_config_with_env
from options_analytics.config.logging import configure_logging

__all__ = [
    "AnalyticsConfig",
    "AnalyticsMetricsConfig",
    "AnalyzerConfig",
    "LoggingConfig",
    "PricingDefaults",
    "ValidationConfig",
    "load_analytics_config",
    "dump_config",
    "load_config",
    "merge_config_with_env",
    "configure_logging",
]
