"""
Logging Setup

Configures loguru sinks from LoggingConfig.
"""

import sys

from loguru import logger

from options_analytics.config.analytics_config import LoggingConfig


def configure_logging(config: LoggingConfig | None = None) -> None:
    """
    Replace the default loguru sink with stderr (+ optional rotating file).

    Args:
        config: LoggingConfig (default: LoggingConfig())
    """
    config = config or LoggingConfig()
    level = config.level.upper()

    logger.remove()
    logger.add(sys.stderr, format=config.format, level=level)

    if config.file:
        logger.add(
            config.file,
            format=config.format,
            level=level,
            rotation=config.rotation,
            retention=config.retention,
            compression="zip",
        )

    logger.debug(f"Logging configured: level={level}, file={config.file}")
