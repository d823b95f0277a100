"""
Logging setup.

Configures loguru logger for the presale data-access layer.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from presale.config.settings import Settings, settings


def setup_logging(config: Settings | None = None) -> None:
    """Configure logger with stderr and rotating file sinks."""
    config = config or settings

    logger.remove()
    logger.add(sys.stderr, level=config.log_level)
    logger.add(
        config.log_file,
        rotation=config.log_rotation,
        retention=config.log_retention,
        level=config.log_level,
        encoding="utf-8",
    )

    logger.info(
        "Presale logging configured",
        extra={"environment": config.environment, "level": config.log_level},
    )
