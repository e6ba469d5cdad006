"""
Logging setup
Single loguru sink shared by every component
"""

import sys
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_configured_level = None


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with the service sink (idempotent per level)"""
    global _configured_level

    level = level.upper()
    if _configured_level == level:
        return

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, enqueue=False)
    _configured_level = level
    logger.debug(f"Logging configured at {level}")
