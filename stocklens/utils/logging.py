"""Logging setup built on loguru."""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from stocklens.config.schemas import LoggingConfig

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> - <level>{message}</level>"
)

logger.configure(extra={"module": "stocklens"})


def setup_logging(config: "LoggingConfig | None" = None) -> None:
    """Configure loguru sinks from logging configuration.

    Removes the default handler and installs a stderr sink at the configured
    level, plus a rotating file sink when ``config.file`` is set.

    Args:
        config: Logging configuration. If None, INFO to stderr.
    """
    level = config.level if config else "INFO"
    fmt = config.format if config and config.format else DEFAULT_FORMAT

    logger.remove()
    logger.add(sys.stderr, level=level, format=fmt)

    if config and config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=level,
            format=fmt,
            rotation=config.rotation,
            retention=config.retention,
        )

    logger.bind(module="stocklens.utils.logging").debug(f"Logging configured at {level}")


def get_logger(name: str):
    """Get a logger bound to a module name.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        loguru logger with ``module`` bound in ``extra``
    """
    return logger.bind(module=name)
