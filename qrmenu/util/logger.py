"""
Colored logger used across the qrmenu service.
"""

import logging
import os
from typing import Optional

import coloredlogs

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG
}

LOG_LEVEL = os.environ.get("QRMENU_LOG_LEVEL", "INFO")

COLORED_FORMATTER = coloredlogs.ColoredFormatter(
    fmt="[%(asctime)s] [%(hostname)s] [%(name)s] [%(levelname)s] %(message)s",
    level_styles={
        'debug': {'color': 'white'},
        'info': {'color': 'green'},
        'warning': {'color': 'yellow', 'bright': True},
        'error': {'color': 'red', 'bold': True, 'bright': True},
        'critical': {'color': 'black', 'bold': True, 'background': 'red'}
    },
    field_styles={
        'asctime': {'color': 'white'},
        'hostname': {'color': 'magenta'},
        'name': {'color': 'blue', 'bright': True},
        'levelname': {'color': 'white', 'bold': True},
    },
    datefmt="%Y-%m-%d %H:%M:%S"
)


class MenuLogger:
    """
    Thin wrapper over a named stdlib logger with a colored console handler.

    Usage:
        logger = MenuLogger(__name__)
        logger.info("menu loaded")
        logger.error("order insert failed", exc_info=True)
    """

    def __init__(self, module_name: str = "", level: Optional[str] = None) -> None:
        self.logger = logging.getLogger(module_name)

        if not self.logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(COLORED_FORMATTER)
            console_handler.addFilter(coloredlogs.HostNameFilter())
            self.logger.addHandler(console_handler)

            log_level = level if level else LOG_LEVEL
            self.logger.setLevel(LOG_LEVELS.get(log_level, LOG_LEVELS["INFO"]))

            # handler is attached here, so don't bubble up to root as well
            self.logger.propagate = False

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str, exc_info: bool = False) -> None:
        self.logger.error(message, exc_info=exc_info)

    def critical(self, message: str, exc_info: bool = False) -> None:
        self.logger.critical(message, exc_info=exc_info)
