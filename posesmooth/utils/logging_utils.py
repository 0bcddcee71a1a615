"""
Logging configuration for applications embedding the smoothing core.
"""

import logging
import sys

CONSOLE_HANDLER_NAME = 'posesmooth-console'


def setup_logging(level: int = logging.INFO) -> logging.Handler:
    """
    Configure console logging for the smoothing core.

    Args:
        level: Level for the posesmooth loggers

    Returns:
        The installed console handler
    """
    package_logger = logging.getLogger('posesmooth')

    # Set specific levels for components
    logging.getLogger('posesmooth.core').setLevel(level)
    logging.getLogger('posesmooth.config').setLevel(level)

    # Reuse the handler of an earlier call
    for handler in package_logger.handlers:
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            handler.setLevel(level)
            package_logger.setLevel(level)
            return handler

    # Create formatter
    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler (for terminal output)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.set_name(CONSOLE_HANDLER_NAME)

    # Configure package logger
    package_logger.setLevel(level)
    package_logger.addHandler(console_handler)

    return console_handler
