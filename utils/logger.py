"""
Logging setup for the inventory app.

Modules log through ``logging.getLogger(__name__)``; ``setup_logging`` wires
the handlers once, on the ``inventory_core`` / ``utils`` / ``app`` loggers:
- console handler (stdout)
- rotating app log
- rotating error log (ERROR and above)

The handlers are built once and shared, so each log file has a single
rotating handler.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOGGER_NAMES = ("inventory_core", "utils", "app")


def build_handlers(log_dir="logs", to_file=True):
    """
    Create the console handler and, when ``to_file`` is set, the rotating
    app and error log handlers.

    Returns:
        list[logging.Handler]: Handlers ready to attach to a logger.
    """
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if to_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "app.log"), maxBytes=10*1024*1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

        error_file_handler = RotatingFileHandler(
            os.path.join(log_dir, "error.log"), maxBytes=10*1024*1024, backupCount=5, encoding="utf-8"
        )
        error_file_handler.setFormatter(formatter)
        error_file_handler.setLevel(logging.ERROR)
        handlers.append(error_file_handler)

    return handlers


def setup_logging(level="INFO", log_dir="logs", to_file=True, names=LOGGER_NAMES):
    """
    Attach handlers to the project loggers.

    Args:
        level (str | int): Logging level name or number.
        log_dir (str): Directory for the rotating log files.
        to_file (bool): Whether to write log files at all.
        names (tuple[str]): Loggers to configure.

    Returns:
        logging.Logger: The first configured logger.
    """
    handlers = None

    for name in names:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Check if handlers are already added to avoid duplicate logs
        if logger.handlers:
            continue

        if handlers is None:
            handlers = build_handlers(log_dir, to_file)
        for handler in handlers:
            logger.addHandler(handler)

        logger.propagate = False

    return logging.getLogger(names[0])
