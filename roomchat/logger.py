# ============================================
#   RoomChat - Central logger
# ============================================

import logging
from logging.handlers import TimedRotatingFileHandler

from roomchat.config import LOG_FILE, LOG_LEVEL, LOGGER_NAME, LOG_BACKUP_DAYS

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler() -> logging.Handler:
    handler = TimedRotatingFileHandler(
        LOG_FILE,
        when="midnight",
        backupCount=LOG_BACKUP_DAYS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    return handler


def root_logger() -> logging.Logger:
    """
    The application logger (ROOMCHAT_LOGGER_NAME, "roomchat" by default),
    set up on first use: one daily rotating file, no propagation to the
    process root logger.
    """
    logger = logging.getLogger(LOGGER_NAME)

    # handlers survive re-imports (reloader, tests)
    if not logger.handlers:
        logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
        logger.addHandler(_file_handler())
        logger.propagate = False

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Child logger per module: get_logger("rooms") → roomchat.rooms"""
    return root_logger().getChild(module_name)


def log_info(module: str, message: str):
    get_logger(module).info(message)


def log_warning(module: str, message: str):
    get_logger(module).warning(message)


def log_error(module: str, message: str):
    get_logger(module).error(message)


def log_exception(module: str, message: str):
    """Same as log_error, with the current traceback. Call from an except block."""
    get_logger(module).exception(message)
