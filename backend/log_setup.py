import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_root_handler = None


def current_level() -> int:
    name = os.getenv("NOTIFLOG_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Module logger sharing one console handler; re-reads NOTIFLOG_LOG_LEVEL each call."""
    global _root_handler

    level = current_level()
    root = logging.getLogger()

    if _root_handler is None:
        _root_handler = logging.StreamHandler()
        _root_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(_root_handler)
    root.setLevel(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
