"""Logging setup - every module gets its logger through get_logger(__name__)."""
import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


def setup_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the root logger once."""
    global _initialized
    if _initialized:
        logging.getLogger().setLevel(_level(level))
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(_level(level))
    root.addHandler(handler)
    _initialized = True


def _level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
