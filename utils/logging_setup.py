"""Logging configuration shared by the engine and services"""
import logging
from logging.handlers import RotatingFileHandler

ROOT_LOGGER = "dotdiff"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name=None):
    """Return the application logger or one of its children."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(debug=None, log_file=None):
    """
    Attach handlers to the application logger.

    The level follows config.DEBUG unless debug is given. Calling this more
    than once does not stack handlers.
    """
    if debug is None:
        from config import DEBUG
        debug = DEBUG

    level = logging.DEBUG if debug else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    if not any(getattr(h, "_dotdiff_stream", False) for h in logger.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler._dotdiff_stream = True
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_file and not any(
        isinstance(h, RotatingFileHandler) and h.baseFilename.endswith(str(log_file))
        for h in logger.handlers
    ):
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning(f"Cannot open log file {log_file}: {e}")
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger
