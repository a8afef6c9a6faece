"""Console logging for the app and scripts."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.INFO, logger_name: Optional[str] = "mintemp") -> logging.Logger:
    """
    Configure console logging for the ``mintemp`` package.

    Safe to call on every Streamlit rerun: the handler is only attached once.

    Parameters:
    -----------
    level : int
        Logging level
    logger_name : str, optional
        Logger to configure (None for the root logger)

    Returns:
    --------
    logger : logging.Logger
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    if not any(getattr(h, '_mintemp_handler', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._mintemp_handler = True
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
