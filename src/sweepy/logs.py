"""File logging for sweepy."""

import logging
from pathlib import Path
from typing import Optional

LOG_FILENAME = "sweepy_log.txt"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Attach a file handler to the ``sweepy`` logger.

    Calling this more than once replaces the previous handler.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: Destination (defaults to sweepy_log.txt in the working directory)

    Returns:
        The configured ``sweepy`` logger
    """
    logger = logging.getLogger("sweepy")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        if getattr(handler, "_sweepy", False):
            logger.removeHandler(handler)
            handler.close()

    try:
        handler = logging.FileHandler(log_file or Path(LOG_FILENAME), encoding="utf-8")
    except OSError:
        # Read-only working directory: keep running without a log file
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._sweepy = True
    logger.addHandler(handler)
    return logger
