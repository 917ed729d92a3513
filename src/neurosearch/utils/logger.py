"""
Logging Helper Module

This module provides the 'get_logger' helper used throughout the package.
Loggers write to stdout and, optionally, to a log file; each named logger
is configured only once, so repeated calls are cheap and never duplicate
handlers.

Functions:
    get_logger: Return a configured logger
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT  = "%(asctime)s | %(levelname)7s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

def get_logger(name: str = "neurosearch", level: int = logging.INFO, logfile: str | None = None) -> logging.Logger:
    """
    Return the logger called 'name', attaching handlers on first use.

    Parameters:
        name:    Name of the logger (normally the module's __name__)
        level:   Logging threshold
        logfile: If given, messages are also appended to this file

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger  # already configured

    logger.setLevel(level)
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if logfile:
        log_dir = Path(logfile).parent
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger
